"""SRT subtitle parser and formatter for structure-first translation."""

import logging
from dataclasses import dataclass
from typing import List

logger = logging.getLogger(__name__)

# Number of entries submitted to the provider in a single batch
DEFAULT_BATCH_SIZE = 100

TIMECODE_SEPARATOR = "-->"


@dataclass
class SubtitleEntry:
    """
    A single timed subtitle unit.

    The timecode is kept as the raw timing line from the source document
    and is never interpreted: it passes through translation untouched.
    """

    id: int
    timecode: str
    text: str

    def __str__(self) -> str:
        """Format entry as SRT block."""
        return f"{self.id}\n{self.timecode}\n{self.text}\n"


class SRTParser:
    """Parser for SRT subtitle documents."""

    @staticmethod
    def parse(content: str) -> List[SubtitleEntry]:
        """
        Parse SRT content into subtitle entries.

        Blocks without a numeric id, without a timing line or without any
        text are skipped with a log message.

        Args:
            content: Raw SRT file content

        Returns:
            List of SubtitleEntry objects in document order
        """
        if not content:
            return []

        # Remove BOM (Byte Order Mark) if present (common in UTF-8 files)
        if content.startswith("\ufeff"):
            content = content[1:]

        entries = []
        lines = content.replace("\r\n", "\n").replace("\r", "\n").strip().split("\n")

        i = 0
        while i < len(lines):
            # Skip empty lines
            if not lines[i].strip():
                i += 1
                continue

            try:
                entry_id = int(lines[i].strip())
            except ValueError:
                logger.warning(f"Skipping line {i + 1}, expected entry id: {lines[i]!r}")
                i += 1
                continue
            i += 1

            if entry_id < 1:
                logger.warning(f"Skipping entry with non-positive id {entry_id}")
                continue

            if i >= len(lines):
                break

            if TIMECODE_SEPARATOR not in lines[i]:
                logger.warning(f"Invalid timecode at line {i + 1}: {lines[i]!r}")
                i += 1
                continue

            timecode = lines[i]
            i += 1

            # Text may span multiple lines up to the next blank line
            text_lines = []
            while i < len(lines) and lines[i].strip():
                text_lines.append(lines[i].strip())
                i += 1

            if not text_lines:
                logger.debug(f"Skipping entry {entry_id} with no text")
                continue

            entries.append(
                SubtitleEntry(id=entry_id, timecode=timecode, text="\n".join(text_lines))
            )

        logger.info(f"Parsed {len(entries)} subtitle entries")
        return entries

    @staticmethod
    def format(entries: List[SubtitleEntry]) -> str:
        """
        Format subtitle entries back to SRT.

        One blank line separates entries and the document ends with a
        single newline.

        Args:
            entries: List of SubtitleEntry objects

        Returns:
            Formatted SRT content string
        """
        if not entries:
            return ""

        formatted = "\n\n".join(str(entry).rstrip("\n") for entry in entries)
        return formatted + "\n"


def chunk_entries(
    entries: List[SubtitleEntry], batch_size: int = DEFAULT_BATCH_SIZE
) -> List[List[SubtitleEntry]]:
    """
    Split entries into contiguous batches.

    Batches cover the input in order with no gaps and no overlap; only the
    last batch may be shorter than batch_size.

    Args:
        entries: List of all subtitle entries
        batch_size: Maximum entries per batch (must be positive)

    Returns:
        List of entry batches

    Raises:
        ValueError: If batch_size is less than 1 or entries is None
    """
    if entries is None:
        raise ValueError("Entries list cannot be None")

    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")

    batches = [entries[i : i + batch_size] for i in range(0, len(entries), batch_size)]

    logger.info(f"Split {len(entries)} entries into {len(batches)} batches")
    return batches
