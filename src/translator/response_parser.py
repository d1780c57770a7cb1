"""Recover numbered entries from a provider's batch reply."""

import logging
import re
from dataclasses import dataclass
from typing import List

from common.string_utils import truncate_for_logging

logger = logging.getLogger(__name__)

# "1. text", "1) text", "1: text", "1 - text" (markers over 9 digits are plain text)
_NUMBERED_BLOCK = re.compile(r"^(\d{1,9})[.):\s-]+(.+)$", re.DOTALL)
_NUMBERED_LINE = re.compile(r"^(\d{1,9})[.):\s-]+(.+)$")
_CODE_FENCE = re.compile(r"```[a-z]*\n?")
_BLANK_LINES = re.compile(r"\n\n+")


@dataclass
class ParsedEntry:
    """One translated entry recovered from a reply (index is 0-based)."""

    index: int
    text: str


def strip_code_fences(text: str) -> str:
    """
    Remove markdown code fence markers, keeping the fenced content.

    Example:
        >>> strip_code_fences("```text\\n1. Hola\\n```")
        '1. Hola\\n'
    """
    return _CODE_FENCE.sub("", text.strip())


def parse_numbered_blocks(text: str, expected_count: int) -> List[ParsedEntry]:
    """
    Block pass: one entry per blank-line separated block.

    A block starting with a number marker yields the entry at that number.
    An unnumbered block is taken as-is, at the next position, only while
    fewer than `expected_count` entries have been collected.

    Args:
        text: Reply with code fences already stripped
        expected_count: Number of entries the batch holds

    Returns:
        Entries sorted by index
    """
    entries: List[ParsedEntry] = []

    for block in _BLANK_LINES.split(text):
        trimmed = block.strip()
        if not trimmed:
            continue

        match = _NUMBERED_BLOCK.match(trimmed)
        if match:
            entries.append(
                ParsedEntry(index=int(match.group(1)) - 1, text=match.group(2).strip())
            )
        elif len(entries) < expected_count:
            logger.warning(
                f"⚠️  Found unnumbered entry, using as-is: {trimmed[:50]}"
            )
            entries.append(ParsedEntry(index=len(entries), text=trimmed))

    entries.sort(key=lambda entry: entry.index)
    return entries


def parse_numbered_lines(text: str) -> List[ParsedEntry]:
    """
    Line pass: a marker line opens an entry, other lines continue it.

    Lines before the first marker are dropped. Continuation lines are
    joined with a newline.

    Example:
        >>> [e.text for e in parse_numbered_lines("1. Hola\\n2. Mundo")]
        ['Hola', 'Mundo']
    """
    entries: List[ParsedEntry] = []
    current = None

    for line in text.split("\n"):
        trimmed = line.strip()
        if not trimmed:
            continue

        match = _NUMBERED_LINE.match(trimmed)
        if match:
            if current is not None:
                entries.append(current)
            current = ParsedEntry(
                index=int(match.group(1)) - 1, text=match.group(2).strip()
            )
        elif current is not None:
            current.text += "\n" + trimmed

    if current is not None:
        entries.append(current)

    entries.sort(key=lambda entry: entry.index)
    return entries


def parse_batch_response(text: str, expected_count: int) -> List[ParsedEntry]:
    """
    Parse a batch reply into entries.

    Runs the block pass first and falls back to the line pass when the
    block pass count is off. If neither matches `expected_count`, the block
    pass result is returned and the caller decides what a mismatch means.

    Args:
        text: Raw provider reply
        expected_count: Number of entries the batch holds

    Returns:
        Parsed entries sorted by index
    """
    cleaned = strip_code_fences(text)

    entries = parse_numbered_blocks(cleaned, expected_count)
    if len(entries) == expected_count:
        return entries

    logger.warning(
        f"⚠️  Entry count mismatch: expected {expected_count}, parsed {len(entries)}"
    )

    alt_entries = parse_numbered_lines(cleaned)
    if len(alt_entries) == expected_count:
        logger.info(f"🔄 Line-by-line parsing recovered {len(alt_entries)} entries")
        return alt_entries

    logger.debug(f"Unparseable reply sample:\n{truncate_for_logging(cleaned)}")
    return entries
