"""Prompt construction for numbered batch translation."""

import re
from typing import List, Optional

from common.subtitle_parser import SubtitleEntry
from common.utils import LanguageUtils

TARGET_LANGUAGE_PLACEHOLDER = "{target_language}"

_REPEATED_NEWLINES = re.compile(r"\n+")


def prepare_batch_text(batch: List[SubtitleEntry]) -> str:
    """
    Render a batch as a numbered list, one blank line between entries.

    Numbering restarts at 1 for every batch. Blank lines inside an entry
    are collapsed so they cannot be mistaken for entry separators.

    Example:
        >>> prepare_batch_text([SubtitleEntry(7, "t", " Hi\\n\\nthere ")])
        '1. Hi\\nthere'
    """
    lines = []
    for number, entry in enumerate(batch, 1):
        clean_text = _REPEATED_NEWLINES.sub("\n", entry.text.strip())
        lines.append(f"{number}. {clean_text}")
    return "\n\n".join(lines)


def build_batch_prompt(
    batch_text: str,
    target_language: str,
    expected_count: int,
    custom_prompt: Optional[str] = None,
) -> str:
    """
    Build the full prompt sent with a batch.

    A custom prompt is used verbatim except that `{target_language}` is
    replaced with the resolved language label; the batch text is sent to
    the provider separately in that case.

    Args:
        batch_text: Output of prepare_batch_text
        target_language: Language code or display name
        expected_count: Number of entries in the batch
        custom_prompt: Optional caller-supplied template

    Returns:
        Prompt text
    """
    language = LanguageUtils.normalize_target_language_for_prompt(target_language)

    if custom_prompt:
        return custom_prompt.replace(TARGET_LANGUAGE_PLACEHOLDER, language)

    return (
        f"You are translating subtitle text to {language}.\n\n"
        f"CRITICAL RULES:\n"
        f"1. Translate ONLY the text content\n"
        f"2. PRESERVE the numbering exactly (1. 2. 3. etc.)\n"
        f"3. Return EXACTLY {expected_count} numbered entries\n"
        f"4. Keep line breaks within each entry\n"
        f"5. Maintain natural dialogue flow for {language}\n"
        f"6. Use appropriate colloquialisms for {language}\n\n"
        f"DO NOT:\n"
        f"- Add explanations or notes\n"
        f"- Skip any entries\n"
        f"- Merge or split entries\n"
        f"- Change the numbering\n"
        f"- Add extra entries\n\n"
        f"INPUT ({expected_count} entries):\n\n"
        f"{batch_text}\n\n"
        f"OUTPUT FORMAT (must be {expected_count} numbered entries):"
    )
