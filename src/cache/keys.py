"""Deterministic, glob-safe cache key construction."""

import re
from typing import Optional

from common.schemas import RecordType
from common.string_utils import md5_hex

# Characters that carry meaning in glob/pattern matching
_PATTERN_CHARS = re.compile(r"[*?\[\]\\]")
_WHITESPACE = re.compile(r"\s+")

MAX_COMPONENT_LENGTH = 120
TRUNCATED_LENGTH = 100
HASH_SUFFIX_LENGTH = 8


def sanitize_key_component(value: Optional[str], fallback: str = "") -> str:
    """
    Make one key component safe to embed in a storage key.

    Pattern metacharacters (* ? [ ] \\) become underscores and whitespace
    runs collapse to a single underscore, so a sanitized component always
    matches literally in a glob. Components longer than 120 characters are
    cut to 100 and suffixed with 8 hex chars of the md5 of the raw value.

    Args:
        value: Raw component value
        fallback: Value used when the component is empty or None

    Returns:
        Sanitized component

    Examples:
        >>> sanitize_key_component("abc*def")
        'abc_def'
        >>> sanitize_key_component("track 1")
        'track_1'
        >>> sanitize_key_component(None, "und")
        'und'
    """
    if not value:
        value = fallback
    if not value:
        return ""

    raw = str(value)
    normalized = _PATTERN_CHARS.sub("_", raw)
    normalized = _WHITESPACE.sub("_", normalized)

    if len(normalized) > MAX_COMPONENT_LENGTH:
        return f"{normalized[:TRUNCATED_LENGTH]}_{md5_hex(raw)[:HASH_SUFFIX_LENGTH]}"
    return normalized


def build_cache_key(
    video_hash: Optional[str],
    record_type: RecordType,
    language_code: Optional[str],
    track_id: Optional[str],
    target_language_code: Optional[str] = None,
) -> str:
    """
    Build a persisted cache key.

    Format: `{hash}_{type}_{language}_{track}` with `_{target}` appended for
    translation records.

    Examples:
        >>> build_cache_key("abc", RecordType.ORIGINAL, "eng", "3")
        'abc_original_eng_3'
        >>> build_cache_key("abc", RecordType.TRANSLATION, "eng", "3", "spa")
        'abc_translation_eng_3_spa'
    """
    safe_hash = sanitize_key_component(video_hash, "unknown")
    safe_lang = sanitize_key_component(language_code, "und")
    safe_track = sanitize_key_component(track_id, "track")
    safe_target = sanitize_key_component(target_language_code)

    key = f"{safe_hash}_{RecordType(record_type).value}_{safe_lang}_{safe_track}"
    if record_type == RecordType.TRANSLATION and safe_target:
        key = f"{key}_{safe_target}"
    return key


def build_key_pattern(
    video_hash: Optional[str],
    record_type: Optional[RecordType] = None,
    language_code: Optional[str] = None,
) -> str:
    """
    Build a glob pattern selecting records of one video hash.

    Every literal part is sanitized first, so caller-controlled values
    cannot widen the pattern.

    Examples:
        >>> build_key_pattern("abc", RecordType.TRANSLATION)
        'abc_translation_*'
        >>> build_key_pattern("a*c")
        'a_c_*'
    """
    parts = [sanitize_key_component(video_hash, "unknown")]
    if record_type is not None:
        parts.append(RecordType(record_type).value)
        if language_code is not None:
            parts.append(sanitize_key_component(language_code, "und"))
    return "_".join(parts) + "_*"
