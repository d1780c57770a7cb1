"""String manipulation utilities."""

import hashlib


def truncate_for_logging(
    text: str, max_length: int = 1000, edge_length: int = 500
) -> str:
    """
    Truncate text for logging, showing beginning and end.

    Long provider replies are truncated to show the first and last
    portions, with an ellipsis in the middle.

    Args:
        text: Text to truncate
        max_length: Maximum length before truncation is applied
        edge_length: Number of characters to show from start and end

    Returns:
        Truncated text with ellipsis if needed, or original text if short enough

    Examples:
        >>> truncate_for_logging("Hello", max_length=100)
        'Hello'
        >>> "..." in truncate_for_logging("x" * 2000, max_length=1000, edge_length=10)
        True
    """
    if len(text) <= max_length:
        return text
    return f"{text[:edge_length]}...\n...{text[-edge_length:]}"


def normalize_for_cache(text: str) -> str:
    """
    Normalize subtitle text for cache lookups (trim and lowercase).

    Examples:
        >>> normalize_for_cache("  Hello World ")
        'hello world'
    """
    return text.strip().lower()


def md5_hex(text: str) -> str:
    """Return the hex md5 digest of a UTF-8 string."""
    return hashlib.md5(text.encode("utf-8")).hexdigest()
