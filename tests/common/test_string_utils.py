"""Tests for string utility functions."""

import hashlib

import pytest

from common.string_utils import md5_hex, normalize_for_cache, truncate_for_logging


class TestTruncateForLogging:
    """Test text truncation for logging."""

    @pytest.mark.parametrize(
        "description,text,max_length,edge_length,should_truncate",
        [
            ("short text unchanged", "Hello", 100, 10, False),
            ("text at max length", "x" * 100, 100, 10, False),
            ("text over max length", "x" * 2000, 1000, 500, True),
            ("empty string", "", 100, 10, False),
        ],
    )
    def test_truncate_for_logging_various_lengths(
        self, description, text, max_length, edge_length, should_truncate
    ):
        """Test truncation behavior with various text lengths."""
        result = truncate_for_logging(text, max_length, edge_length)

        if should_truncate:
            assert len(result) < len(text)
            assert "..." in result
        else:
            assert result == text

    def test_keeps_beginning_and_end(self):
        """Test that both edges of a long reply are kept."""
        text = "START" + "x" * 2000 + "END"

        result = truncate_for_logging(text, max_length=100, edge_length=10)

        assert result.startswith("START")
        assert result.endswith("END")


class TestNormalizeForCache:
    """Test cache text normalization."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Hello World", "hello world"),
            ("  hello world  ", "hello world"),
            ("\tMIXED Case\n", "mixed case"),
            ("", ""),
        ],
    )
    def test_normalize(self, text, expected):
        """Test trimming and lowercasing."""
        assert normalize_for_cache(text) == expected


def test_md5_hex_matches_hashlib():
    """Test md5 digest of UTF-8 text."""
    assert md5_hex("héllo") == hashlib.md5("héllo".encode("utf-8")).hexdigest()
