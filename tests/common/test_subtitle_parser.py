"""Tests for SRT subtitle parser."""

import pytest

from common.subtitle_parser import (
    DEFAULT_BATCH_SIZE,
    SRTParser,
    SubtitleEntry,
    chunk_entries,
)


class TestSubtitleEntry:
    """Test SubtitleEntry dataclass."""

    def test_subtitle_entry_str(self):
        """Test string representation of subtitle entry."""
        entry = SubtitleEntry(
            id=1, timecode="00:00:01,000 --> 00:00:04,000", text="Hello, world!"
        )

        assert str(entry) == "1\n00:00:01,000 --> 00:00:04,000\nHello, world!\n"


class TestSRTParser:
    """Test SRT parser functionality."""

    @pytest.fixture
    def multiline_srt_content(self):
        """Provide SRT content with multiline subtitles."""
        return """1
00:00:01,000 --> 00:00:04,000
This is a subtitle
with multiple lines

2
00:00:05,000 --> 00:00:08,000
Another subtitle
"""

    def test_parse_simple_srt(self, sample_srt):
        """Test parsing a simple SRT document."""
        entries = SRTParser.parse(sample_srt)

        assert len(entries) == 3
        assert [e.id for e in entries] == [1, 2, 3]
        assert entries[0].timecode == "00:00:01,000 --> 00:00:04,000"
        assert entries[0].text == "Welcome to this video"

    def test_parse_multiline_text(self, multiline_srt_content):
        """Test that multiline text is joined with newlines."""
        entries = SRTParser.parse(multiline_srt_content)

        assert entries[0].text == "This is a subtitle\nwith multiple lines"

    def test_parse_keeps_timecode_line_verbatim(self):
        """Test that the timing line is stored exactly as found."""
        content = "1\n00:00:01,000 --> 00:00:04,000 X1:10 X2:20\nHi\n"

        entries = SRTParser.parse(content)

        assert entries[0].timecode == "00:00:01,000 --> 00:00:04,000 X1:10 X2:20"

    def test_parse_handles_bom_and_crlf(self):
        """Test BOM removal and Windows line endings."""
        content = "\ufeff1\r\n00:00:01,000 --> 00:00:02,000\r\nHi\r\n\r\n"

        entries = SRTParser.parse(content)

        assert len(entries) == 1
        assert entries[0].id == 1
        assert entries[0].text == "Hi"

    @pytest.mark.parametrize("content", ["", "   \n\n", "not a subtitle"])
    def test_parse_empty_or_garbage_returns_no_entries(self, content):
        """Test that unparseable input yields an empty list."""
        assert SRTParser.parse(content) == []

    def test_parse_skips_invalid_blocks(self):
        """Test that blocks without timing or text are skipped."""
        content = """1
not a timecode
Text

2
00:00:02,000 --> 00:00:03,000

3
00:00:04,000 --> 00:00:05,000
Kept
"""
        entries = SRTParser.parse(content)

        assert [e.id for e in entries] == [3]

    def test_format_entries(self):
        """Test formatting entries back to SRT."""
        entries = [
            SubtitleEntry(1, "00:00:01,000 --> 00:00:02,000", "One"),
            SubtitleEntry(2, "00:00:03,000 --> 00:00:04,000", "Two\nlines"),
        ]

        result = SRTParser.format(entries)

        assert result == (
            "1\n00:00:01,000 --> 00:00:02,000\nOne\n\n"
            "2\n00:00:03,000 --> 00:00:04,000\nTwo\nlines\n"
        )

    def test_format_empty_list(self):
        """Test formatting no entries."""
        assert SRTParser.format([]) == ""

    def test_round_trip_preserves_ids_and_timecodes(self, sample_srt):
        """Test that format(parse(doc)) keeps every id and timecode."""
        entries = SRTParser.parse(sample_srt)

        reparsed = SRTParser.parse(SRTParser.format(entries))

        assert [(e.id, e.timecode) for e in reparsed] == [
            (e.id, e.timecode) for e in entries
        ]


class TestChunkEntries:
    """Test batching of entries."""

    def _entries(self, count):
        return [
            SubtitleEntry(i, "00:00:01,000 --> 00:00:02,000", f"Line {i}")
            for i in range(1, count + 1)
        ]

    def test_default_batch_size(self):
        """Test that the default batch size is 100."""
        assert DEFAULT_BATCH_SIZE == 100
        batches = chunk_entries(self._entries(250))
        assert [len(b) for b in batches] == [100, 100, 50]

    def test_batches_partition_entries_in_order(self):
        """Test that batches cover every entry exactly once, in order."""
        entries = self._entries(7)

        batches = chunk_entries(entries, 3)

        assert [len(b) for b in batches] == [3, 3, 1]
        assert [e for batch in batches for e in batch] == entries

    def test_empty_input(self):
        """Test that no entries produce no batches."""
        assert chunk_entries([], 10) == []

    @pytest.mark.parametrize("batch_size", [0, -1])
    def test_invalid_batch_size(self, batch_size):
        """Test that a non-positive batch size is rejected."""
        with pytest.raises(ValueError):
            chunk_entries(self._entries(3), batch_size)
