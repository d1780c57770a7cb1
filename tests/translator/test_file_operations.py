"""Tests for translating subtitle files on disk."""

from pathlib import Path

import pytest

from common.exceptions import StructuralError
from common.subtitle_parser import SRTParser
from translator.file_operations import generate_output_path, translate_subtitle_file


@pytest.mark.parametrize(
    "source,language,expected",
    [
        ("/media/movie.srt", "es", "/media/movie.es.srt"),
        ("/media/movie.en.srt", "he", "/media/movie.en.he.srt"),
        ("/media/movie", "fr", "/media/movie.fr.srt"),
    ],
)
def test_generate_output_path(source, language, expected):
    """Test translated files land next to the source."""
    assert generate_output_path(source, language) == Path(expected)


class TestTranslateSubtitleFile:
    """Test end-to-end file translation."""

    @pytest.mark.asyncio
    async def test_writes_translation_next_to_source(self, tmp_path, engine, sample_srt):
        """Test the default destination and its content."""
        source = tmp_path / "movie.srt"
        source.write_text(sample_srt, encoding="utf-8")

        destination = await translate_subtitle_file(source, "fr", engine)

        assert destination == tmp_path / "movie.fr.srt"
        entries = SRTParser.parse(destination.read_text(encoding="utf-8"))
        assert [e.text for e in entries][0] == "WELCOME TO THIS VIDEO"

    @pytest.mark.asyncio
    async def test_bom_is_ignored(self, tmp_path, engine, sample_srt):
        """Test files saved with a UTF-8 BOM are read."""
        source = tmp_path / "movie.srt"
        source.write_bytes(b"\xef\xbb\xbf" + sample_srt.encode("utf-8"))

        destination = await translate_subtitle_file(source, "fr", engine)

        assert len(SRTParser.parse(destination.read_text(encoding="utf-8"))) == 3

    @pytest.mark.asyncio
    async def test_explicit_output_path_creates_directories(
        self, tmp_path, engine, sample_srt
    ):
        """Test the output directory is created when missing."""
        source = tmp_path / "movie.srt"
        source.write_text(sample_srt, encoding="utf-8")
        output = tmp_path / "out" / "nested" / "movie.french.srt"

        destination = await translate_subtitle_file(
            source, "fr", engine, output_path=output
        )

        assert destination == output
        assert output.exists()

    @pytest.mark.asyncio
    async def test_missing_file_raises(self, tmp_path, engine):
        """Test a missing source file."""
        with pytest.raises(FileNotFoundError):
            await translate_subtitle_file(tmp_path / "missing.srt", "fr", engine)

    @pytest.mark.asyncio
    async def test_empty_file_writes_nothing(self, tmp_path, engine):
        """Test a document without entries fails before writing."""
        source = tmp_path / "empty.srt"
        source.write_text("", encoding="utf-8")

        with pytest.raises(StructuralError):
            await translate_subtitle_file(source, "fr", engine)

        assert not (tmp_path / "empty.fr.srt").exists()
