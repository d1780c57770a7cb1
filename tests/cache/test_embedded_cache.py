"""Tests for the embedded track cache."""

from unittest.mock import patch

import pytest

from cache.embedded_cache import EmbeddedCache
from common.schemas import RecordType


@pytest.fixture
def embedded_cache(storage_adapter):
    """Embedded cache over every storage backend."""
    return EmbeddedCache(storage_adapter, max_size_gb=50)


class TestEmbeddedCache:
    """Test originals and translations of embedded tracks."""

    @pytest.mark.asyncio
    async def test_save_and_get_original(self, embedded_cache):
        """Test an extracted track reads back."""
        key = await embedded_cache.save_original(
            "vid", "2", "eng", "1\n00:00:01,000 --> 00:00:02,000\nHi\n", {"codec": "subrip"}
        )

        artifact = await embedded_cache.get_original("vid", "2", "eng")

        assert key == "vid_original_eng_2"
        assert artifact.record.type == RecordType.ORIGINAL
        assert artifact.record.metadata == {"codec": "subrip"}
        assert artifact.content.startswith("1\n")

    @pytest.mark.asyncio
    async def test_save_and_get_translation(self, embedded_cache):
        """Test translations are keyed by source and target language."""
        key = await embedded_cache.save_translation("vid", "2", "eng", "spa", "Hola")

        artifact = await embedded_cache.get_translation("vid", "2", "eng", "spa")

        assert key == "vid_translation_eng_2_spa"
        assert artifact.content == "Hola"
        assert artifact.record.target_language_code == "spa"
        assert await embedded_cache.get_translation("vid", "2", "eng", "fre") is None

    @pytest.mark.asyncio
    async def test_list_originals_and_translations(self, embedded_cache):
        """Test listing by type, newest first."""
        with patch(
            "common.utils.DateTimeUtils.get_current_timestamp_ms",
            side_effect=[1000, 2000, 3000, 4000],
        ):
            await embedded_cache.save_original("vid", "1", "eng", "a")
            await embedded_cache.save_original("vid", "2", "heb", "b")
            await embedded_cache.save_translation("vid", "1", "eng", "spa", "c")
            await embedded_cache.save_original("other", "1", "eng", "d")

        originals = await embedded_cache.list_originals("vid")
        translations = await embedded_cache.list_translations("vid")

        assert [a.record.track_id for a in originals] == ["2", "1"]
        assert [a.content for a in translations] == ["c"]

    @pytest.mark.asyncio
    async def test_list_records_filters_colliding_hashes(self, embedded_cache):
        """Test that a hash that prefixes another does not leak its records."""
        await embedded_cache.save_original("vid", "1", "eng", "mine")
        # "vid_original" + "_eng_1" also matches the pattern "vid_*"
        await embedded_cache.save_original("vid_original", "1", "eng", "theirs")

        records = await embedded_cache.list_records("vid")

        assert [a.content for a in records] == ["mine"]


@pytest.mark.asyncio
async def test_longest_key_components_round_trip(embedded_cache):
    """Test a track whose hash and id are both at the sanitized maximum."""
    video_hash = "h" * 120
    track_id = "t" * 120

    key = await embedded_cache.save_original(video_hash, track_id, "eng", "content")

    artifact = await embedded_cache.get_original(video_hash, track_id, "eng")
    listed = await embedded_cache.list_originals(video_hash)
    assert artifact.content == "content"
    assert [a.cache_key for a in listed] == [key]
