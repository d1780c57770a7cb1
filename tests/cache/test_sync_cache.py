"""Tests for the synced subtitle cache."""

from unittest.mock import patch

import pytest

from cache.sync_cache import SyncCache
from common.schemas import CACHE_RECORD_VERSION, RecordType

SYNCED_SRT = "1\n00:00:01,200 --> 00:00:04,200\nHello\n"


@pytest.fixture
def sync_cache(storage_adapter):
    """Sync cache over every storage backend."""
    return SyncCache(storage_adapter, max_size_gb=50)


class TestSyncCache:
    """Test saving and reading synced subtitles."""

    def test_generate_cache_key(self):
        """Test the sync key format."""
        assert (
            SyncCache.generate_cache_key("abc123", "eng", "subdl_12345")
            == "abc123_sync_eng_subdl_12345"
        )

    @pytest.mark.asyncio
    async def test_save_and_get(self, sync_cache):
        """Test a record reads back with all its fields."""
        key = await sync_cache.save_synced_subtitle(
            "abc123",
            "eng",
            "subdl_12345",
            SYNCED_SRT,
            original_sub_id="file_99",
            metadata={"offset_ms": 200},
        )

        artifact = await sync_cache.get_synced_subtitle("abc123", "eng", "subdl_12345")

        assert key == "abc123_sync_eng_subdl_12345"
        assert artifact.cache_key == key
        assert artifact.content == SYNCED_SRT
        assert artifact.record.type == RecordType.SYNC
        assert artifact.record.video_hash == "abc123"
        assert artifact.record.original_sub_id == "file_99"
        assert artifact.record.metadata == {"offset_ms": 200}
        assert artifact.record.version == CACHE_RECORD_VERSION

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, sync_cache):
        """Test a miss."""
        assert await sync_cache.get_synced_subtitle("abc", "eng", "nope") is None

    @pytest.mark.asyncio
    async def test_binary_content_round_trips(self, sync_cache):
        """Test that bytes are stored base64 and decoded on read."""
        payload = b"\x00\x01binary\xff"

        await sync_cache.save_synced_subtitle("abc", "eng", "s1", payload)
        artifact = await sync_cache.get_synced_subtitle("abc", "eng", "s1")

        assert artifact.content == payload
        assert artifact.record.content_encoding == "base64"

    @pytest.mark.asyncio
    async def test_get_synced_subtitles_newest_first(self, sync_cache):
        """Test listing per video and language, newest first."""
        with patch(
            "common.utils.DateTimeUtils.get_current_timestamp_ms",
            side_effect=[1000, 3000, 2000, 4000],
        ):
            await sync_cache.save_synced_subtitle("abc", "eng", "s1", "one")
            await sync_cache.save_synced_subtitle("abc", "eng", "s2", "two")
            await sync_cache.save_synced_subtitle("abc", "eng", "s3", "three")
            await sync_cache.save_synced_subtitle("abc", "heb", "s4", "other")

        results = await sync_cache.get_synced_subtitles("abc", "eng")

        assert [a.record.track_id for a in results] == ["s2", "s3", "s1"]

    @pytest.mark.asyncio
    async def test_delete_synced_subtitle(self, sync_cache):
        """Test deleting one record."""
        await sync_cache.save_synced_subtitle("abc", "eng", "s1", "one")

        assert await sync_cache.delete_synced_subtitle("abc", "eng", "s1") is True
        assert await sync_cache.get_synced_subtitle("abc", "eng", "s1") is None
        assert await sync_cache.delete_synced_subtitle("abc", "eng", "s1") is False
