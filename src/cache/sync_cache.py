"""Cache for subtitles re-timed against a specific video file."""

import logging
from typing import Any, Dict, List, Optional

from cache.keys import build_cache_key, build_key_pattern
from cache.persisted_cache import Content, PersistedCache, encode_content
from common.schemas import (
    CacheNamespace,
    CachedArtifact,
    PersistedCacheRecord,
    RecordType,
)

logger = logging.getLogger(__name__)


class SyncCache(PersistedCache):
    """Synced subtitles keyed by video hash, language and source subtitle id."""

    namespace = CacheNamespace.SYNC
    label = "Sync Cache"

    @staticmethod
    def generate_cache_key(
        video_hash: str, language_code: str, source_sub_id: str
    ) -> str:
        """
        Key for one synced subtitle.

        Example:
            >>> SyncCache.generate_cache_key("abc123", "eng", "subdl_12345")
            'abc123_sync_eng_subdl_12345'
        """
        return build_cache_key(video_hash, RecordType.SYNC, language_code, source_sub_id)

    async def save_synced_subtitle(
        self,
        video_hash: str,
        language_code: str,
        source_sub_id: str,
        content: Content,
        original_sub_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Store a synced subtitle.

        Args:
            video_hash: Hash of the video file
            language_code: Language of the subtitle
            source_sub_id: Subtitle the sync was computed from
            content: Synced subtitle document
            original_sub_id: Original subtitle file id, if different
            metadata: Extra attributes (offsets, sync method...)

        Returns:
            Cache key the record was written under

        Raises:
            CacheIOError: If the storage adapter rejects the write
        """
        cache_key = self.generate_cache_key(video_hash, language_code, source_sub_id)
        record = PersistedCacheRecord(
            type=RecordType.SYNC,
            video_hash=video_hash,
            track_id=source_sub_id,
            language_code=language_code,
            original_sub_id=original_sub_id,
            metadata=metadata or {},
            **encode_content(content),
        )
        await self._write_record(cache_key, record)
        return cache_key

    async def get_synced_subtitle(
        self, video_hash: str, language_code: str, source_sub_id: str
    ) -> Optional[CachedArtifact]:
        """Fetch one synced subtitle, or None."""
        return await self._read_record(
            self.generate_cache_key(video_hash, language_code, source_sub_id)
        )

    async def get_synced_subtitles(
        self, video_hash: str, language_code: str
    ) -> List[CachedArtifact]:
        """All synced subtitles for a video and language, newest first."""
        pattern = build_key_pattern(video_hash, RecordType.SYNC, language_code)
        results = await self._list_artifacts(pattern, video_hash)
        return [
            artifact
            for artifact in results
            if artifact.record.language_code == language_code
        ]

    async def delete_synced_subtitle(
        self, video_hash: str, language_code: str, source_sub_id: str
    ) -> bool:
        """Delete one synced subtitle."""
        return await self.delete(
            self.generate_cache_key(video_hash, language_code, source_sub_id)
        )
