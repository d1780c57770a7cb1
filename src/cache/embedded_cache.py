"""Cache for subtitle tracks extracted from video containers."""

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


class EmbeddedCache(PersistedCache):
    """Original and translated embedded tracks keyed by video hash and track id."""

    namespace = CacheNamespace.EMBEDDED
    label = "Embedded Cache"

    @staticmethod
    def generate_cache_key(
        video_hash: str,
        track_id: str,
        language_code: str,
        record_type: RecordType = RecordType.ORIGINAL,
        target_language_code: Optional[str] = None,
    ) -> str:
        """
        Key for one embedded track record.

        Example:
            >>> EmbeddedCache.generate_cache_key("abc", "2", "eng")
            'abc_original_eng_2'
        """
        return build_cache_key(
            video_hash, record_type, language_code, track_id, target_language_code
        )

    async def save_original(
        self,
        video_hash: str,
        track_id: str,
        language_code: str,
        content: Content,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Store an extracted track as-is.

        Returns:
            Cache key the record was written under

        Raises:
            CacheIOError: If the storage adapter rejects the write
        """
        cache_key = self.generate_cache_key(video_hash, track_id, language_code)
        record = PersistedCacheRecord(
            type=RecordType.ORIGINAL,
            video_hash=video_hash,
            track_id=track_id,
            language_code=language_code,
            metadata=metadata or {},
            **encode_content(content),
        )
        await self._write_record(cache_key, record)
        logger.debug(f"[{self.label}] Saved original track {track_id} ({language_code})")
        return cache_key

    async def save_translation(
        self,
        video_hash: str,
        track_id: str,
        source_language_code: str,
        target_language_code: str,
        content: Content,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Store a translated track.

        Returns:
            Cache key the record was written under

        Raises:
            CacheIOError: If the storage adapter rejects the write
        """
        cache_key = self.generate_cache_key(
            video_hash,
            track_id,
            source_language_code,
            RecordType.TRANSLATION,
            target_language_code,
        )
        record = PersistedCacheRecord(
            type=RecordType.TRANSLATION,
            video_hash=video_hash,
            track_id=track_id,
            language_code=source_language_code,
            target_language_code=target_language_code,
            metadata=metadata or {},
            **encode_content(content),
        )
        await self._write_record(cache_key, record)
        logger.debug(
            f"[{self.label}] Saved translation of track {track_id} "
            f"({source_language_code} -> {target_language_code})"
        )
        return cache_key

    async def get_original(
        self, video_hash: str, track_id: str, language_code: str
    ) -> Optional[CachedArtifact]:
        """Fetch an original track, or None."""
        return await self._read_record(
            self.generate_cache_key(video_hash, track_id, language_code)
        )

    async def get_translation(
        self,
        video_hash: str,
        track_id: str,
        source_language_code: str,
        target_language_code: str,
    ) -> Optional[CachedArtifact]:
        """Fetch a translated track, or None."""
        return await self._read_record(
            self.generate_cache_key(
                video_hash,
                track_id,
                source_language_code,
                RecordType.TRANSLATION,
                target_language_code,
            )
        )

    async def list_originals(self, video_hash: str) -> List[CachedArtifact]:
        """Original tracks of a video, newest first."""
        return await self._list_artifacts(
            build_key_pattern(video_hash, RecordType.ORIGINAL), video_hash
        )

    async def list_translations(self, video_hash: str) -> List[CachedArtifact]:
        """Translated tracks of a video, newest first."""
        return await self._list_artifacts(
            build_key_pattern(video_hash, RecordType.TRANSLATION), video_hash
        )
