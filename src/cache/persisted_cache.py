"""Namespaced, versioned artifact cache on top of a storage adapter."""

import base64
import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from cache.keys import build_key_pattern
from common.exceptions import CacheIOError
from common.schemas import (
    CacheNamespace,
    CacheStats,
    CachedArtifact,
    CleanupResult,
    ContentEncoding,
    PersistedCacheRecord,
)
from common.storage.base import StorageAdapter

logger = logging.getLogger(__name__)

Content = Union[str, bytes]


def encode_content(content: Content) -> Dict[str, Any]:
    """Return record fields holding `content` in a JSON-safe form."""
    if isinstance(content, bytes):
        return {
            "content": base64.b64encode(content).decode("ascii"),
            "content_encoding": ContentEncoding.BASE64,
        }
    return {"content": content, "content_encoding": ContentEncoding.TEXT}


def decode_content(record: PersistedCacheRecord) -> Content:
    """Inverse of encode_content."""
    if record.content_encoding == ContentEncoding.BASE64:
        return base64.b64decode(record.content)
    return record.content


class PersistedCache:
    """
    Base façade for one cache namespace.

    Reads never raise: adapter errors and undecodable records are logged and
    reported as misses. Writes raise CacheIOError so callers can decide to
    retry or carry on uncached.
    """

    namespace: CacheNamespace
    label: str = "Cache"

    def __init__(self, adapter: StorageAdapter, max_size_gb: float = 50):
        """
        Initialize the cache façade.

        Args:
            adapter: Storage backend
            max_size_gb: Size ceiling reported in stats (enforced by the adapter)
        """
        self.adapter = adapter
        self.max_size_gb = max_size_gb

    async def _write_record(self, cache_key: str, record: PersistedCacheRecord) -> None:
        try:
            await self.adapter.set(
                cache_key, record.model_dump(mode="json"), self.namespace
            )
        except Exception as e:
            logger.error(f"❌ [{self.label}] Failed to save {cache_key}: {e}")
            raise CacheIOError("write", cache_key, self.namespace.value, e) from e
        logger.debug(f"[{self.label}] Saved: {cache_key}")

    async def _read_record(self, cache_key: str) -> Optional[CachedArtifact]:
        try:
            raw = await self.adapter.get(cache_key, self.namespace)
        except Exception as e:
            logger.warning(f"⚠️  [{self.label}] Failed to read {cache_key}: {e}")
            return None

        if not raw:
            return None

        try:
            record = PersistedCacheRecord.model_validate(raw)
            content = decode_content(record)
        except (ValidationError, ValueError) as e:
            logger.warning(f"⚠️  [{self.label}] Ignoring corrupt record {cache_key}: {e}")
            return None

        logger.debug(f"[{self.label}] Retrieved: {cache_key}")
        return CachedArtifact(cache_key=cache_key, record=record, content=content)

    async def _list_artifacts(
        self, pattern: str, video_hash: Optional[str] = None
    ) -> List[CachedArtifact]:
        """
        Fetch every record whose key matches a pattern, newest first.

        Args:
            pattern: Glob pattern built by cache.keys
            video_hash: When given, records stored for another hash are dropped

        Returns:
            Artifacts sorted by timestamp, newest first
        """
        try:
            keys = await self.adapter.list(self.namespace, pattern)
        except Exception as e:
            logger.error(f"❌ [{self.label}] Failed to list {pattern}: {e}")
            return []

        results = []
        for cache_key in keys:
            artifact = await self._read_record(cache_key)
            if artifact is None:
                continue
            if video_hash is not None and artifact.record.video_hash != video_hash:
                continue
            results.append(artifact)

        results.sort(key=lambda artifact: artifact.record.timestamp, reverse=True)
        logger.debug(f"[{self.label}] Found {len(results)} records for {pattern}")
        return results

    async def list_records(self, video_hash: str) -> List[CachedArtifact]:
        """All records stored for a video hash, newest first."""
        return await self._list_artifacts(build_key_pattern(video_hash), video_hash)

    async def delete(self, cache_key: str) -> bool:
        """
        Delete one record.

        Returns:
            True if a record was removed
        """
        try:
            deleted = await self.adapter.delete(cache_key, self.namespace)
        except Exception as e:
            logger.error(f"❌ [{self.label}] Failed to delete {cache_key}: {e}")
            return False
        if deleted:
            logger.debug(f"[{self.label}] Deleted: {cache_key}")
        return deleted

    async def get_cache_stats(self) -> CacheStats:
        """Total size and record count for this namespace."""
        try:
            total_size = await self.adapter.size(self.namespace)
            keys = await self.adapter.list(self.namespace, "*")
        except Exception as e:
            logger.error(f"❌ [{self.label}] Failed to get stats: {e}")
            return CacheStats(max_size_gb=self.max_size_gb)

        return CacheStats(
            total_size=total_size,
            total_size_mb=f"{total_size / (1024 * 1024):.2f}",
            file_count=len(keys),
            max_size_gb=self.max_size_gb,
        )

    async def enforce_size_limit(self) -> CleanupResult:
        """Ask the adapter to evict old records down to the ceiling."""
        try:
            result = await self.adapter.cleanup(self.namespace)
        except Exception as e:
            logger.error(f"❌ [{self.label}] Failed to enforce size limit: {e}")
            return CleanupResult()

        if result.deleted or result.bytes_freed:
            logger.info(
                f"🧹 [{self.label}] Cleanup: deleted {result.deleted} entries, "
                f"freed {result.bytes_freed} bytes"
            )
        return result

    async def clear(self) -> int:
        """
        Delete every record in the namespace.

        Returns:
            Number of records removed
        """
        try:
            keys = await self.adapter.list(self.namespace, "*")
        except Exception as e:
            logger.error(f"❌ [{self.label}] Failed to clear cache: {e}")
            raise CacheIOError("clear", "*", self.namespace.value, e) from e

        removed = 0
        for cache_key in keys:
            if await self.delete(cache_key):
                removed += 1

        logger.info(f"[{self.label}] Cleared {removed} cached records")
        return removed
