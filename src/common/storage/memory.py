"""In-process storage adapter."""

import fnmatch
import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from common.schemas import CleanupResult
from common.storage.base import (
    Namespace,
    StorageAdapter,
    deserialize_value,
    encoded_size,
    namespace_value,
    serialize_value,
)

logger = logging.getLogger(__name__)


class MemoryStorageAdapter(StorageAdapter):
    """Keeps serialized records in per-namespace insertion-ordered dicts."""

    def __init__(self, max_size_bytes: Optional[Dict[str, int]] = None):
        super().__init__(max_size_bytes)
        self._store: Dict[str, "OrderedDict[str, str]"] = {}

    def _bucket(self, namespace: Namespace) -> "OrderedDict[str, str]":
        return self._store.setdefault(namespace_value(namespace), OrderedDict())

    async def get(self, key: str, namespace: Namespace) -> Optional[Dict[str, Any]]:
        raw = self._bucket(namespace).get(key)
        if raw is None:
            return None
        return deserialize_value(raw)

    async def set(self, key: str, value: Dict[str, Any], namespace: Namespace) -> None:
        bucket = self._bucket(namespace)
        # Re-inserting moves the key to the newest position
        bucket.pop(key, None)
        bucket[key] = serialize_value(value)

    async def delete(self, key: str, namespace: Namespace) -> bool:
        return self._bucket(namespace).pop(key, None) is not None

    async def list(self, namespace: Namespace, pattern: str = "*") -> List[str]:
        return [
            key
            for key in self._bucket(namespace)
            if fnmatch.fnmatchcase(key, pattern)
        ]

    async def size(self, namespace: Namespace) -> int:
        return sum(encoded_size(raw) for raw in self._bucket(namespace).values())

    async def cleanup(self, namespace: Namespace) -> CleanupResult:
        limit = self.limit_for(namespace)
        if limit is None:
            return CleanupResult()

        bucket = self._bucket(namespace)
        total = await self.size(namespace)
        deleted = 0
        freed = 0

        while bucket and total > limit:
            _, raw = bucket.popitem(last=False)
            entry_size = encoded_size(raw)
            total -= entry_size
            freed += entry_size
            deleted += 1

        if deleted:
            logger.info(
                f"🧹 Memory storage cleanup ({namespace_value(namespace)}): "
                f"deleted {deleted} entries, freed {freed} bytes"
            )
        return CleanupResult(deleted=deleted, bytes_freed=freed)
