"""Storage adapter interface for the persisted caches."""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

from common.schemas import CacheNamespace, CleanupResult

Namespace = Union[CacheNamespace, str]


def namespace_value(namespace: Namespace) -> str:
    """Return the plain string name of a namespace."""
    if isinstance(namespace, CacheNamespace):
        return namespace.value
    return str(namespace)


def serialize_value(value: Dict[str, Any]) -> str:
    """Encode a record for storage (compact UTF-8 JSON)."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def deserialize_value(raw: Union[str, bytes]) -> Dict[str, Any]:
    """Decode a stored record."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    return json.loads(raw)


def encoded_size(serialized: str) -> int:
    """Size in bytes a serialized record occupies."""
    return len(serialized.encode("utf-8"))


class StorageAdapter(ABC):
    """
    Uniform async key/value access over namespaced storage.

    Values are JSON-compatible dictionaries. `list` takes a glob pattern;
    callers are expected to pass keys that were sanitized so they contain
    no glob metacharacters. `cleanup` must never increase the stored size.
    """

    def __init__(self, max_size_bytes: Optional[Dict[str, int]] = None):
        """
        Initialize the adapter.

        Args:
            max_size_bytes: Per-namespace byte ceilings enforced by cleanup
        """
        self.max_size_bytes: Dict[str, int] = {
            namespace_value(ns): limit
            for ns, limit in (max_size_bytes or {}).items()
        }

    def limit_for(self, namespace: Namespace) -> Optional[int]:
        """Byte ceiling configured for a namespace, if any."""
        return self.max_size_bytes.get(namespace_value(namespace))

    @abstractmethod
    async def get(self, key: str, namespace: Namespace) -> Optional[Dict[str, Any]]:
        """Fetch a value, or None when the key is absent."""

    @abstractmethod
    async def set(self, key: str, value: Dict[str, Any], namespace: Namespace) -> None:
        """Store a value, replacing any previous one."""

    @abstractmethod
    async def delete(self, key: str, namespace: Namespace) -> bool:
        """Remove a key; True if it existed."""

    @abstractmethod
    async def list(self, namespace: Namespace, pattern: str = "*") -> List[str]:
        """Keys in the namespace matching a glob pattern."""

    @abstractmethod
    async def size(self, namespace: Namespace) -> int:
        """Total stored bytes in the namespace."""

    @abstractmethod
    async def cleanup(self, namespace: Namespace) -> CleanupResult:
        """Evict oldest entries until the namespace fits its byte ceiling."""
