"""Redis storage adapter for the persisted caches."""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

import redis.asyncio as redis
from redis.asyncio import Redis
from redis.exceptions import RedisError

from common.config import settings
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


class RedisStorageAdapter(StorageAdapter):
    """
    Async Redis backend.

    Values live under `<prefix>:<namespace>:<key>`. A sorted set
    `<prefix>:index:<namespace>` scores each key by its write time so
    cleanup can evict oldest entries first.
    """

    def __init__(
        self,
        client: Optional[Redis] = None,
        key_prefix: Optional[str] = None,
        max_size_bytes: Optional[Dict[str, int]] = None,
        redis_url: Optional[str] = None,
        reconnect_max_retries: Optional[int] = None,
        reconnect_initial_delay: Optional[float] = None,
        reconnect_max_delay: Optional[float] = None,
    ):
        """
        Initialize the adapter.

        Args:
            client: Existing Redis client; when None, call connect() first
            key_prefix: Prefix for every key this adapter writes
            max_size_bytes: Per-namespace byte ceilings enforced by cleanup
            redis_url: Server used by connect()
            reconnect_max_retries: Connection attempts made by connect()
            reconnect_initial_delay: Delay before the second attempt, in seconds
            reconnect_max_delay: Cap on the delay between attempts, in seconds

        Unset options fall back to the global settings.
        """
        super().__init__(max_size_bytes)
        self.client: Optional[Redis] = client
        self.key_prefix = key_prefix or settings.redis_key_prefix
        self.redis_url = redis_url or settings.redis_url
        self.reconnect_max_retries = (
            reconnect_max_retries
            if reconnect_max_retries is not None
            else settings.redis_reconnect_max_retries
        )
        self.reconnect_initial_delay = (
            reconnect_initial_delay
            if reconnect_initial_delay is not None
            else settings.redis_reconnect_initial_delay
        )
        self.reconnect_max_delay = (
            reconnect_max_delay
            if reconnect_max_delay is not None
            else settings.redis_reconnect_max_delay
        )
        self.connected: bool = client is not None

    async def connect(self) -> None:
        """Establish connection to Redis with retry logic."""
        for attempt in range(self.reconnect_max_retries):
            try:
                self.client = redis.from_url(
                    self.redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                    max_connections=10,
                )
                # Test connection with timeout
                await asyncio.wait_for(self.client.ping(), timeout=5.0)
                self.connected = True
                logger.info("✅ Connected to Redis cache storage successfully")
                return
            except (RedisError, asyncio.TimeoutError) as e:
                if attempt < self.reconnect_max_retries - 1:
                    delay = min(
                        self.reconnect_initial_delay * (2**attempt),
                        self.reconnect_max_delay,
                    )
                    logger.warning(
                        f"Failed to connect to Redis (attempt {attempt + 1}/"
                        f"{self.reconnect_max_retries}): {e}. "
                        f"Retrying in {delay}s..."
                    )
                    await asyncio.sleep(delay)
                else:
                    logger.error(
                        f"Failed to connect to Redis after "
                        f"{self.reconnect_max_retries} attempts: {e}"
                    )
                    self.connected = False
                    raise

    async def disconnect(self) -> None:
        """Close connection to Redis."""
        if self.client:
            try:
                await self.client.aclose()
            except RedisError as e:
                logger.warning(f"Error closing Redis client: {e}")
            finally:
                self.connected = False
                logger.info("Disconnected from Redis cache storage")

    def _require_client(self) -> Redis:
        if self.client is None:
            raise RedisError("Redis storage adapter is not connected")
        return self.client

    def _value_key(self, key: str, namespace: Namespace) -> str:
        return f"{self.key_prefix}:{namespace_value(namespace)}:{key}"

    def _index_key(self, namespace: Namespace) -> str:
        return f"{self.key_prefix}:index:{namespace_value(namespace)}"

    async def get(self, key: str, namespace: Namespace) -> Optional[Dict[str, Any]]:
        raw = await self._require_client().get(self._value_key(key, namespace))
        if raw is None:
            return None
        return deserialize_value(raw)

    async def set(self, key: str, value: Dict[str, Any], namespace: Namespace) -> None:
        client = self._require_client()
        async with client.pipeline(transaction=True) as pipe:
            pipe.set(self._value_key(key, namespace), serialize_value(value))
            pipe.zadd(self._index_key(namespace), {key: time.time()})
            await pipe.execute()

    async def delete(self, key: str, namespace: Namespace) -> bool:
        client = self._require_client()
        async with client.pipeline(transaction=True) as pipe:
            pipe.delete(self._value_key(key, namespace))
            pipe.zrem(self._index_key(namespace), key)
            removed, _ = await pipe.execute()
        return bool(removed)

    async def list(self, namespace: Namespace, pattern: str = "*") -> List[str]:
        client = self._require_client()
        prefix = self._value_key("", namespace)
        keys = []
        async for redis_key in client.scan_iter(match=f"{prefix}{pattern}"):
            keys.append(redis_key[len(prefix) :])
        return sorted(keys)

    async def size(self, namespace: Namespace) -> int:
        client = self._require_client()
        total = 0
        for key in await client.zrange(self._index_key(namespace), 0, -1):
            total += await client.strlen(self._value_key(key, namespace))
        return total

    async def cleanup(self, namespace: Namespace) -> CleanupResult:
        limit = self.limit_for(namespace)
        if limit is None:
            return CleanupResult()

        client = self._require_client()
        total = await self.size(namespace)
        deleted = 0
        freed = 0

        # Oldest keys first, by write time
        for key in await client.zrange(self._index_key(namespace), 0, -1):
            if total <= limit:
                break
            raw = await client.get(self._value_key(key, namespace))
            entry_size = encoded_size(raw) if raw is not None else 0
            await self.delete(key, namespace)
            total -= entry_size
            freed += entry_size
            deleted += 1

        if deleted:
            logger.info(
                f"🧹 Redis storage cleanup ({namespace_value(namespace)}): "
                f"deleted {deleted} entries, freed {freed} bytes"
            )
        return CleanupResult(deleted=deleted, bytes_freed=freed)
