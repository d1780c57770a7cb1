"""Build the configured storage adapter."""

import logging
from pathlib import Path
from typing import Optional

from common.config import Settings, settings as default_settings
from common.schemas import CacheNamespace
from common.storage.base import StorageAdapter
from common.storage.filesystem import FilesystemStorageAdapter
from common.storage.memory import MemoryStorageAdapter
from common.storage.redis_storage import RedisStorageAdapter

logger = logging.getLogger(__name__)


def namespace_limits(config: Settings) -> dict:
    """Per-namespace byte ceilings from settings."""
    return {
        CacheNamespace.SYNC: Settings.gb_to_bytes(config.sync_cache_max_size_gb),
        CacheNamespace.EMBEDDED: Settings.gb_to_bytes(
            config.embedded_cache_max_size_gb
        ),
    }


async def create_storage_adapter(config: Optional[Settings] = None) -> StorageAdapter:
    """
    Create the storage adapter selected by `storage_backend`.

    Args:
        config: Settings to use (defaults to the global settings)

    Returns:
        Ready-to-use StorageAdapter instance
    """
    config = config or default_settings
    limits = namespace_limits(config)
    backend = config.storage_backend

    if backend == "memory":
        adapter: StorageAdapter = MemoryStorageAdapter(max_size_bytes=limits)
    elif backend == "redis":
        adapter = RedisStorageAdapter(
            key_prefix=config.redis_key_prefix,
            max_size_bytes=limits,
            redis_url=config.redis_url,
            reconnect_max_retries=config.redis_reconnect_max_retries,
            reconnect_initial_delay=config.redis_reconnect_initial_delay,
            reconnect_max_delay=config.redis_reconnect_max_delay,
        )
        await adapter.connect()
    else:
        adapter = FilesystemStorageAdapter(
            Path(config.cache_storage_path), max_size_bytes=limits
        )

    logger.info(f"Using {backend} storage adapter for persisted caches")
    return adapter
