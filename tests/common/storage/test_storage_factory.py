"""Tests for storage adapter selection."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from common.config import Settings
from common.storage.factory import create_storage_adapter, namespace_limits
from common.storage.filesystem import FilesystemStorageAdapter
from common.storage.memory import MemoryStorageAdapter
from common.storage.redis_storage import RedisStorageAdapter


@pytest.mark.unit
class TestCreateStorageAdapter:
    """Test backend selection from settings."""

    @pytest.mark.asyncio
    async def test_memory_backend(self):
        """Test the memory backend with namespace ceilings."""
        config = Settings(_env_file=None, storage_backend="memory", sync_cache_max_size_gb=1)

        adapter = await create_storage_adapter(config)

        assert isinstance(adapter, MemoryStorageAdapter)
        assert adapter.limit_for("sync") == 1024**3

    @pytest.mark.asyncio
    async def test_filesystem_backend(self, tmp_path):
        """Test the filesystem backend rooted at the configured path."""
        config = Settings(
            _env_file=None,
            storage_backend="filesystem",
            cache_storage_path=str(tmp_path / "cache"),
        )

        adapter = await create_storage_adapter(config)

        assert isinstance(adapter, FilesystemStorageAdapter)
        assert adapter.root_path == tmp_path / "cache"
        assert (tmp_path / "cache").is_dir()

    @pytest.mark.asyncio
    async def test_redis_backend_connects(self):
        """Test that the redis backend is connected before being returned."""
        config = Settings(_env_file=None, storage_backend="redis", redis_key_prefix="x")

        with patch.object(
            RedisStorageAdapter, "connect", new_callable=AsyncMock
        ) as mock_connect:
            adapter = await create_storage_adapter(config)

        assert isinstance(adapter, RedisStorageAdapter)
        assert adapter.key_prefix == "x"
        mock_connect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_redis_backend_uses_given_settings(self):
        """Test that the redis connection comes from the settings passed in."""
        config = Settings(
            _env_file=None,
            storage_backend="redis",
            redis_url="redis://custom-host:6380",
            redis_reconnect_max_retries=5,
            redis_reconnect_max_delay=10.0,
        )
        mock_client = MagicMock()
        mock_client.ping = AsyncMock(return_value=True)

        with patch(
            "common.storage.redis_storage.redis.from_url", return_value=mock_client
        ) as mock_from_url:
            adapter = await create_storage_adapter(config)

        assert mock_from_url.call_args.args[0] == "redis://custom-host:6380"
        assert adapter.reconnect_max_retries == 5
        assert adapter.reconnect_max_delay == 10.0
        assert adapter.client is mock_client


def test_namespace_limits():
    """Test per-namespace ceilings in bytes."""
    config = Settings(
        _env_file=None, sync_cache_max_size_gb=2, embedded_cache_max_size_gb=0.5
    )

    limits = namespace_limits(config)

    assert limits == {"sync": 2 * 1024**3, "embedded": 512 * 1024**2}
