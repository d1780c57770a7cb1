"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path
from typing import List
from unittest.mock import AsyncMock

import fakeredis
import fakeredis.aioredis
import pytest
import pytest_asyncio

# Add src directory to Python path for imports
project_root = Path(__file__).parent.parent
src_path = project_root / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from common.storage.filesystem import FilesystemStorageAdapter
from common.storage.memory import MemoryStorageAdapter
from common.storage.redis_storage import RedisStorageAdapter
from translator.entry_cache import EntryCache
from translator.translation_engine import TranslationEngine


SAMPLE_SRT = """1
00:00:01,000 --> 00:00:04,000
Welcome to this video

2
00:00:04,500 --> 00:00:08,000
Today we're going to learn
something new

3
00:00:08,500 --> 00:00:12,000
Let's get started!
"""


def numbered_reply(texts: List[str]) -> str:
    """Provider-style numbered reply for the given texts."""
    return "\n\n".join(f"{i}. {text}" for i, text in enumerate(texts, 1))


def batch_texts(batch_text: str) -> List[str]:
    """Entry texts of a numbered batch as sent to the provider."""
    return [block.split(". ", 1)[1] for block in batch_text.split("\n\n")]


class FakeTranslationClient:
    """
    In-memory provider that upper-cases every entry.

    Records each call so tests can assert on what was sent.
    """

    def __init__(self):
        self.calls = []

    async def translate_subtitle(
        self, batch_text, source_language, target_language, prompt
    ):
        self.calls.append(
            {
                "batch_text": batch_text,
                "source_language": source_language,
                "target_language": target_language,
                "prompt": prompt,
            }
        )
        return numbered_reply([text.upper() for text in batch_texts(batch_text)])


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def sample_srt():
    """Three-entry SRT document, one entry spanning two lines."""
    return SAMPLE_SRT


@pytest.fixture
def fake_client():
    """Recording provider that upper-cases text."""
    return FakeTranslationClient()


@pytest.fixture
def mock_client():
    """Provider mock for tests that script replies."""
    client = AsyncMock()
    client.translate_subtitle = AsyncMock()
    return client


@pytest.fixture
def entry_cache():
    """Small entry cache."""
    return EntryCache(max_size=100, eviction_chunk=10)


@pytest.fixture
def engine(fake_client, entry_cache):
    """Engine with no pacing delays."""
    return TranslationEngine(
        fake_client,
        entry_cache=entry_cache,
        batch_size=2,
        max_retries=3,
        retry_initial_delay=0,
        batch_delay=0,
    )


@pytest.fixture
def fake_clock():
    """Manually advanced clock."""
    return FakeClock()


@pytest_asyncio.fixture
async def fake_redis_client():
    """
    Fake Redis client using fakeredis for realistic Redis behavior.

    This provides a real Redis-like interface without requiring a Redis server.
    """
    fake_redis = fakeredis.aioredis.FakeRedis(decode_responses=True, encoding="utf-8")
    yield fake_redis
    await fake_redis.flushall()
    await fake_redis.aclose()


@pytest.fixture
def memory_adapter():
    """Memory storage adapter without size limits."""
    return MemoryStorageAdapter()


@pytest.fixture
def filesystem_adapter(tmp_path):
    """Filesystem storage adapter rooted in a temporary directory."""
    return FilesystemStorageAdapter(tmp_path / "cache")


@pytest.fixture
def redis_adapter():
    """Redis storage adapter backed by an isolated fakeredis server."""
    client = fakeredis.aioredis.FakeRedis(
        server=fakeredis.FakeServer(), decode_responses=True
    )
    return RedisStorageAdapter(client=client, key_prefix="test-cache")


@pytest.fixture(params=["memory", "filesystem", "redis"])
def storage_adapter(request):
    """Every storage backend, for contract tests."""
    return request.getfixturevalue(f"{request.param}_adapter")
