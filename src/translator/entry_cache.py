"""In-memory cache of translated subtitle entries."""

import logging
from typing import Dict, Optional

from common.config import settings
from common.string_utils import md5_hex, normalize_for_cache

logger = logging.getLogger(__name__)


class EntryCache:
    """
    Bounded mapping of (source text, target language) to translated text.

    Keys are insertion ordered. When the cache is full, the oldest
    `eviction_chunk` keys are dropped in one step before the new key is
    added, so the size never exceeds `max_size`.

    Mutation never awaits, so one instance can be shared by engines running
    concurrently on the same event loop.
    """

    def __init__(
        self, max_size: Optional[int] = None, eviction_chunk: Optional[int] = None
    ):
        """
        Initialize the cache.

        Args:
            max_size: Capacity in entries (defaults to settings)
            eviction_chunk: Keys evicted at once when full (defaults to settings)

        Raises:
            ValueError: If either bound is not positive
        """
        self.max_size = max_size if max_size is not None else settings.entry_cache_max_size
        self.eviction_chunk = (
            eviction_chunk
            if eviction_chunk is not None
            else settings.entry_cache_eviction_chunk
        )
        if self.max_size < 1 or self.eviction_chunk < 1:
            raise ValueError(
                f"max_size and eviction_chunk must be positive, got "
                f"{self.max_size} and {self.eviction_chunk}"
            )
        self._store: Dict[str, str] = {}

    @staticmethod
    def make_key(text: str, target_language: str) -> str:
        """
        Cache key for a source text and target language.

        Text is trimmed and lowercased first, so casing and surrounding
        whitespace do not produce distinct keys.

        Example:
            >>> EntryCache.make_key("Hello", "fr") == EntryCache.make_key(" hello ", "fr")
            True
        """
        return md5_hex(f"{normalize_for_cache(text)}:{target_language}")

    def get(self, text: str, target_language: str) -> Optional[str]:
        """Cached translation, or None."""
        return self._store.get(self.make_key(text, target_language))

    def set(self, text: str, target_language: str, translation: str) -> None:
        """Store a translation, evicting the oldest keys when full."""
        key = self.make_key(text, target_language)

        if key not in self._store and len(self._store) >= self.max_size:
            # Dicts keep insertion order, so the first keys are the oldest
            oldest = list(self._store)[: self.eviction_chunk]
            for old_key in oldest:
                del self._store[old_key]
            logger.debug(f"Entry cache full, evicted {len(oldest)} oldest entries")

        self._store[key] = translation

    def clear(self) -> None:
        """Drop every cached entry."""
        self._store.clear()
        logger.info("Entry cache cleared")

    def stats(self) -> Dict[str, int]:
        """Current size and capacity."""
        return {"size": len(self._store), "max_size": self.max_size}

    def __len__(self) -> int:
        return len(self._store)
