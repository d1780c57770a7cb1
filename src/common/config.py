"""Configuration management for the subtitle translation system."""

import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_DOWNLOADS_PER_MINUTE = 12
STORAGE_BACKENDS = ("memory", "filesystem", "redis")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Logging
    log_level: str = Field(default="INFO", env="LOG_LEVEL")

    # Batch Translation Pipeline
    translation_batch_size: int = Field(
        default=100, env="TRANSLATION_BATCH_SIZE"
    )  # Entries submitted to the provider per call
    translation_max_retries: int = Field(
        default=3, env="TRANSLATION_MAX_RETRIES"
    )  # Total attempts per batch, including the first one
    translation_retry_initial_delay: float = Field(
        default=1.0, env="TRANSLATION_RETRY_INITIAL_DELAY"
    )  # Backoff before the second attempt, in seconds
    translation_retry_exponential_base: int = Field(
        default=2, env="TRANSLATION_RETRY_EXPONENTIAL_BASE"
    )  # 2 = double each time
    translation_batch_delay: float = Field(
        default=1.0, env="TRANSLATION_BATCH_DELAY"
    )  # Pause between successive batches, in seconds

    # Entry Cache
    entry_cache_max_size: int = Field(default=10000, env="ENTRY_CACHE_MAX_SIZE")
    entry_cache_eviction_chunk: int = Field(
        default=1000, env="ENTRY_CACHE_EVICTION_CHUNK"
    )  # Oldest keys dropped in one go when the cache is full

    # Download Rate Limiter
    downloads_per_minute: int = Field(
        default=DEFAULT_DOWNLOADS_PER_MINUTE, env="DOWNLOADS_PER_MINUTE"
    )
    download_window_seconds: float = Field(
        default=60.0, env="DOWNLOAD_WINDOW_SECONDS"
    )

    # Persisted Cache Storage
    storage_backend: str = Field(default="filesystem", env="STORAGE_BACKEND")
    cache_storage_path: str = Field(default="./.cache", env="CACHE_STORAGE_PATH")
    sync_cache_max_size_gb: float = Field(default=50, env="SYNC_CACHE_MAX_SIZE_GB")
    embedded_cache_max_size_gb: float = Field(
        default=50, env="EMBEDDED_CACHE_MAX_SIZE_GB"
    )

    # Redis Configuration (storage_backend=redis)
    redis_url: str = Field(default="redis://localhost:6379", env="REDIS_URL")
    redis_key_prefix: str = Field(default="subtitle-cache", env="REDIS_KEY_PREFIX")
    redis_reconnect_max_retries: int = Field(
        default=3, env="REDIS_RECONNECT_MAX_RETRIES"
    )
    redis_reconnect_initial_delay: float = Field(
        default=1.0, env="REDIS_RECONNECT_INITIAL_DELAY"
    )
    redis_reconnect_max_delay: float = Field(
        default=30.0, env="REDIS_RECONNECT_MAX_DELAY"
    )

    # Translation Provider (OpenAI)
    openai_api_key: Optional[str] = Field(default=None, env="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", env="OPENAI_MODEL")
    openai_max_tokens: int = Field(default=4096, env="OPENAI_MAX_TOKENS")
    openai_temperature: float = Field(
        default=0.3, env="OPENAI_TEMPERATURE"
    )  # Lower for consistent translations
    openai_timeout: float = Field(default=60.0, env="OPENAI_TIMEOUT")

    @field_validator("downloads_per_minute", mode="before")
    @classmethod
    def parse_downloads_per_minute(cls, v: Any) -> int:
        """
        Parse the download budget, falling back to the default on bad input.

        Args:
            v: Raw value from the environment or constructor

        Returns:
            Positive integer budget per window
        """
        try:
            parsed = int(v)
        except (TypeError, ValueError):
            parsed = 0

        if parsed > 0:
            return parsed

        logger.warning(
            f"Invalid DOWNLOADS_PER_MINUTE={v!r}, falling back to default "
            f"{DEFAULT_DOWNLOADS_PER_MINUTE}/min"
        )
        return DEFAULT_DOWNLOADS_PER_MINUTE

    @field_validator("storage_backend")
    @classmethod
    def validate_storage_backend(cls, v: str) -> str:
        """
        Validate the persisted cache backend name.

        Args:
            v: Backend name

        Returns:
            Lowercased backend name

        Raises:
            ValueError: If the backend is not supported
        """
        backend = v.strip().lower()
        if backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"storage_backend must be one of {', '.join(STORAGE_BACKENDS)}, "
                f"got {v!r}"
            )
        return backend

    @staticmethod
    def gb_to_bytes(size_gb: float) -> int:
        """Convert a gigabyte ceiling into bytes."""
        return int(size_gb * 1024 * 1024 * 1024)

    class Config:
        # Find .env file relative to project root
        # This file is in src/common/, so go up 2 levels to project root
        _project_root = Path(__file__).parent.parent.parent
        env_file = str(_project_root / ".env")
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()
