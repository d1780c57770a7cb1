"""Pydantic models shared by the translation pipeline and the persisted caches."""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from common.subtitle_parser import SubtitleEntry
from common.utils import DateTimeUtils

CACHE_RECORD_VERSION = "1.0"


class CacheNamespace(str, Enum):
    """Logical partitions of the persisted cache key space."""

    SYNC = "sync"
    EMBEDDED = "embedded"


class RecordType(str, Enum):
    """Kind of artifact held by a persisted cache record."""

    ORIGINAL = "original"
    TRANSLATION = "translation"
    SYNC = "sync"


class ContentEncoding(str, Enum):
    """How the record content is stored inside the JSON document."""

    TEXT = "text"
    BASE64 = "base64"


class PersistedCacheRecord(BaseModel):
    """Versioned artifact stored through a storage adapter."""

    type: RecordType = Field(..., description="Artifact kind")
    video_hash: str = Field(..., description="Content hash of the source video")
    track_id: str = Field(..., description="Track or source subtitle identifier")
    language_code: str = Field(..., description="Language of the stored track")
    target_language_code: Optional[str] = Field(
        None, description="Target language for translation records"
    )
    original_sub_id: Optional[str] = Field(
        None, description="Original subtitle file id for sync records"
    )
    content: str = Field(..., description="Text content, or base64 for binary")
    content_encoding: ContentEncoding = Field(
        default=ContentEncoding.TEXT, description="Encoding of the content field"
    )
    metadata: Dict[str, Any] = Field(
        default_factory=dict, description="Open mapping of extra attributes"
    )
    timestamp: int = Field(
        default_factory=lambda: DateTimeUtils.get_current_timestamp_ms(),
        description="Creation time in milliseconds since epoch",
    )
    version: str = Field(
        default=CACHE_RECORD_VERSION, description="Record schema version"
    )


class CachedArtifact(BaseModel):
    """A record read back from the cache together with its storage key."""

    cache_key: str
    record: PersistedCacheRecord
    content: Any = Field(..., description="Decoded content (str or bytes)")


class CleanupResult(BaseModel):
    """Outcome of an adapter cleanup pass."""

    deleted: int = Field(default=0, ge=0)
    bytes_freed: int = Field(default=0, ge=0)


class CacheStats(BaseModel):
    """Size report for one persisted cache namespace."""

    total_size: int = Field(default=0, description="Stored bytes")
    total_size_mb: str = Field(default="0.00", description="Stored megabytes")
    file_count: int = Field(default=0, description="Number of records")
    max_size_gb: float = Field(..., description="Configured size ceiling")


class TranslationProgress(BaseModel):
    """Progress report emitted after each merged entry."""

    total_entries: int
    completed_entries: int
    current_batch: int = Field(..., description="1-based index of current batch")
    total_batches: int
    entry: SubtitleEntry
