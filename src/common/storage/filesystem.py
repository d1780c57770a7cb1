"""Filesystem storage adapter (one JSON file per record)."""

import fnmatch
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import quote, unquote

from common.schemas import CleanupResult
from common.storage.base import (
    Namespace,
    StorageAdapter,
    deserialize_value,
    namespace_value,
    serialize_value,
)
from common.string_utils import md5_hex

logger = logging.getLogger(__name__)

RECORD_SUFFIX = ".json"
# Encoded keys longer than this are stored under a digest name
MAX_ENCODED_NAME_LENGTH = 200
HASHED_NAME_PREFIX_LENGTH = 100
# Never produced by percent-encoding, so it marks digest names
HASHED_NAME_MARKER = "%%"
# Holds the real key inside records stored under a digest name
STORED_KEY_FIELD = "_storage_key"


class FilesystemStorageAdapter(StorageAdapter):
    """
    Stores records under `<root>/<namespace>/<shard>/<encoded key>.json`.

    Keys are percent-encoded into file names, so no key can point outside
    its namespace directory. The shard is the first two characters of the
    encoded key, to avoid too many files in one directory.

    An encoded key too long for a file name is stored as a truncated prefix
    plus the md5 of the key, and the key itself is kept inside the record.
    """

    def __init__(
        self,
        root_path: Union[str, Path],
        max_size_bytes: Optional[Dict[str, int]] = None,
    ):
        super().__init__(max_size_bytes)
        self.root_path = Path(root_path)
        self.root_path.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Filesystem storage initialized at: {self.root_path}")

    def _namespace_dir(self, namespace: Namespace) -> Path:
        return self.root_path / namespace_value(namespace)

    @staticmethod
    def _file_stem(key: str) -> str:
        encoded = quote(key, safe="")
        if len(encoded) <= MAX_ENCODED_NAME_LENGTH:
            return encoded
        return (
            f"{encoded[:HASHED_NAME_PREFIX_LENGTH]}{HASHED_NAME_MARKER}{md5_hex(key)}"
        )

    @staticmethod
    def _is_hashed_stem(stem: str) -> bool:
        return HASHED_NAME_MARKER in stem

    def _record_path(self, key: str, namespace: Namespace) -> Path:
        """
        Build the file path for a key.

        Args:
            key: Storage key
            namespace: Cache namespace

        Returns:
            Path to the record file
        """
        stem = self._file_stem(key)
        shard = stem[:2].replace(".", "_") or "__"
        return self._namespace_dir(namespace) / shard / f"{stem}{RECORD_SUFFIX}"

    def _stored_key(self, path: Path) -> Optional[str]:
        """Key of a record stored under a digest name."""
        try:
            value = deserialize_value(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except ValueError as e:
            logger.warning(f"⚠️  Unreadable cache record {path.name}: {e}")
            return None
        return value.get(STORED_KEY_FIELD)

    def _iter_records(self, namespace: Namespace) -> List[Tuple[str, Path]]:
        directory = self._namespace_dir(namespace)
        if not directory.exists():
            return []

        records = []
        for path in directory.glob(f"*/*{RECORD_SUFFIX}"):
            stem = path.name[: -len(RECORD_SUFFIX)]
            if self._is_hashed_stem(stem):
                key = self._stored_key(path)
                if key is None:
                    continue
            else:
                key = unquote(stem)
            records.append((key, path))
        return records

    async def get(self, key: str, namespace: Namespace) -> Optional[Dict[str, Any]]:
        path = self._record_path(key, namespace)
        if not path.exists():
            return None
        value = deserialize_value(path.read_text(encoding="utf-8"))
        value.pop(STORED_KEY_FIELD, None)
        return value

    async def set(self, key: str, value: Dict[str, Any], namespace: Namespace) -> None:
        path = self._record_path(key, namespace)
        path.parent.mkdir(parents=True, exist_ok=True)

        if self._is_hashed_stem(path.name):
            value = {**value, STORED_KEY_FIELD: key}

        # Write to a temp file first so readers never see a partial record
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.write_text(serialize_value(value), encoding="utf-8")
        os.replace(tmp_path, path)

    async def delete(self, key: str, namespace: Namespace) -> bool:
        path = self._record_path(key, namespace)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False

    async def list(self, namespace: Namespace, pattern: str = "*") -> List[str]:
        return sorted(
            key
            for key, _ in self._iter_records(namespace)
            if fnmatch.fnmatchcase(key, pattern)
        )

    async def size(self, namespace: Namespace) -> int:
        total = 0
        for _, path in self._iter_records(namespace):
            try:
                total += path.stat().st_size
            except FileNotFoundError:
                continue
        return total

    async def cleanup(self, namespace: Namespace) -> CleanupResult:
        limit = self.limit_for(namespace)
        if limit is None:
            return CleanupResult()

        files = []
        for _, path in self._iter_records(namespace):
            try:
                stat = path.stat()
            except FileNotFoundError:
                continue
            files.append((stat.st_mtime_ns, stat.st_size, path))

        total = sum(size for _, size, _ in files)
        if total <= limit:
            return CleanupResult()

        deleted = 0
        freed = 0
        # Oldest files go first
        for _, file_size, path in sorted(files, key=lambda item: item[0]):
            if total <= limit:
                break
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            total -= file_size
            freed += file_size
            deleted += 1

        logger.info(
            f"🧹 Filesystem storage cleanup ({namespace_value(namespace)}): "
            f"deleted {deleted} files, freed {freed} bytes"
        )
        return CleanupResult(deleted=deleted, bytes_freed=freed)
