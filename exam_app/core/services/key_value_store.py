"""Key-value storage backends for the persisted exam history."""

from __future__ import annotations

import errno
import os
from pathlib import Path
import tempfile
from typing import Protocol


_QUOTA_ERRNOS = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}


class StorageError(Exception):
    """Raised when a value cannot be written to or removed from storage."""


class StorageQuotaExceededError(StorageError):
    """Raised when a write would exceed the storage quota."""


class KeyValueStore(Protocol):
    """Minimal get/set/clear contract the history store relies on."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def clear(self, key: str) -> None: ...


def _check_quota(key: str, value: str, quota_bytes: int | None) -> None:
    if quota_bytes is None:
        return
    size = len(value.encode("utf-8"))
    if size > quota_bytes:
        raise StorageQuotaExceededError(
            f"Value for '{key}' is {size} bytes, exceeding the {quota_bytes} byte quota."
        )


class MemoryStore:
    """In-process store, optionally limited to ``quota_bytes`` per value."""

    def __init__(self, quota_bytes: int | None = None) -> None:
        self._values: dict[str, str] = {}
        self.quota_bytes = quota_bytes

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        _check_quota(key, value, self.quota_bytes)
        self._values[key] = value

    def clear(self, key: str) -> None:
        self._values.pop(key, None)


class JsonFileStore:
    """Stores each key as ``<directory>/<key>.json``.

    Writes go to a temporary file in the same directory which then replaces
    the target, so a failed write never leaves a truncated file behind.
    """

    def __init__(self, directory: Path, quota_bytes: int | None = None) -> None:
        self._directory = Path(directory)
        self.quota_bytes = quota_bytes

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set(self, key: str, value: str) -> None:
        _check_quota(key, value, self.quota_bytes)
        path = self.path_for(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            if exc.errno in _QUOTA_ERRNOS:
                raise StorageQuotaExceededError(f"No space left to write {path}: {exc}") from exc
            raise StorageError(f"Could not write {path}: {exc}") from exc

    def clear(self, key: str) -> None:
        try:
            self.path_for(key).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Could not remove {self.path_for(key)}: {exc}") from exc
