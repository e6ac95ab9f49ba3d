"""Key/value storage media.

This module provides the raw string storage used beneath the chunked
store: a directory of files for real use and a dict for tests.
Backends are synchronous; callers decide where the I/O runs.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Protocol
from urllib.parse import quote, unquote

from core.errors import RosterStoreError

_TEMP_SUFFIX = ".tmp"


class StorageBackend(Protocol):
    """Minimal string key/value medium."""

    def get(self, key: str) -> str | None:
        """Return the stored value or None when the key is absent."""

    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    def remove(self, key: str) -> None:
        """Delete a key. Missing keys are ignored."""

    def keys(self) -> list[str]:
        """List every stored key."""


class MemoryBackend:
    """In-process backend holding values in a dict."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._values)


class FileSystemBackend:
    """One UTF-8 file per key under a root directory.

    File names are percent-encoded keys. Writes land in a temporary file
    first and are moved into place, so a reader sees either the old or the
    new value of a single key, never a torn write.
    """

    def __init__(self, root: Path) -> None:
        self._root = root
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as error:
            raise RosterStoreError(
                f"Failed to read key '{key}' at {path}: {error}. "
                "Check permissions on the data root."
            ) from error

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        temp_path = path.with_name(path.name + _TEMP_SUFFIX)
        try:
            temp_path.write_text(value, encoding="utf-8")
            os.replace(temp_path, path)
        except OSError as error:
            raise RosterStoreError(
                f"Failed to write key '{key}' at {path}: {error}. "
                "Check free space and permissions on the data root."
            ) from error

    def remove(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as error:
            raise RosterStoreError(f"Failed to remove key '{key}': {error}.") from error

    def keys(self) -> list[str]:
        return sorted(
            unquote(path.name)
            for path in self._root.iterdir()
            if path.is_file() and not path.name.endswith(_TEMP_SUFFIX)
        )

    def _path(self, key: str) -> Path:
        if not key:
            raise RosterStoreError("Storage keys must be non-empty strings.")
        return self._root / quote(key, safe="")
