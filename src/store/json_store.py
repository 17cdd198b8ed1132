# src/store/json_store.py - v2
"""File-based key-value store (default STORE_BACKEND=json).

One file per key under STORE_ROOT. File names are the percent-encoded key so
that list_keys() can recover the original key without opening the file.
Writes go to a temporary file first and are renamed into place, so a crash
never leaves a half-written value behind.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from urllib.parse import quote, unquote

from searchcache.store.base_store import BaseKeyValueStore, StoreError

logger = logging.getLogger(__name__)

_SUFFIX = ".json"


class JsonKeyValueStore(BaseKeyValueStore):
    """Key-value store persisting each value as its own file."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)

    async def get(self, key: str) -> str | None:
        path = self._entry_path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Failed to read {key!r}: {e}") from e

    async def set(self, key: str, value: str) -> None:
        path = self._entry_path(key)
        tmp = path.with_name(path.name + ".tmp")
        try:
            tmp.write_text(value, encoding="utf-8")
            os.replace(tmp, path)
        except OSError as e:
            raise StoreError(f"Failed to write {key!r}: {e}") from e

    async def delete(self, key: str) -> None:
        path = self._entry_path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StoreError(f"Failed to delete {key!r}: {e}") from e

    async def list_keys(self, prefix: str = "") -> list[str]:
        if not self._root.is_dir():
            return []
        keys: list[str] = []
        for path in self._root.glob(f"*{_SUFFIX}"):
            key = unquote(path.name[: -len(_SUFFIX)])
            if key.startswith(prefix):
                keys.append(key)
        return sorted(keys)

    def _entry_path(self, key: str) -> Path:
        """Return file path for a key."""
        return self._root / f"{quote(key, safe='')}{_SUFFIX}"
