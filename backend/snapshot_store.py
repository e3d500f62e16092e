"""Durable key-value store for in-progress workout snapshots.

Values are kept in a Kivy :class:`~kivy.storage.jsonstore.JsonStore` which
rewrites its file synchronously on every change, so a snapshot written right
after a mutation survives the process being killed.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from kivy.storage.jsonstore import JsonStore

from core import DEFAULT_SNAPSHOT_PATH


class SnapshotStore:
    """String-keyed store of opaque JSON-serialisable values."""

    def __init__(self, path: Path = DEFAULT_SNAPSHOT_PATH):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._store = JsonStore(str(self.path))
        except ValueError:
            # Unparsable file: keep it for inspection and start empty
            corrupt = self.path.with_name(self.path.name + ".corrupt")
            logging.warning("Corrupt snapshot store %s moved to %s", self.path, corrupt)
            self.path.replace(corrupt)
            self._store = JsonStore(str(self.path))

    def get(self, key: str, default: Any = None) -> Any:
        if not self._store.exists(key):
            return default
        return self._store.get(key).get("value", default)

    def set(self, key: str, value: Any) -> None:
        self._store.put(key, value=value)

    def remove(self, key: str) -> None:
        if self._store.exists(key):
            self._store.delete(key)

    def keys(self) -> list[str]:
        return list(self._store.keys())

    def keys_with_suffix(self, suffix: str) -> list[str]:
        """Return stored keys ending in ``_<suffix>``."""
        return [key for key in self.keys() if key.endswith(f"_{suffix}")]
