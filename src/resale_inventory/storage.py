"""Flat-file JSON document store."""
from __future__ import annotations

import json
import logging
import tempfile
from copy import deepcopy
from pathlib import Path
from threading import Lock, RLock
from typing import Any, Dict

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """Raised when a document cannot be written to disk."""


class JsonDocumentStore:
    """Loads and saves whole JSON documents kept under a single directory.

    Every document is named (``"items"`` maps to ``<data_dir>/items.json``) and
    is always read and written in full. Reads never fail: a missing document is
    seeded with the supplied default, and a malformed or unreadable one yields
    a copy of the default. Writes go through a temporary file that replaces the
    document, so readers observe either the previous or the new contents.
    """

    def __init__(self, data_dir: str | Path) -> None:
        self.data_dir = Path(data_dir)
        self._locks: Dict[str, RLock] = {}
        self._locks_guard = Lock()

    def path_for(self, name: str) -> Path:
        return self.data_dir / f"{name}.json"

    def lock(self, name: str) -> RLock:
        """Return the lock serializing read-modify-write cycles on ``name``."""

        with self._locks_guard:
            if name not in self._locks:
                self._locks[name] = RLock()
            return self._locks[name]

    def load(self, name: str, default: Any) -> Any:
        path = self.path_for(name)
        with self.lock(name):
            try:
                self._ensure_data_dir()
            except OSError:
                logger.warning("Cannot create data directory %s", self.data_dir, exc_info=True)
                return deepcopy(default)
            if not path.exists():
                try:
                    self._write_unlocked(path, default)
                except OSError:
                    logger.exception("Failed to seed document %s", path)
                else:
                    logger.info("Seeded document %s with default contents", path)
                return deepcopy(default)
            try:
                raw = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError):
                logger.warning("Cannot read document %s", path, exc_info=True)
                return deepcopy(default)
            try:
                return json.loads(raw)
            except json.JSONDecodeError as exc:
                logger.warning("Malformed JSON in %s: %s", path, exc)
                return deepcopy(default)

    def save(self, name: str, value: Any) -> None:
        path = self.path_for(name)
        with self.lock(name):
            try:
                self._ensure_data_dir()
                self._write_unlocked(path, value)
            except (OSError, TypeError, ValueError) as exc:
                logger.exception("Failed to write document %s", path)
                raise StoreError(f"Failed to write document '{name}'") from exc

    def _ensure_data_dir(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _write_unlocked(path: Path, value: Any) -> None:
        payload = json.dumps(value, indent=2, ensure_ascii=False)
        handle = tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.stem}-",
            suffix=".tmp",
            delete=False,
        )
        temp_path = Path(handle.name)
        try:
            with handle:
                handle.write(payload)
            temp_path.replace(path)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise


__all__ = ["JsonDocumentStore", "StoreError"]
