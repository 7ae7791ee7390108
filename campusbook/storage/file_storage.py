"""JSON-file storage medium with atomic writes.

Each scope is one ``<scope>.json`` file under ``storage_root`` holding a
flat ``{key: text}`` object, so data survives process restarts the way
browser local storage survives a reload.
"""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Iterator
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)


class FileStorage:
    """Scoped storage persisted to a single JSON file.

    Every write rewrites the whole file through a temp file + rename. An
    unreadable scope file is logged and treated as empty; it is replaced on
    the next write.
    """

    def __init__(self, storage_root: str | os.PathLike[str], scope: str = "default") -> None:
        self.scope = scope
        self.storage_root = Path(storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True, mode=0o750)
        self.path = self.storage_root / f"{scope}.json"

    def _load(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}

        try:
            items = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Storage scope file is not valid JSON, treating as empty",
                           path=str(self.path), error=str(e))
            return {}

        if not isinstance(items, dict) or not all(isinstance(v, str) for v in items.values()):
            logger.warning("Storage scope file has unexpected shape, treating as empty",
                           path=str(self.path))
            return {}
        return items

    def _save(self, items: dict[str, str]) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=self.storage_root, prefix=f".{self.scope}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(items, f)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._save(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._save(items)

    def keys(self) -> Iterator[str]:
        return iter(list(self._load()))

    def clear(self) -> None:
        self._save({})
