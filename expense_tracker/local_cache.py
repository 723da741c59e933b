"""Local key/value cache used when the remote store is unavailable.

The cache holds JSON-serialisable values under string keys, in the same
spirit as browser local storage.  It is opened when the application starts
and closed when it stops; :class:`~expense_tracker.state.ExpenseBook`
drives that lifecycle.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class LocalCache(Protocol):
    def open(self) -> None: ...

    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...

    def close(self) -> None: ...


class MemoryCache:
    """In-process cache, mainly for tests and offline sessions."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = dict(initial or {})
        self.is_open = False

    def open(self) -> None:
        self.is_open = True

    def get(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        # Round-trip through JSON so stored values behave like the file cache.
        self._data[key] = json.loads(json.dumps(value))

    def close(self) -> None:
        self.is_open = False


class JsonFileCache:
    """Cache persisted as a single JSON document on disk.

    Every ``set`` rewrites the file.  A missing or corrupt file reads as an
    empty cache.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._data: Dict[str, Any] = {}
        self.is_open = False

    def open(self) -> None:
        self._data = self._read()
        self.is_open = True

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Ignoring unreadable cache file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring cache file %s: top level is not an object", self.path)
            return {}
        return data

    def get(self, key: str) -> Optional[Any]:
        if not self.is_open:
            self.open()
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        if not self.is_open:
            self.open()
        self._data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as handle:
            json.dump(self._data, handle, indent=2, sort_keys=True)

    def close(self) -> None:
        self._data = {}
        self.is_open = False
