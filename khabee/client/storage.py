"""
Key/Value Storage Adapters

The cart persists itself the way a browser app uses localStorage: string
keys, JSON values, failures that never reach the shopper. ``MemoryStorage``
is for tests and throwaway sessions, ``JsonFileStorage`` keeps every key in
one JSON document on disk.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional, Union

from filelock import FileLock, Timeout

logger = logging.getLogger(__name__)


class BaseStorage(ABC):
    """Abstract key/value store holding JSON-serializable values."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[Any]:
        """Stored value, or None if missing or unreadable."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: Any) -> None:
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        pass


class MemoryStorage(BaseStorage):
    """Process-local storage. Values are copied through JSON like the file store."""

    def __init__(self):
        self._data: dict[str, str] = {}

    def get_item(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set_item(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage(BaseStorage):
    """
    All keys in one JSON file.

    Writes take a ``FileLock`` next to the file and rewrite the whole
    document, so concurrent writers never interleave; the last one wins.

    Args:
        path: JSON document location
        lock_timeout: Seconds to wait for the lock before giving up
    """

    def __init__(self, path: Union[str, Path], lock_timeout: float = 5.0):
        self.path = Path(path)
        self.lock = FileLock(f"{self.path}.lock", timeout=lock_timeout)

    def _read(self) -> dict[str, Any]:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable storage file {self.path}: {e}")
            return {}

        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        tmp.replace(self.path)

    def get_item(self, key: str) -> Optional[Any]:
        return self._read().get(key)

    def set_item(self, key: str, value: Any) -> None:
        try:
            with self.lock:
                data = self._read()
                data[key] = value
                self._write(data)
        except (OSError, TypeError, Timeout) as e:
            logger.error(f"Could not save '{key}' to {self.path}: {e}")

    def remove_item(self, key: str) -> None:
        try:
            with self.lock:
                data = self._read()
                if data.pop(key, None) is not None:
                    self._write(data)
        except (OSError, Timeout) as e:
            logger.error(f"Could not remove '{key}' from {self.path}: {e}")
