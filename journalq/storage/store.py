"""
Key-value store collaborator.

The engine persists JSON blobs under fixed string keys and nothing else. Any
object with get/set satisfies KeyValueStore; InMemoryStore is the default
and keeps values serialized so a read never aliases a caller's object.
"""

from __future__ import annotations

import json
import threading
from typing import Any, Protocol


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...


class InMemoryStore:
    """Thread-safe in-process store holding JSON text per key."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        """
        Parsed value for key, None when absent.

        Raises:
            ValueError: If the stored text is not valid JSON
        """
        with self._lock:
            raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        encoded = json.dumps(value, default=str)
        with self._lock:
            self._data[key] = encoded

    def set_raw(self, key: str, raw: str) -> None:
        """Store text as-is (used to simulate corrupted blobs)."""
        with self._lock:
            self._data[key] = raw

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)
