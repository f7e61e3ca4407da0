"""In-memory expiring cache shared by the fetch layer."""

import threading
import time
from typing import Any, Optional

DEFAULT_TTL_SECONDS = 5 * 60
BLOB_TTL_SECONDS = 15 * 60


class TTLCache:
    """
    Process-lifetime key/value cache with per-entry expiry.

    Unbounded in size; entries are dropped lazily when read after expiry.
    Safe to share between threads.
    """

    def __init__(self, default_ttl: float = DEFAULT_TTL_SECONDS, clock=time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires = entry
            if expires <= self._clock():
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: Optional[float] = None):
        expires = self._clock() + (self.default_ttl if ttl is None else ttl)
        with self._lock:
            self._entries[key] = (value, expires)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
