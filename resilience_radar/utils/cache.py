# resilience_radar/utils/cache.py
from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Tuple
import threading
import time


class ValueCache:
    """
    Process-local key -> (expiry, value) store with TTL invalidation.

    Values are returned as stored (no copy); callers must not mutate what they
    get back. There is no size bound: the key space is countries x bundles.
    """

    def __init__(self, default_ttl: float = 300.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.default_ttl = default_ttl
        self._clock = clock
        self._store: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            hit = self._store.get(key)
            if not hit:
                return None
            exp, value = hit
            if self._clock() >= exp:
                self._store.pop(key, None)
                return None
            return value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            self._store[key] = (self._clock() + ttl, value)

    def get_or_set(self, key: str, compute: Callable[[], Any], ttl: Optional[float] = None) -> Any:
        """Return the cached value or compute, store and return it. None results are not cached."""
        cached = self.get(key)
        if cached is not None:
            return cached
        value = compute()
        if value is not None:
            self.set(key, value, ttl)
        return value

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


class RateLimiter:
    """Fixed-window call budget per API name."""

    def __init__(self, max_calls: int, window: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.max_calls = max_calls
        self.window = window
        self._clock = clock
        self._windows: Dict[str, Tuple[int, float]] = {}  # name -> (count, reset_at)
        self._lock = threading.Lock()

    def allow(self, name: str) -> bool:
        now = self._clock()
        with self._lock:
            row = self._windows.get(name)
            if row is None or now > row[1]:
                self._windows[name] = (1, now + self.window)
                return True
            count, reset_at = row
            if count >= self.max_calls:
                return False
            self._windows[name] = (count + 1, reset_at)
            return True


__all__ = ["ValueCache", "RateLimiter"]
