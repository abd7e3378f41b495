"""Small in-memory TTL cache with per-entry lifetimes and LRU eviction."""

import time
from collections import OrderedDict
from typing import Any


class TTLCache:
    """In-memory cache with time-to-live and max-size eviction.

    Usage::

        cache = TTLCache(ttl=300, max_size=100)
        cache.set("key", value)
        cache.set("other", value, ttl=30)  # shorter lifetime for this entry
        hit = cache.get("key")  # returns value or None if expired/missing
    """

    def __init__(self, ttl: float = 300, max_size: int | None = 100) -> None:
        self._ttl = ttl
        self._max_size = max_size
        # key -> (value, expires_at); insertion order doubles as LRU order
        self._store: OrderedDict[str, tuple[Any, float]] = OrderedDict()

    def get(self, key: str) -> Any | None:
        """Return the cached value if present and not expired, else None."""
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if time.time() >= expires_at:
            del self._store[key]
            return None
        self._store.move_to_end(key)
        return value

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store *value* under *key*, evicting the oldest entry if at capacity.

        With ``max_size=None`` nothing live is ever evicted; expired entries
        are dropped instead.
        """
        lifetime = self._ttl if ttl is None else ttl
        if key in self._store:
            self._store.move_to_end(key)
        self._store[key] = (value, time.time() + lifetime)
        if self._max_size is None:
            self.purge_expired()
            return
        while len(self._store) > self._max_size:
            self._store.popitem(last=False)

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        now = time.time()
        expired = [key for key, (_, expires_at) in self._store.items() if now >= expires_at]
        for key in expired:
            del self._store[key]
        return len(expired)

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)
