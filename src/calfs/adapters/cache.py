"""Caching calendar adapter - memoizes any CalendarSource for a fixed TTL."""

import logging
import threading
import time
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable

from calfs.core.calendar import CalendarEntry
from calfs.ports.calendar_source import CalendarSource

logger = logging.getLogger(__name__)

DEFAULT_TTL = 60.0

_MISSING = object()


@dataclass
class _CacheEntry:
    value: Any
    expires_at: float


class TTLStore:
    """
    Thread-safe in-memory key/value store with per-entry expiry.

    Expired entries are dropped lazily on access.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        """Return a cached value if present and not expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            if self._clock() >= entry.expires_at:
                del self._entries[key]
                return default
            return entry.value

    def set(self, key: str, value: Any, ttl: float) -> None:
        """Store a value that expires ttl seconds from now."""
        with self._lock:
            self._entries[key] = _CacheEntry(value=value, expires_at=self._clock() + ttl)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class CachedCalendarSource:
    """
    Calendar source decorator that caches every query under a path-shaped key.

    Implements CalendarSource protocol. Results are returned verbatim until
    the TTL runs out; failures from the inner source are never cached.
    Two concurrent misses on the same key may both call through.
    """

    def __init__(
        self,
        inner: CalendarSource,
        ttl: float = DEFAULT_TTL,
        store: TTLStore | None = None,
    ):
        self.inner = inner
        self.ttl = ttl
        self.store = store if store is not None else TTLStore()

    def _cached(self, key: str, fetch: Callable[[], Any]) -> Any:
        value = self.store.get(key, _MISSING)
        if value is not _MISSING:
            logger.debug(f"Cache hit for {key}")
            return value

        logger.debug(f"Cache miss for {key}")
        value = fetch()
        self.store.set(key, value, self.ttl)
        return value

    def years(self) -> list[int]:
        return self._cached("/", self.inner.years)

    def months(self, year: int) -> list[int]:
        return self._cached(f"/{year}", lambda: self.inner.months(year))

    def days(self, year: int, month: int) -> list[int]:
        return self._cached(f"/{year}/{month}", lambda: self.inner.days(year, month))

    def entries(self, target_date: date) -> list[CalendarEntry]:
        key = f"/{target_date.year}/{target_date.month}/{target_date.day}"
        return self._cached(key, lambda: self.inner.entries(target_date))
