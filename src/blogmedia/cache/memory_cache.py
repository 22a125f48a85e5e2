"""Key/value memory cache with optional sliding expiration."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

DEFAULT_SCAN_INTERVAL = timedelta(minutes=1)


def _default_clock() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class _CacheEntry:
    value: Any
    sliding: timedelta | None
    last_access: datetime

    def is_valid(self, *, now: datetime) -> bool:
        if self.sliding is None:
            return True
        return now - self.last_access < self.sliding

    def touch(self, *, now: datetime) -> None:
        self.last_access = now


@dataclass(slots=True)
class _KeyLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class MemoryCache:
    """Shared cache for the lifetime of the process.

    An entry created with ``sliding=None`` never expires. Otherwise every
    read pushes its expiry forward by ``sliding``; an entry that sat idle for
    the whole window is dropped on the next lookup, or by the expiry scan
    that ``set`` runs at most once per ``scan_interval``.
    ``get_or_create_async`` runs at most one factory per key at a time.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] | None = None,
        scan_interval: timedelta = DEFAULT_SCAN_INTERVAL,
    ) -> None:
        self._clock = clock or _default_clock
        self._scan_interval = scan_interval
        self._last_scan = self._clock()
        self._entries: dict[str, _CacheEntry] = {}
        self._locks: dict[str, _KeyLock] = {}

    def __contains__(self, key: str) -> bool:
        return self._lookup(key) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def _lookup(self, key: str) -> _CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        now = self._clock()
        if not entry.is_valid(now=now):
            self._entries.pop(key, None)
            return None
        entry.touch(now=now)
        return entry

    def _scan_expired(self, now: datetime) -> None:
        if now - self._last_scan < self._scan_interval:
            return
        self._last_scan = now
        expired = [key for key, entry in self._entries.items() if not entry.is_valid(now=now)]
        for key in expired:
            del self._entries[key]

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._lookup(key)
        return default if entry is None else entry.value

    def set(self, key: str, value: Any, *, sliding: timedelta | None = None) -> None:
        if sliding is not None and sliding <= timedelta(0):
            raise ValueError("sliding expiration must be positive")
        now = self._clock()
        self._scan_expired(now)
        self._entries[key] = _CacheEntry(value=value, sliding=sliding, last_access=now)

    def remove(self, key: str) -> None:
        self._entries.pop(key, None)

    def get_or_create(
        self,
        key: str,
        factory: Callable[[], Any],
        *,
        sliding: timedelta | None = None,
    ) -> Any:
        """Return the cached value or store what ``factory`` returns.

        Exceptions raised by ``factory`` propagate and nothing is cached.
        """
        entry = self._lookup(key)
        if entry is not None:
            return entry.value
        value = factory()
        self.set(key, value, sliding=sliding)
        return value

    async def get_or_create_async(
        self,
        key: str,
        factory: Callable[[], Awaitable[Any]],
        *,
        sliding: timedelta | None = None,
    ) -> Any:
        entry = self._lookup(key)
        if entry is not None:
            return entry.value

        key_lock = self._locks.get(key)
        if key_lock is None:
            key_lock = self._locks[key] = _KeyLock()
        # the lock stays registered while anyone holds or waits for it
        key_lock.users += 1
        try:
            async with key_lock.lock:
                entry = self._lookup(key)
                if entry is not None:
                    return entry.value
                value = await factory()
                self.set(key, value, sliding=sliding)
                return value
        finally:
            key_lock.users -= 1
            if key_lock.users == 0 and self._locks.get(key) is key_lock:
                del self._locks[key]


__all__ = ["MemoryCache"]
