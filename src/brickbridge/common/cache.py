"""Injected, bounded read-through caches.

Caches are plain instances handed to the components that need them; there are
no module-level singletons. Concurrent population of the same key is allowed
and simply overwrites, so no locking is done.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable

type Clock = Callable[[], float]


@runtime_checkable
class CacheService[K: Hashable, V](Protocol):
    """Minimal cache contract used by domain services."""

    def get(self, key: K) -> V | None: ...

    def set(self, key: K, value: V) -> None: ...

    def has(self, key: K) -> bool: ...


@dataclass(frozen=True, slots=True)
class CachePolicy:
    """Eviction policy: least-recently-used beyond ``max_size``, expiry after ``ttl_seconds``."""

    max_size: int = 500
    ttl_seconds: float | None = 3600.0

    def __post_init__(self) -> None:
        if self.max_size < 1:
            raise ValueError("CachePolicy.max_size must be positive")
        if self.ttl_seconds is not None and self.ttl_seconds <= 0:
            raise ValueError("CachePolicy.ttl_seconds must be positive or None")


@dataclass(slots=True)
class _Entry[V]:
    value: V
    expires_at: float | None


class BoundedTTLCache[K: Hashable, V]:
    def __init__(self, policy: CachePolicy | None = None, *, clock: Clock = time.monotonic) -> None:
        self.policy = policy or CachePolicy()
        self._clock = clock
        self._entries: OrderedDict[K, _Entry[V]] = OrderedDict()

    def get(self, key: K) -> V | None:
        entry = self._live_entry(key)
        if entry is None:
            return None
        self._entries.move_to_end(key)
        return entry.value

    def set(self, key: K, value: V) -> None:
        ttl = self.policy.ttl_seconds
        expires_at = None if ttl is None else self._clock() + ttl
        self._entries[key] = _Entry(value=value, expires_at=expires_at)
        self._entries.move_to_end(key)
        while len(self._entries) > self.policy.max_size:
            self._entries.popitem(last=False)

    def has(self, key: K) -> bool:
        return self._live_entry(key) is not None

    def delete(self, key: K) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def _live_entry(self, key: K) -> _Entry[V] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at is not None and self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry
