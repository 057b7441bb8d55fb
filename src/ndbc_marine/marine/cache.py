"""Bounded in-process TTL cache for normalized observations."""

from __future__ import annotations

import random
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

V = TypeVar("V")

DEFAULT_TTL_SECONDS = 5 * 60
DEFAULT_MAX_ENTRIES = 256
DEFAULT_SWEEP_PROBABILITY = 0.1


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    key: str
    value: V
    stored_at: float


class TTLCache(Generic[V]):
    """Station-keyed cache with expiry and insertion-order eviction.

    Keys are case-folded, so ``"sgof1"`` and ``"SGOF1"`` share one entry. Entries are only returned while younger than ``ttl_seconds``.
    When full, the oldest *inserted* entry goes first; reads never refresh
    an entry's position.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        sweep_probability: float = DEFAULT_SWEEP_PROBABILITY,
        time_func: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        if max_entries <= 0:
            raise ValueError("max_entries must be > 0")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self.sweep_probability = sweep_probability
        self._time_func = time_func
        self._rng = rng or random.Random()
        self._entries: OrderedDict[str, CacheEntry[V]] = OrderedDict()

    @staticmethod
    def normalize_key(key: str) -> str:
        return key.casefold()

    def get(self, key: str) -> V | None:
        """Return the fresh value for ``key`` or None on a miss."""
        cache_key = self.normalize_key(key)
        entry = self._entries.get(cache_key)
        if entry is None:
            return None
        if self._is_expired(entry, self._time_func()):
            del self._entries[cache_key]
            return None
        return entry.value

    def put(self, key: str, value: V) -> None:
        """Store ``value`` as the newest entry, evicting the oldest when full."""
        cache_key = self.normalize_key(key)
        self._entries.pop(cache_key, None)
        self._entries[cache_key] = CacheEntry(
            key=cache_key,
            value=value,
            stored_at=self._time_func(),
        )
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
        if self.sweep_probability > 0 and self._rng.random() < self.sweep_probability:
            self.sweep()

    def sweep(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._time_func()
        expired = [key for key, entry in self._entries.items() if self._is_expired(entry, now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def _is_expired(self, entry: CacheEntry[V], now: float) -> bool:
        return now - entry.stored_at >= self.ttl_seconds
