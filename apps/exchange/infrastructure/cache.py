"""
Rate cache adapters.
Production uses a Django cache alias (Redis when configured); tests use the
in-memory variant.
"""

import threading
import time
from typing import Callable

from django.core.cache import caches

from apps.exchange.domain.interfaces import BaseRateCache


class DjangoRateCache(BaseRateCache):
    """Rate cache on top of a Django cache backend alias."""

    def __init__(self, alias: str = "rates"):
        self.alias = alias

    @property
    def backend(self):
        return caches[self.alias]

    def get(self, key: str) -> str | None:
        return self.backend.get(key)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self.backend.set(key, value, timeout=ttl_seconds)


class InMemoryRateCache(BaseRateCache):

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._entries: dict[str, tuple[str, float]] = {}
        self._lock = threading.Lock()
        self.get_calls = 0
        self.set_calls = 0

    def get(self, key: str) -> str | None:
        with self._lock:
            self.get_calls += 1
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self.clock() >= expires_at:
                self._entries.pop(key, None)
                return None
            return value

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self.set_calls += 1
            self._entries[key] = (value, self.clock() + ttl_seconds)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
