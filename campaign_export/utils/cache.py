"""Caching utilities for location data."""

import logging
import threading
import time
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LocationCache(Generic[T]):
    """Thread-safe single-value cache with a TTL.

    One instance per directory. ttl_seconds == 0 keeps the value until
    invalidate() is called.
    """

    def __init__(self, ttl_seconds: float = 300, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._value: Optional[T] = None
        self._loaded_at: Optional[float] = None
        self.hits = 0
        self.misses = 0

    def _is_fresh(self) -> bool:
        if self._loaded_at is None:
            return False
        if self.ttl_seconds == 0:
            return True
        return self._clock() - self._loaded_at < self.ttl_seconds

    def get_or_load(self, loader: Callable[[], T]) -> T:
        """Return the cached value, calling loader once if missing or stale."""
        with self._lock:
            if self._is_fresh():
                self.hits += 1
                return self._value

            self.misses += 1
            logger.debug("Location cache miss, loading")
            # A failing loader leaves the cache empty so the next call retries
            value = loader()
            self._value = value
            self._loaded_at = self._clock()
            return value

    def invalidate(self):
        with self._lock:
            self._value = None
            self._loaded_at = None
        logger.debug("Location cache invalidated")
