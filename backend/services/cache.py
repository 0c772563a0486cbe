"""Expiring key-value cache for recommendation payloads.

Expiry is enforced twice: ``get`` treats an expired entry as a miss and
drops it, and ``sweep`` purges everything expired. ``CacheSweeper`` calls
``sweep`` on a fixed interval from a daemon thread. Storage, TTL checks and
LRU eviction come from ``cachetools.TLRUCache``.
"""

import base64
import json
import logging
import threading
import time
from collections.abc import Callable
from typing import Any, NamedTuple

from cachetools import TLRUCache

logger = logging.getLogger(__name__)


def build_cache_key(prefix: str, profile_id: str, params: dict[str, Any]) -> str:
    """Deterministic key: ``prefix:profile_id:<base64 of canonical JSON params>``."""
    payload = json.dumps(params, sort_keys=True, separators=(",", ":"), default=str)
    encoded = base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")
    return f"{prefix}:{profile_id}:{encoded}"


def profile_pattern(profile_id: str) -> str:
    """Invalidation pattern covering every keyed entry of one profile."""
    return f"*:{profile_id}:*"


def analytics_key(profile_id: str) -> str:
    return f"analytics:{profile_id}"


class CacheEntry(NamedTuple):
    value: str
    ttl_seconds: float


def _entry_expiry(_key: str, entry: CacheEntry, now: float) -> float:
    return now + entry.ttl_seconds


def _matches(key: str, pattern: str) -> bool:
    if "*" not in pattern:
        return key == pattern
    leading = pattern.startswith("*")
    trailing = pattern.endswith("*")
    core = pattern.strip("*")
    if leading and trailing:
        return core in key
    if trailing:
        return key.startswith(core)
    if leading:
        return key.endswith(core)
    head, _, tail = pattern.partition("*")
    return key.startswith(head) and key.endswith(tail) and len(key) >= len(head) + len(tail)


class RecommendationCache:
    """LRU-bounded cache where every entry carries its own TTL.

    Entries are stored as ``(value, ttl_seconds)`` in a ``TLRUCache`` whose
    time-to-use function reads the TTL back out. ``TLRUCache`` is not
    thread-safe, so each call into it runs under ``self._lock``.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        maxsize: int = 10000,
    ) -> None:
        self._data: TLRUCache = TLRUCache(maxsize=maxsize, ttu=_entry_expiry, timer=clock)
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            self._data.expire()
            entry = self._data.get(key)
        return entry.value if entry is not None else None

    def set(self, key: str, value: str, ttl_seconds: float) -> None:
        with self._lock:
            if ttl_seconds <= 0:
                # TLRUCache silently skips already-expired items
                self._data.pop(key, None)
                return
            self._data[key] = CacheEntry(value, ttl_seconds)

    def invalidate(self, pattern: str) -> int:
        """Remove keys matching ``pattern`` (``*`` wildcard at either end)."""
        with self._lock:
            self._data.expire()
            keys = [k for k in list(self._data.keys()) if _matches(k, pattern)]
        removed = 0
        for key in keys:
            with self._lock:
                if self._data.pop(key, None) is not None:
                    removed += 1
        if removed:
            logger.debug("Invalidated %d cache entries for %s", removed, pattern)
        return removed

    def invalidate_profile(self, profile_id: str) -> int:
        """Drop every entry derived from one profile, analytics included."""
        removed = self.invalidate(profile_pattern(profile_id))
        removed += self.invalidate(analytics_key(profile_id))
        logger.info("Cleared %d cache entries for profile %s", removed, profile_id)
        return removed

    def sweep(self) -> int:
        """Purge expired entries. Returns how many were removed."""
        with self._lock:
            removed = len(self._data.expire())
        if removed:
            logger.debug("Cache sweep removed %d expired entries", removed)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


class CacheSweeper:
    """Runs ``cache.sweep()`` every ``interval_seconds`` on a daemon thread."""

    def __init__(self, cache: RecommendationCache, interval_seconds: float = 300) -> None:
        self._cache = cache
        self._interval = interval_seconds
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="recommendation-cache-sweeper", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            try:
                self._cache.sweep()
            except Exception:
                logger.exception("Cache sweep failed")
