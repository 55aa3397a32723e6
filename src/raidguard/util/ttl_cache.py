"""
Time-to-live cache.

Stores ``key -> (value, expires_at)`` pairs and forgets entries once they
expire. The raid monitor uses it to avoid re-alerting the same finding on
every polling tick. Instances are created by the caller and injected.
"""

from typing import Any, Callable, Dict, Optional, Tuple
import time

from raidguard.util.logger import get_logger

logger = get_logger("ttl_cache")


class TTLCache:
    """
    Key/value cache whose entries expire after a TTL.

    Args:
        ttl_seconds: Default time-to-live for entries.
        clock: Callable returning the current time in seconds. Defaults to
            ``time.monotonic``; tests inject a fake clock.
    """

    def __init__(self, ttl_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self._cache: Dict[str, Tuple[Any, float]] = {}
        self._ttl_seconds = float(ttl_seconds)
        self._clock = clock

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def get(self, key: str, default: Any = None) -> Any:
        """
        Return the cached value for ``key`` if it has not expired.

        Expired entries are removed on access.
        """
        entry = self._cache.get(key)
        if entry is None:
            return default
        value, expires_at = entry
        if self._clock() < expires_at:
            return value
        del self._cache[key]
        logger.debug("[CACHE] Expired key: %s", key)
        return default

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds (default TTL if None)."""
        lifetime = self._ttl_seconds if ttl is None else float(ttl)
        self._cache[key] = (value, self._clock() + lifetime)
        logger.debug("[CACHE] Set key: %s (ttl=%.1fs)", key, lifetime)

    def contains(self, key: str) -> bool:
        _missing = object()
        return self.get(key, _missing) is not _missing

    def __contains__(self, key: str) -> bool:
        return self.contains(key)

    def __len__(self) -> int:
        return len(self._cache)

    def invalidate(self, pattern: Optional[str] = None) -> int:
        """
        Remove entries whose key contains ``pattern``, or every entry if None.

        Returns:
            Number of entries removed.
        """
        if pattern is None:
            count = len(self._cache)
            self._cache.clear()
            logger.debug("[CACHE] Cleared all %d entries", count)
            return count

        keys_to_delete = [k for k in self._cache if pattern in k]
        for key in keys_to_delete:
            del self._cache[key]
        logger.debug("[CACHE] Cleared %d entries matching '%s'", len(keys_to_delete), pattern)
        return len(keys_to_delete)

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were dropped."""
        now = self._clock()
        expired = [k for k, (_, expires_at) in self._cache.items() if expires_at <= now]
        for key in expired:
            del self._cache[key]
        return len(expired)

    def stats(self) -> Dict[str, float]:
        return {
            "size": len(self._cache),
            "ttl_seconds": self._ttl_seconds,
        }
