"""In-process TTL cache for permission decisions.

Keys have the form ``permission:{plan_id}:{role_id}:{action_slug}``. Every
stored key is also recorded in three secondary indices (by plan, by role and by
action slug) so scoped invalidation touches exactly the affected keys instead of
scanning the whole key space.

The cache is local to one process. In a multi-instance deployment an
invalidation on one instance does not reach the others, which may serve a
stale decision until the entry's TTL runs out. Use ``RedisPermissionCache``
when that window is not acceptable.
"""

import logging
import threading
import time
from typing import Callable, Dict, Optional, Set, Tuple

logger = logging.getLogger("saas_permissions.cache")

KEY_PREFIX = "permission"
DEFAULT_TTL_SECONDS = 600
DEFAULT_CHECK_PERIOD_SECONDS = 120


class _Absent:
    """Marker returned on a cache miss. Compare with ``is``, never by truth."""

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


def permission_cache_key(plan_id, role_id, action_slug: str) -> str:
    """Build the cache key for a (plan, role, action slug) triple."""
    return f"{KEY_PREFIX}:{plan_id}:{role_id}:{action_slug}"


def parse_permission_cache_key(key: str) -> Tuple[str, str, str]:
    """Split a key into (plan_id, role_id, action_slug).

    Slugs may contain colons themselves, so only the first three separators
    are significant.
    """
    prefix, plan_id, role_id, action_slug = key.split(":", 3)
    if prefix != KEY_PREFIX:
        raise ValueError(f"Not a permission cache key: {key!r}")
    return plan_id, role_id, action_slug


class PermissionCache:
    """Thread-safe TTL map from permission keys to booleans."""

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        check_period_seconds: int = DEFAULT_CHECK_PERIOD_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.check_period_seconds = check_period_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: Dict[str, Tuple[bool, float]] = {}
        self._by_plan: Dict[str, Set[str]] = {}
        self._by_role: Dict[str, Set[str]] = {}
        self._by_action: Dict[str, Set[str]] = {}
        self._hits = 0
        self._misses = 0
        self._stop_event = threading.Event()
        self._sweeper: Optional[threading.Thread] = None

    # ---- reads / writes ----

    def get(self, key: str):
        """Return the cached boolean, or ``ABSENT`` if missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return ABSENT
            value, expires_at = entry
            if expires_at <= self._clock():
                self._remove(key)
                self._misses += 1
                return ABSENT
            self._hits += 1
            return value

    def set(self, key: str, value: bool, ttl_seconds: Optional[int] = None) -> None:
        """Store a decision. Non-boolean values are rejected."""
        if not isinstance(value, bool):
            raise TypeError("Permission cache values must be booleans")
        plan_id, role_id, action_slug = parse_permission_cache_key(key)
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl)
            self._by_plan.setdefault(plan_id, set()).add(key)
            self._by_role.setdefault(role_id, set()).add(key)
            self._by_action.setdefault(action_slug, set()).add(key)

    def delete(self, key: str) -> int:
        """Remove one entry. Returns how many keys were removed (0 or 1)."""
        with self._lock:
            if key not in self._entries:
                return 0
            self._remove(key)
            return 1

    # ---- invalidation ----

    def clear(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self._by_plan.clear()
            self._by_role.clear()
            self._by_action.clear()
        logger.debug("Cleared %d permission cache entries", count)
        return count

    def clear_plan(self, plan_id) -> int:
        """Drop every key with prefix ``permission:{plan_id}:``."""
        with self._lock:
            return self._remove_many(self._by_plan.get(str(plan_id), set()))

    def clear_role(self, role_id) -> int:
        """Drop every key whose role segment is ``role_id``."""
        with self._lock:
            return self._remove_many(self._by_role.get(str(role_id), set()))

    def clear_action(self, action_slug: str) -> int:
        """Drop every key ending with ``:{action_slug}``."""
        with self._lock:
            return self._remove_many(self._by_action.get(action_slug, set()))

    def clear_plan_action(self, plan_id, action_slug: str) -> int:
        """Drop keys for one action within one plan, for every role."""
        with self._lock:
            keys = self._by_plan.get(str(plan_id), set()) & self._by_action.get(action_slug, set())
            return self._remove_many(keys)

    # ---- expiry ----

    def sweep(self) -> int:
        """Evict expired entries. Returns the number evicted."""
        now = self._clock()
        with self._lock:
            expired = [key for key, (_, expires_at) in self._entries.items() if expires_at <= now]
            for key in expired:
                self._remove(key)
        if expired:
            logger.debug("Swept %d expired permission cache entries", len(expired))
        return len(expired)

    def start(self) -> None:
        """Start the background sweeper thread (idempotent)."""
        if self._sweeper is not None and self._sweeper.is_alive():
            return
        self._stop_event.clear()
        self._sweeper = threading.Thread(
            target=self._sweep_loop, name="permission-cache-sweeper", daemon=True,
        )
        self._sweeper.start()

    def stop(self) -> None:
        self._stop_event.set()
        if self._sweeper is not None:
            self._sweeper.join(timeout=5)
            self._sweeper = None

    def _sweep_loop(self) -> None:
        while not self._stop_event.wait(self.check_period_seconds):
            self.sweep()

    # ---- introspection ----

    def keys(self) -> list:
        with self._lock:
            return list(self._entries)

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "backend": "memory",
                "keys": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # ---- internals (caller holds the lock) ----

    def _remove_many(self, keys) -> int:
        keys = list(keys)
        for key in keys:
            self._remove(key)
        return len(keys)

    def _remove(self, key: str) -> None:
        self._entries.pop(key, None)
        plan_id, role_id, action_slug = parse_permission_cache_key(key)
        for index, part in (
            (self._by_plan, plan_id),
            (self._by_role, role_id),
            (self._by_action, action_slug),
        ):
            bucket = index.get(part)
            if bucket is None:
                continue
            bucket.discard(key)
            if not bucket:
                del index[part]
