"""Redis-backed permission cache shared by every application instance.

Drop-in alternative to ``PermissionCache`` for multi-instance deployments:
invalidations issued by one instance are visible to all of them. Redis TTLs
replace the local sweeper, and Redis sets replace the local secondary indices.
"""

import logging
from typing import Optional

import redis

from backend.core.config import settings
from backend.services.permission_cache import (
    ABSENT, DEFAULT_TTL_SECONDS, KEY_PREFIX, PermissionCache, parse_permission_cache_key,
)

logger = logging.getLogger("saas_permissions.cache")

INDEX_PREFIX = "permission-index"


class RedisPermissionCache:
    """Permission cache stored in Redis."""

    def __init__(self, client: Optional[redis.Redis] = None, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self._client = client
        self.ttl_seconds = ttl_seconds

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.from_url(
                settings.REDIS_URL,
                decode_responses=True,
                max_connections=100,
            )
        return self._client

    @staticmethod
    def _index_key(kind: str, value) -> str:
        return f"{INDEX_PREFIX}:{kind}:{value}"

    def get(self, key: str):
        """Return the cached boolean, or ``ABSENT``. Redis outages read as misses."""
        try:
            raw = self.client.get(key)
        except redis.RedisError as e:
            logger.warning("Permission cache read failed for %s: %s", key, e)
            return ABSENT
        if raw is None:
            return ABSENT
        return raw == "1"

    def set(self, key: str, value: bool, ttl_seconds: Optional[int] = None) -> None:
        if not isinstance(value, bool):
            raise TypeError("Permission cache values must be booleans")
        plan_id, role_id, action_slug = parse_permission_cache_key(key)
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        index_keys = (
            self._index_key("plan", plan_id),
            self._index_key("role", role_id),
            self._index_key("action", action_slug),
        )
        try:
            pipe = self.client.pipeline()
            pipe.setex(key, ttl, "1" if value else "0")
            for index_key in index_keys:
                pipe.sadd(index_key, key)
                pipe.expire(index_key, ttl)
            pipe.execute()
        except redis.RedisError as e:
            logger.warning("Permission cache write failed for %s: %s", key, e)

    def delete(self, key: str) -> int:
        try:
            return int(self.client.delete(key))
        except redis.RedisError as e:
            logger.error("Permission cache delete failed for %s: %s", key, e)
            return 0

    def clear(self) -> int:
        removed = 0
        try:
            for pattern in (f"{KEY_PREFIX}:*", f"{INDEX_PREFIX}:*"):
                keys = list(self.client.scan_iter(match=pattern, count=500))
                if keys:
                    removed += int(self.client.delete(*keys))
        except redis.RedisError as e:
            logger.error("Permission cache clear failed: %s", e)
        return removed

    def clear_plan(self, plan_id) -> int:
        return self._clear_index(self._index_key("plan", plan_id))

    def clear_role(self, role_id) -> int:
        return self._clear_index(self._index_key("role", role_id))

    def clear_action(self, action_slug: str) -> int:
        return self._clear_index(self._index_key("action", action_slug))

    def clear_plan_action(self, plan_id, action_slug: str) -> int:
        try:
            keys = self.client.sinter(
                self._index_key("plan", plan_id), self._index_key("action", action_slug),
            )
            return int(self.client.delete(*keys)) if keys else 0
        except redis.RedisError as e:
            logger.error("Permission cache invalidation failed for plan %s / %s: %s", plan_id, action_slug, e)
            return 0

    def _clear_index(self, index_key: str) -> int:
        try:
            keys = self.client.smembers(index_key)
            if keys:
                removed = int(self.client.delete(*keys))
            else:
                removed = 0
            self.client.delete(index_key)
            return removed
        except redis.RedisError as e:
            logger.error("Permission cache invalidation failed for %s: %s", index_key, e)
            return 0

    def sweep(self) -> int:
        # Redis expires keys on its own.
        return 0

    def start(self) -> None:
        pass

    def stop(self) -> None:
        pass

    def stats(self) -> dict:
        try:
            keys = sum(1 for _ in self.client.scan_iter(match=f"{KEY_PREFIX}:*", count=500))
            info = self.client.info("stats")
        except redis.RedisError:
            return {"backend": "redis", "keys": 0, "hits": 0, "misses": 0}
        return {
            "backend": "redis",
            "keys": keys,
            "hits": int(info.get("keyspace_hits", 0)),
            "misses": int(info.get("keyspace_misses", 0)),
        }

    def health_check(self) -> bool:
        """Check if Redis is reachable."""
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False


def build_permission_cache(config=settings):
    """Construct the configured permission cache. Called once per process."""
    if config.PERMISSION_CACHE_BACKEND == "redis":
        return RedisPermissionCache(ttl_seconds=config.PERMISSION_CACHE_TTL_SECONDS)
    return PermissionCache(
        ttl_seconds=config.PERMISSION_CACHE_TTL_SECONDS,
        check_period_seconds=config.PERMISSION_CACHE_CHECK_PERIOD_SECONDS,
    )
