"""Tests for the Redis permission cache against a mocked client."""

from __future__ import annotations

from unittest.mock import MagicMock

import redis

from backend.core.config import Settings
from backend.services.cache_service import RedisPermissionCache, build_permission_cache
from backend.services.permission_cache import ABSENT, PermissionCache, permission_cache_key


class TestRedisPermissionCache:
    def test_get_decodes_flags(self) -> None:
        client = MagicMock()
        client.get.side_effect = ["1", "0", None]
        cache = RedisPermissionCache(client=client)
        key = permission_cache_key(1, 2, "project:view")
        assert cache.get(key) is True
        assert cache.get(key) is False
        assert cache.get(key) is ABSENT

    def test_outage_reads_as_miss(self) -> None:
        client = MagicMock()
        client.get.side_effect = redis.ConnectionError("down")
        assert RedisPermissionCache(client=client).get("permission:1:2:x") is ABSENT

    def test_set_writes_value_and_indices(self) -> None:
        client = MagicMock()
        pipe = client.pipeline.return_value
        cache = RedisPermissionCache(client=client, ttl_seconds=30)
        cache.set(permission_cache_key(1, 2, "project:view"), True)
        pipe.setex.assert_called_once_with("permission:1:2:project:view", 30, "1")
        added = {call.args[0] for call in pipe.sadd.call_args_list}
        assert added == {
            "permission-index:plan:1",
            "permission-index:role:2",
            "permission-index:action:project:view",
        }
        pipe.execute.assert_called_once()

    def test_clear_plan_deletes_indexed_keys(self) -> None:
        client = MagicMock()
        client.smembers.return_value = {"permission:1:2:a", "permission:1:3:a"}
        client.delete.return_value = 2
        assert RedisPermissionCache(client=client).clear_plan(1) == 2
        client.smembers.assert_called_once_with("permission-index:plan:1")

    def test_clear_plan_action_intersects(self) -> None:
        client = MagicMock()
        client.sinter.return_value = set()
        assert RedisPermissionCache(client=client).clear_plan_action(1, "a") == 0
        client.sinter.assert_called_once_with("permission-index:plan:1", "permission-index:action:a")
        client.delete.assert_not_called()


class TestBuildPermissionCache:
    def test_memory_backend_by_default(self) -> None:
        cache = build_permission_cache(Settings(PERMISSION_CACHE_TTL_SECONDS=42))
        assert isinstance(cache, PermissionCache)
        assert cache.ttl_seconds == 42

    def test_redis_backend(self) -> None:
        cache = build_permission_cache(Settings(PERMISSION_CACHE_BACKEND="redis"))
        assert isinstance(cache, RedisPermissionCache)
