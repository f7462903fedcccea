"""Tests for the in-process permission cache: keys, TTL and scoped invalidation."""

from __future__ import annotations

import pytest

from backend.services.permission_cache import (
    ABSENT,
    PermissionCache,
    parse_permission_cache_key,
    permission_cache_key,
)


class TestKeys:
    def test_key_format(self) -> None:
        assert permission_cache_key(1, 2, "project:delete") == "permission:1:2:project:delete"

    def test_parse_keeps_colons_in_slug(self) -> None:
        assert parse_permission_cache_key("permission:1:2:project:delete") == ("1", "2", "project:delete")

    def test_parse_rejects_foreign_prefix(self) -> None:
        with pytest.raises(ValueError):
            parse_permission_cache_key("session:1:2:x")


class TestGetSet:
    def test_miss_is_absent_not_false(self, cache: PermissionCache) -> None:
        assert cache.get(permission_cache_key(1, 1, "a:b")) is ABSENT

    def test_cached_false_is_a_hit(self, cache: PermissionCache) -> None:
        key = permission_cache_key(1, 1, "a:b")
        cache.set(key, False)
        assert cache.get(key) is False
        assert cache.stats()["hits"] == 1

    def test_rejects_non_boolean(self, cache: PermissionCache) -> None:
        with pytest.raises(TypeError):
            cache.set(permission_cache_key(1, 1, "a:b"), 1)

    def test_entry_expires_after_ttl(self, cache: PermissionCache, clock) -> None:
        key = permission_cache_key(1, 1, "a:b")
        cache.set(key, True)
        clock.advance(599)
        assert cache.get(key) is True
        clock.advance(1)
        assert cache.get(key) is ABSENT
        assert len(cache) == 0

    def test_sweep_evicts_only_expired(self, cache: PermissionCache, clock) -> None:
        cache.set(permission_cache_key(1, 1, "old"), True)
        clock.advance(300)
        cache.set(permission_cache_key(1, 1, "new"), True)
        clock.advance(300)
        assert cache.sweep() == 1
        assert cache.keys() == [permission_cache_key(1, 1, "new")]


class TestInvalidation:
    @pytest.fixture
    def filled(self, cache: PermissionCache) -> PermissionCache:
        for plan_id in (1, 11):
            for role_id in (1, 2):
                for slug in ("project:delete", "project:view"):
                    cache.set(permission_cache_key(plan_id, role_id, slug), True)
        return cache

    def test_clear_plan_does_not_touch_prefix_sibling(self, filled: PermissionCache) -> None:
        assert filled.clear_plan(1) == 4
        assert all(key.startswith("permission:11:") for key in filled.keys())

    def test_clear_role(self, filled: PermissionCache) -> None:
        assert filled.clear_role(2) == 4
        assert all(parse_permission_cache_key(key)[1] == "1" for key in filled.keys())

    def test_clear_action(self, filled: PermissionCache) -> None:
        assert filled.clear_action("project:delete") == 4
        assert all(key.endswith(":project:view") for key in filled.keys())

    def test_clear_plan_action(self, filled: PermissionCache) -> None:
        assert filled.clear_plan_action(11, "project:view") == 2
        assert permission_cache_key(11, 1, "project:view") not in filled.keys()
        assert permission_cache_key(1, 1, "project:view") in filled.keys()

    def test_delete_single_key(self, filled: PermissionCache) -> None:
        key = permission_cache_key(1, 2, "project:view")
        assert filled.delete(key) == 1
        assert filled.delete(key) == 0
        assert filled.get(key) is ABSENT

    def test_clear_everything(self, filled: PermissionCache) -> None:
        assert filled.clear() == 8
        assert len(filled) == 0
        assert filled.clear_plan(1) == 0


class TestSweeperThread:
    def test_start_and_stop(self) -> None:
        cache = PermissionCache(ttl_seconds=60, check_period_seconds=60)
        cache.start()
        cache.start()
        cache.stop()
        assert cache._sweeper is None
