"""Tests for cached checks and for cache coherence on every table write."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from backend.core.constants import ROLE_OWNER, ROLE_ADMIN, ROLE_MEMBER, PLAN_FREE, PLAN_PRO
from backend.core.exceptions import ResourceNotFoundError
from backend.models import PlanActionPermission, RoleActionPermission
from backend.services.permission_cache import ABSENT, permission_cache_key


class TestCachedChecks:
    def test_result_is_cached_under_slug_key(self, db, seeded, permissions, cache) -> None:
        plan_id, role_id = seeded.plans[PLAN_PRO], seeded.roles[ROLE_ADMIN]
        assert permissions.can_role_perform_action(db, plan_id, role_id, "project:update") is True
        assert cache.get(permission_cache_key(plan_id, role_id, "project:update")) is True

    def test_denials_are_cached_too(self, db, seeded, permissions, cache) -> None:
        plan_id, role_id = seeded.plans[PLAN_FREE], seeded.roles[ROLE_OWNER]
        assert permissions.can_role_perform_action(db, plan_id, role_id, "billing:view") is False
        assert cache.get(permission_cache_key(plan_id, role_id, "billing:view")) is False

    def test_cached_value_is_served_without_db(self, db, seeded, permissions, cache) -> None:
        cache.set(permission_cache_key(1, 1, "made:up"), True)
        assert permissions.can_role_perform_action(None, 1, 1, "made:up") is True

    def test_unknown_slug_denies_and_is_not_cached(self, db, seeded, permissions, cache) -> None:
        plan_id, role_id = seeded.plans[PLAN_PRO], seeded.roles[ROLE_OWNER]
        assert permissions.can_role_perform_action(db, plan_id, role_id, "nope:nothing") is False
        assert cache.get(permission_cache_key(plan_id, role_id, "nope:nothing")) is ABSENT

    def test_any_of_several_roles(self, db, seeded, permissions) -> None:
        plan_id = seeded.plans[PLAN_PRO]
        assert permissions.can_roles_perform_action(
            db, plan_id, [seeded.roles[ROLE_MEMBER], seeded.roles[ROLE_ADMIN]], "member:invite",
        )
        assert not permissions.can_roles_perform_action(db, plan_id, [], "member:invite")

    def test_check_actions(self, db, seeded, permissions) -> None:
        result = permissions.check_actions(
            db, seeded.plans[PLAN_FREE], seeded.roles[ROLE_MEMBER], ["project:view", "project:create"],
        )
        assert result == {"project:view": True, "project:create": False}

    def test_lookup_failure_is_not_cached(self, db, seeded, permissions, cache, monkeypatch) -> None:
        plan_id, role_id = seeded.plans[PLAN_PRO], seeded.roles[ROLE_ADMIN]
        key = permission_cache_key(plan_id, role_id, "project:update")
        original_query = db.query

        def flaky_query(*entities):
            if entities and (
                entities[0] is PlanActionPermission.enabled or entities[0] is RoleActionPermission.allowed
            ):
                raise OperationalError("SELECT", {}, Exception("connection reset"))
            return original_query(*entities)

        monkeypatch.setattr(db, "query", flaky_query)
        assert permissions.can_role_perform_action(db, plan_id, role_id, "project:update") is False
        assert cache.get(key) is ABSENT

        monkeypatch.undo()
        assert permissions.can_role_perform_action(db, plan_id, role_id, "project:update") is True
        assert cache.get(key) is True


class TestTableWrites:
    def test_plan_upsert_is_idempotent(self, db, seeded, permissions) -> None:
        plan_id, action_id = seeded.plans[PLAN_FREE], seeded.actions["billing:view"]
        first = permissions.upsert_plan_action_permission(db, plan_id, action_id, enabled=True)
        second = permissions.upsert_plan_action_permission(db, plan_id, action_id, enabled=False)
        assert first.id == second.id
        assert second.enabled is False
        assert db.query(PlanActionPermission).filter_by(plan_id=plan_id, action_id=action_id).count() == 1

    def test_role_upsert_is_idempotent(self, db, seeded, permissions) -> None:
        key = (seeded.plans[PLAN_PRO], seeded.roles[ROLE_MEMBER], seeded.actions["member:invite"])
        permissions.upsert_role_action_permission(db, *key, allowed=True)
        permissions.upsert_role_action_permission(db, *key, allowed=True)
        assert db.query(RoleActionPermission).filter_by(
            plan_id=key[0], role_id=key[1], action_id=key[2],
        ).count() == 1

    def test_upsert_requires_existing_rows(self, db, seeded, permissions) -> None:
        with pytest.raises(ResourceNotFoundError):
            permissions.upsert_plan_action_permission(db, 9999, seeded.actions["project:view"])
        with pytest.raises(ResourceNotFoundError):
            permissions.upsert_role_action_permission(
                db, seeded.plans[PLAN_PRO], 9999, seeded.actions["project:view"],
            )

    def test_plan_write_invalidates_every_role(self, db, seeded, permissions) -> None:
        plan_id, action_id = seeded.plans[PLAN_PRO], seeded.actions["project:update"]
        roles = [seeded.roles[ROLE_OWNER], seeded.roles[ROLE_ADMIN]]
        for role_id in roles:
            assert permissions.can_role_perform_action(db, plan_id, role_id, "project:update") is True

        permissions.upsert_plan_action_permission(db, plan_id, action_id, enabled=False)
        for role_id in roles:
            assert permissions.can_role_perform_action(db, plan_id, role_id, "project:update") is False

    def test_revoking_allowance_overrides_cached_grant(self, db, seeded, permissions) -> None:
        plan_id, role_id = seeded.plans[PLAN_PRO], seeded.roles[ROLE_ADMIN]
        assert permissions.can_role_perform_action(db, plan_id, role_id, "member:invite") is True

        permissions.upsert_role_action_permission(
            db, plan_id, role_id, seeded.actions["member:invite"], allowed=False,
        )
        assert permissions.can_role_perform_action(db, plan_id, role_id, "member:invite") is False

    def test_role_write_invalidates_exact_key(self, db, seeded, permissions, cache) -> None:
        plan_id, role_id = seeded.plans[PLAN_PRO], seeded.roles[ROLE_MEMBER]
        assert permissions.can_role_perform_action(db, plan_id, role_id, "member:invite") is False
        assert permissions.can_role_perform_action(db, plan_id, role_id, "project:view") is True

        permissions.upsert_role_action_permission(
            db, plan_id, role_id, seeded.actions["member:invite"], allowed=True,
        )
        assert cache.get(permission_cache_key(plan_id, role_id, "project:view")) is True
        assert permissions.can_role_perform_action(db, plan_id, role_id, "member:invite") is True

    def test_delete_rows(self, db, seeded, permissions) -> None:
        plan_id, role_id = seeded.plans[PLAN_PRO], seeded.roles[ROLE_ADMIN]
        action_id = seeded.actions["member:remove"]
        assert permissions.can_role_perform_action(db, plan_id, role_id, "member:remove") is True

        permissions.delete_role_action_permission(db, plan_id, role_id, action_id)
        assert permissions.can_role_perform_action(db, plan_id, role_id, "member:remove") is False
        with pytest.raises(ResourceNotFoundError):
            permissions.delete_role_action_permission(db, plan_id, role_id, action_id)

        permissions.delete_plan_action_permission(db, plan_id, action_id)
        assert not permissions.is_action_enabled(db, plan_id, "member:remove")

    def test_role_listing_filters_by_role(self, db, seeded, permissions) -> None:
        plan_id, role_id = seeded.plans[PLAN_FREE], seeded.roles[ROLE_MEMBER]
        rows = permissions.get_role_action_permissions(db, plan_id, role_id)
        assert {row.action.slug for row in rows} == {
            "project:view", "member:view", "settings:view", "dashboard:view",
        }


class TestAccessMatrix:
    def test_matrix_reports_stored_flags(self, db, seeded, permissions) -> None:
        plan_id = seeded.plans[PLAN_FREE]
        permissions.upsert_role_action_permission(
            db, plan_id, seeded.roles[ROLE_OWNER], seeded.actions["project:delete"], allowed=True,
        )
        rows = {row["action"].slug: row for row in permissions.get_access_matrix(db, plan_id)}
        assert len(rows) == len(seeded.actions)
        assert rows["project:delete"]["enabled"] is False
        assert rows["project:delete"]["roles"][ROLE_OWNER] is True
        assert rows["project:view"]["roles"] == {ROLE_OWNER: True, ROLE_ADMIN: True, ROLE_MEMBER: True}

    def test_matrix_unknown_plan(self, db, seeded, permissions) -> None:
        with pytest.raises(ResourceNotFoundError):
            permissions.get_access_matrix(db, 9999)
