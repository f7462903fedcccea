"""Permission service: entitlement/allowance tables and cached permission checks.

Every write to ``plan_action_permissions`` or ``role_action_permissions``
invalidates the matching cache scope before returning, so the next cached
check in this process reflects the new state.
"""

import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.models import (
    Action, PlanActionPermission, Role, RoleActionPermission, SubscriptionPlan,
)
from backend.core.exceptions import ResourceNotFoundError
from backend.services.permission_cache import ABSENT, permission_cache_key
from backend.services.permission_evaluator import (
    evaluate_permission, is_action_enabled_for_plan,
)
from backend.services.store_utils import upsert

logger = logging.getLogger("saas_permissions.permissions")


class PermissionService:
    """Entry point for permission checks and for the admin permission matrix."""

    def __init__(self, cache):
        self.cache = cache

    # ---- checks ----

    def can_role_perform_action(self, db: Session, plan_id: int, role_id: int, action_slug: str) -> bool:
        """Cached check for one (plan, role, action slug) triple."""
        key = permission_cache_key(plan_id, role_id, action_slug)
        cached = self.cache.get(key)
        if cached is not ABSENT:
            return cached

        action_id = self._resolve_action_id(db, action_slug)
        if action_id is None:
            return False

        allowed = evaluate_permission(db, plan_id, role_id, action_id)
        if allowed is None:
            # Lookup failed: deny this call only, keep the key uncached.
            return False
        self.cache.set(key, allowed)
        return allowed

    def can_roles_perform_action(
        self, db: Session, plan_id: int, role_ids: Iterable[int], action_slug: str,
    ) -> bool:
        """True if any of the given roles may perform the action."""
        return any(
            self.can_role_perform_action(db, plan_id, role_id, action_slug)
            for role_id in role_ids
        )

    def check_actions(
        self, db: Session, plan_id: int, role_id: int, action_slugs: Iterable[str],
    ) -> Dict[str, bool]:
        return {
            slug: self.can_role_perform_action(db, plan_id, role_id, slug)
            for slug in action_slugs
        }

    def is_action_enabled(self, db: Session, plan_id: int, action_slug: str) -> bool:
        """Plan-level feature gate, independent of the caller's role."""
        action_id = self._resolve_action_id(db, action_slug)
        if action_id is None:
            return False
        return is_action_enabled_for_plan(db, plan_id, action_id)

    @staticmethod
    def _resolve_action_id(db: Session, action_slug: str) -> Optional[int]:
        try:
            action_id = db.query(Action.id).filter(Action.slug == action_slug).scalar()
        except SQLAlchemyError:
            logger.exception("Action lookup failed for %s; denying", action_slug)
            db.rollback()
            return None
        if action_id is None:
            logger.warning("Permission check for unknown action '%s'", action_slug)
        return action_id

    # ---- plan entitlements ----

    @staticmethod
    def get_plan_action_permissions(db: Session, plan_id: int) -> List[PlanActionPermission]:
        return (
            db.query(PlanActionPermission)
            .filter(PlanActionPermission.plan_id == plan_id)
            .order_by(PlanActionPermission.action_id.asc())
            .all()
        )

    def upsert_plan_action_permission(
        self, db: Session, plan_id: int, action_id: int, enabled: bool = True,
    ) -> PlanActionPermission:
        """Create or update the entitlement row for (plan, action)."""
        self._require(db, SubscriptionPlan, plan_id, "Plan")
        action = self._require(db, Action, action_id, "Action")
        row = upsert(
            db, PlanActionPermission,
            conflict_columns=("plan_id", "action_id"),
            values={"plan_id": plan_id, "action_id": action_id, "enabled": enabled},
            update_columns=("enabled",),
        )
        db.commit()
        db.refresh(row)
        self.cache.clear_plan_action(plan_id, action.slug)
        logger.info("Plan %s: action %s enabled=%s", plan_id, action.slug, enabled)
        return row

    def delete_plan_action_permission(self, db: Session, plan_id: int, action_id: int) -> None:
        row = db.query(PlanActionPermission).filter(
            PlanActionPermission.plan_id == plan_id,
            PlanActionPermission.action_id == action_id,
        ).first()
        if not row:
            raise ResourceNotFoundError(
                f"No entitlement for action {action_id} in plan {plan_id}"
            )
        slug = row.action.slug
        db.delete(row)
        db.commit()
        self.cache.clear_plan_action(plan_id, slug)

    # ---- role allowances ----

    @staticmethod
    def get_role_action_permissions(
        db: Session, plan_id: int, role_id: Optional[int] = None,
    ) -> List[RoleActionPermission]:
        query = db.query(RoleActionPermission).filter(RoleActionPermission.plan_id == plan_id)
        if role_id is not None:
            query = query.filter(RoleActionPermission.role_id == role_id)
        return query.order_by(
            RoleActionPermission.role_id.asc(), RoleActionPermission.action_id.asc(),
        ).all()

    def upsert_role_action_permission(
        self, db: Session, plan_id: int, role_id: int, action_id: int, allowed: bool = True,
    ) -> RoleActionPermission:
        """Create or update the allowance row for (plan, role, action)."""
        self._require(db, SubscriptionPlan, plan_id, "Plan")
        self._require(db, Role, role_id, "Role")
        action = self._require(db, Action, action_id, "Action")
        row = upsert(
            db, RoleActionPermission,
            conflict_columns=("plan_id", "role_id", "action_id"),
            values={
                "plan_id": plan_id, "role_id": role_id,
                "action_id": action_id, "allowed": allowed,
            },
            update_columns=("allowed",),
        )
        db.commit()
        db.refresh(row)
        self.cache.delete(permission_cache_key(plan_id, role_id, action.slug))
        logger.info("Plan %s: role %s action %s allowed=%s", plan_id, role_id, action.slug, allowed)
        return row

    def delete_role_action_permission(
        self, db: Session, plan_id: int, role_id: int, action_id: int,
    ) -> None:
        row = db.query(RoleActionPermission).filter(
            RoleActionPermission.plan_id == plan_id,
            RoleActionPermission.role_id == role_id,
            RoleActionPermission.action_id == action_id,
        ).first()
        if not row:
            raise ResourceNotFoundError(
                f"No allowance for role {role_id}, action {action_id} in plan {plan_id}"
            )
        slug = row.action.slug
        db.delete(row)
        db.commit()
        self.cache.delete(permission_cache_key(plan_id, role_id, slug))

    # ---- admin matrix ----

    def get_access_matrix(self, db: Session, plan_id: int) -> List[dict]:
        """One row per catalog action: the plan flag and every role's allowance.

        The stored flags are reported as-is, so an allowance that the plan does
        not entitle still shows up (it just never authorizes anything).
        """
        self._require(db, SubscriptionPlan, plan_id, "Plan")
        roles = db.query(Role).order_by(Role.priority.asc(), Role.name.asc()).all()
        actions = db.query(Action).order_by(Action.category.asc(), Action.name.asc()).all()
        enabled = {
            row.action_id: row.enabled for row in self.get_plan_action_permissions(db, plan_id)
        }
        allowed = {
            (row.role_id, row.action_id): row.allowed
            for row in self.get_role_action_permissions(db, plan_id)
        }
        return [
            {
                "action": action,
                "enabled": enabled.get(action.id, False),
                "roles": {role.name: allowed.get((role.id, action.id), False) for role in roles},
            }
            for action in actions
        ]

    @staticmethod
    def _require(db: Session, model, row_id: int, label: str):
        row = db.query(model).filter(model.id == row_id).first()
        if not row:
            raise ResourceNotFoundError(f"{label} {row_id} not found")
        return row
