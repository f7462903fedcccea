"""Plan store: CRUD over subscription plans."""

import logging
from typing import Optional, List

from sqlalchemy import or_
from sqlalchemy.orm import Session

from backend.models import SubscriptionPlan, PlanActionPermission, RoleActionPermission
from backend.core.exceptions import ResourceConflictError, ResourceNotFoundError
from backend.services.store_utils import (
    apply_patch, commit_or_conflict, ensure_no_dependents, patch_fields,
)

logger = logging.getLogger("saas_permissions.plans")


class PlanService:
    """Manages subscription plans."""

    def __init__(self, cache):
        self.cache = cache

    @staticmethod
    def find_all(db: Session) -> List[SubscriptionPlan]:
        return db.query(SubscriptionPlan).order_by(SubscriptionPlan.name.asc()).all()

    @staticmethod
    def find_active(db: Session) -> List[SubscriptionPlan]:
        return (
            db.query(SubscriptionPlan)
            .filter(SubscriptionPlan.is_active.is_(True))
            .order_by(SubscriptionPlan.name.asc())
            .all()
        )

    @staticmethod
    def find_by_id(db: Session, plan_id: int) -> Optional[SubscriptionPlan]:
        return db.query(SubscriptionPlan).filter(SubscriptionPlan.id == plan_id).first()

    @staticmethod
    def find_by_name(db: Session, name: str) -> Optional[SubscriptionPlan]:
        return db.query(SubscriptionPlan).filter(SubscriptionPlan.name == name).first()

    @staticmethod
    def find_by_stripe_price_id(db: Session, price_id: str) -> Optional[SubscriptionPlan]:
        """Resolve a Stripe price (monthly or yearly) back to its plan."""
        return db.query(SubscriptionPlan).filter(
            or_(
                SubscriptionPlan.stripe_price_id_monthly == price_id,
                SubscriptionPlan.stripe_price_id_yearly == price_id,
            )
        ).first()

    def get(self, db: Session, plan_id: int) -> SubscriptionPlan:
        plan = self.find_by_id(db, plan_id)
        if not plan:
            raise ResourceNotFoundError(f"Plan {plan_id} not found")
        return plan

    def create(self, db: Session, data) -> SubscriptionPlan:
        fields = patch_fields(data)
        if self.find_by_name(db, fields["name"]):
            raise ResourceConflictError(f"Plan '{fields['name']}' already exists")
        plan = SubscriptionPlan(**fields)
        db.add(plan)
        commit_or_conflict(db, f"Plan '{fields['name']}' already exists")
        db.refresh(plan)
        self.cache.clear_plan(plan.id)
        logger.info("Plan created: %s (id=%s)", plan.name, plan.id)
        return plan

    def update(self, db: Session, plan_id: int, patch) -> SubscriptionPlan:
        plan = self.get(db, plan_id)
        changes = patch_fields(patch)
        new_name = changes.get("name")
        if new_name and new_name != plan.name and self.find_by_name(db, new_name):
            raise ResourceConflictError(f"Plan '{new_name}' already exists")
        apply_patch(plan, changes)
        commit_or_conflict(db, f"Plan '{new_name}' already exists")
        db.refresh(plan)
        self.cache.clear_plan(plan.id)
        logger.info("Plan %s updated: %s", plan.id, sorted(changes))
        return plan

    def delete(self, db: Session, plan_id: int) -> None:
        plan = self.get(db, plan_id)
        ensure_no_dependents(f"Plan '{plan.name}'", {
            "plan_action_permissions": db.query(PlanActionPermission)
            .filter(PlanActionPermission.plan_id == plan_id).count(),
            "role_action_permissions": db.query(RoleActionPermission)
            .filter(RoleActionPermission.plan_id == plan_id).count(),
        })
        db.delete(plan)
        db.commit()
        self.cache.clear_plan(plan_id)
        logger.info("Plan %s deleted", plan_id)
