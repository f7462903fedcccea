"""Idempotent bootstrap of roles, actions, plans, entitlements and allowances."""

from sqlalchemy.orm import Session

from backend.db.seeds.seed_roles import seed_roles
from backend.db.seeds.seed_actions import seed_actions
from backend.db.seeds.seed_plans import seed_plans, seed_plan_permissions
from backend.db.seeds.seed_role_permissions import seed_role_permissions
from backend.services.permission_service import PermissionService


def run_all_seeds(db: Session, cache) -> None:
    """Run every seed in dependency order. Safe to re-run."""
    permissions = PermissionService(cache)
    roles = seed_roles(db)
    actions = seed_actions(db)
    plans = seed_plans(db)
    seed_plan_permissions(db, permissions, plans, actions)
    seed_role_permissions(db, permissions, plans, roles, actions)
