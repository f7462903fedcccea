"""Seed role allowances, clipped to what each plan entitles."""

from sqlalchemy.orm import Session

from backend.core.constants import ACTIONS, ROLE_OWNER, ROLE_ADMIN, ROLE_MEMBER
from backend.models import PlanActionPermission

# What each role would get under a plan that entitled everything.
ROLE_ACTIONS = {
    ROLE_OWNER: list(ACTIONS.values()),
    ROLE_ADMIN: [
        slug for slug in ACTIONS.values()
        if slug not in (ACTIONS["PROJECT_DELETE"], ACTIONS["BILLING_VIEW"], ACTIONS["BILLING_UPDATE"])
    ],
    ROLE_MEMBER: [
        ACTIONS["PROJECT_VIEW"],
        ACTIONS["MEMBER_VIEW"],
        ACTIONS["SETTINGS_VIEW"],
        ACTIONS["DASHBOARD_VIEW"],
        ACTIONS["INVITATION_VIEW"],
    ],
}


def enabled_action_ids(db: Session, plan_id: int) -> set:
    """Action ids the plan currently entitles, read back from the table."""
    rows = db.query(PlanActionPermission.action_id).filter(
        PlanActionPermission.plan_id == plan_id,
        PlanActionPermission.enabled.is_(True),
    )
    return {row.action_id for row in rows}


def seed_role_permissions(db: Session, permissions, plans: dict, roles: dict, actions: dict) -> None:
    """Allow each role its nominal actions, intersected with each plan's entitlements.

    Granting OWNER "everything" must not create allowances for actions the plan
    does not entitle, so the intersection is taken against the stored table
    rather than the seed lists.
    """
    count = 0
    for plan in plans.values():
        entitled = enabled_action_ids(db, plan.id)
        for role_name, slugs in ROLE_ACTIONS.items():
            role = roles[role_name]
            for slug in slugs:
                action_id = actions[slug].id
                if action_id not in entitled:
                    continue
                permissions.upsert_role_action_permission(db, plan.id, role.id, action_id, allowed=True)
                count += 1
    print(f"✅ Seeded {count} role action permissions")
