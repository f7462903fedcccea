"""Seed subscription plans and their plan-level entitlements."""

from sqlalchemy.orm import Session

from backend.core.constants import ACTIONS, PLAN_FREE, PLAN_PRO, PLAN_BUSINESS
from backend.models import SubscriptionPlan
from backend.services.store_utils import upsert

DEFAULT_PLANS = [
    {
        "name": PLAN_FREE,
        "display_name": "Free",
        "description": "Free plan with limited features. Perfect for getting started.",
    },
    {
        "name": PLAN_PRO,
        "display_name": "Pro",
        "description": "Pro plan with advanced features. Perfect for growing teams.",
    },
    {
        "name": PLAN_BUSINESS,
        "display_name": "Business",
        "description": "Business plan with full access to all features. Perfect for enterprises.",
    },
]

# Actions each plan entitles. Anything absent here is unreachable under the plan.
PLAN_ACTIONS = {
    PLAN_FREE: [
        ACTIONS["PROJECT_CREATE"],
        ACTIONS["PROJECT_VIEW"],
        ACTIONS["MEMBER_VIEW"],
        ACTIONS["SETTINGS_VIEW"],
        ACTIONS["DASHBOARD_VIEW"],
    ],
    PLAN_PRO: [
        ACTIONS["PROJECT_CREATE"],
        ACTIONS["PROJECT_UPDATE"],
        ACTIONS["PROJECT_VIEW"],
        ACTIONS["MEMBER_INVITE"],
        ACTIONS["MEMBER_REMOVE"],
        ACTIONS["MEMBER_UPDATE_ROLE"],
        ACTIONS["MEMBER_VIEW"],
        ACTIONS["SETTINGS_UPDATE"],
        ACTIONS["SETTINGS_VIEW"],
        ACTIONS["INVITATION_CREATE"],
        ACTIONS["INVITATION_DELETE"],
        ACTIONS["INVITATION_VIEW"],
        ACTIONS["DASHBOARD_VIEW"],
        ACTIONS["DASHBOARD_VIEW_ADVANCED"],
    ],
    PLAN_BUSINESS: list(ACTIONS.values()),
}


def seed_plans(db: Session) -> dict:
    """Upsert default plans, leaving edited ones alone. Returns name -> plan."""
    plans = {}
    for plan_data in DEFAULT_PLANS:
        plans[plan_data["name"]] = upsert(
            db, SubscriptionPlan,
            conflict_columns=("name",),
            values={**plan_data, "is_active": True},
            update_columns=(),
        )

    db.commit()
    print(f"✅ Seeded {len(DEFAULT_PLANS)} plans")
    return plans


def seed_plan_permissions(db: Session, permissions, plans: dict, actions: dict) -> None:
    """Enable each plan's action list via upserts."""
    count = 0
    for plan_name, slugs in PLAN_ACTIONS.items():
        plan = plans[plan_name]
        for slug in slugs:
            permissions.upsert_plan_action_permission(db, plan.id, actions[slug].id, enabled=True)
            count += 1
    print(f"✅ Seeded {count} plan action permissions")
