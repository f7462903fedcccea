"""Navigation filter: hides entries the caller could not use."""

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.orm import Session

from backend.core.constants import ACTIONS
from backend.services.module_service import module_service


@dataclass(frozen=True)
class NavItem:
    """A navigation entry.

    ``action`` gates the entry on the caller's role within the plan;
    ``plan_feature`` gates it on the plan alone, whoever is asking.
    """

    title: str
    href: str
    icon: Optional[str] = None
    action: Optional[str] = None
    plan_feature: Optional[str] = None


DEFAULT_NAV_ITEMS = [
    NavItem("Dashboard", "/dashboard", "dashboard", action=ACTIONS["DASHBOARD_VIEW"]),
    NavItem(
        "Analytics", "/dashboard/advanced", "chart",
        plan_feature=ACTIONS["DASHBOARD_VIEW_ADVANCED"],
        action=ACTIONS["DASHBOARD_VIEW_ADVANCED"],
    ),
    NavItem("Members", "/members", "users", action=ACTIONS["MEMBER_VIEW"]),
    NavItem("Invitations", "/invitations", "mail", action=ACTIONS["INVITATION_VIEW"]),
    NavItem("Billing", "/billing", "credit-card", action=ACTIONS["BILLING_VIEW"]),
    NavItem("Settings", "/settings", "settings", action=ACTIONS["SETTINGS_VIEW"]),
]


def is_nav_item_visible(db: Session, permissions, plan_id: int, role_id: int, item: NavItem) -> bool:
    if item.plan_feature and not permissions.is_action_enabled(db, plan_id, item.plan_feature):
        return False
    if item.action and not permissions.can_role_perform_action(db, plan_id, role_id, item.action):
        return False
    return True


def filter_navigation(
    db: Session, permissions, plan_id: int, role_id: int, items: List[NavItem],
) -> List[NavItem]:
    """Keep only the entries the role may use under the plan."""
    return [item for item in items if is_nav_item_visible(db, permissions, plan_id, role_id, item)]


def active_module_nav_items(db: Session, permissions, plan_id: int, role_id: int) -> List[NavItem]:
    """Entries for active modules in which the role may perform at least one action.

    A module with no actions grants nothing and is not shown.
    """
    items = []
    for module in module_service.find_active(db):
        slugs = [row.action.slug for row in module_service.list_actions(db, module.id)]
        if any(permissions.can_role_perform_action(db, plan_id, role_id, slug) for slug in slugs):
            items.append(NavItem(module.name, f"/modules/{module.slug}", module.icon))
    return items
