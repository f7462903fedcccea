"""Models package: import all models so metadata.create_all can discover them."""

from backend.models.role import Role
from backend.models.action import Action
from backend.models.plan import SubscriptionPlan
from backend.models.module import Module, ModuleAction
from backend.models.permission import PlanActionPermission, RoleActionPermission

__all__ = [
    "Role", "Action", "SubscriptionPlan",
    "Module", "ModuleAction",
    "PlanActionPermission", "RoleActionPermission",
]
