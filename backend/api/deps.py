"""Request-scoped service factories bound to the process permission cache."""

from fastapi import Depends

from backend.core.security import get_permission_cache
from backend.services.action_service import ActionService
from backend.services.permission_service import PermissionService
from backend.services.plan_service import PlanService
from backend.services.role_service import RoleService


def get_role_service(cache=Depends(get_permission_cache)) -> RoleService:
    return RoleService(cache)


def get_action_service(cache=Depends(get_permission_cache)) -> ActionService:
    return ActionService(cache)


def get_plan_service(cache=Depends(get_permission_cache)) -> PlanService:
    return PlanService(cache)


def get_permission_service(cache=Depends(get_permission_cache)) -> PermissionService:
    return PermissionService(cache)
