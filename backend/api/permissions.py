"""Permissions API router — the plan/role matrix, ad-hoc checks and the cache."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backend.api.deps import get_permission_service
from backend.core.security import (
    Principal, get_current_principal, get_permission_cache, require_admin,
)
from backend.db.session import get_db
from backend.schemas.schemas import (
    MatrixRow, PermissionCheckOut, MessageResponse,
    PlanActionPermissionSet, PlanActionPermissionOut,
    RoleActionPermissionSet, RoleActionPermissionOut,
)
from backend.services.permission_service import PermissionService

router = APIRouter(prefix="/permissions", tags=["permissions"])


@router.get("/plans/{plan_id}/matrix", response_model=List[MatrixRow])
async def get_matrix(
    plan_id: int,
    db: Session = Depends(get_db),
    permissions: PermissionService = Depends(get_permission_service),
    principal: Principal = Depends(require_admin),
):
    """Every action with the plan's flag and each role's allowance."""
    return permissions.get_access_matrix(db, plan_id)


@router.get("/plans/{plan_id}/plan-actions", response_model=List[PlanActionPermissionOut])
async def list_plan_actions(
    plan_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    return PermissionService.get_plan_action_permissions(db, plan_id)


@router.put("/plans/{plan_id}/plan-actions/{action_id}", response_model=PlanActionPermissionOut)
async def set_plan_action(
    plan_id: int,
    action_id: int,
    body: PlanActionPermissionSet,
    db: Session = Depends(get_db),
    permissions: PermissionService = Depends(get_permission_service),
    principal: Principal = Depends(require_admin),
):
    return permissions.upsert_plan_action_permission(db, plan_id, action_id, body.enabled)


@router.delete("/plans/{plan_id}/plan-actions/{action_id}", response_model=MessageResponse)
async def delete_plan_action(
    plan_id: int,
    action_id: int,
    db: Session = Depends(get_db),
    permissions: PermissionService = Depends(get_permission_service),
    principal: Principal = Depends(require_admin),
):
    permissions.delete_plan_action_permission(db, plan_id, action_id)
    return MessageResponse(message="Plan entitlement removed")


@router.get("/plans/{plan_id}/role-actions", response_model=List[RoleActionPermissionOut])
async def list_role_actions(
    plan_id: int,
    role_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    return PermissionService.get_role_action_permissions(db, plan_id, role_id)


@router.put(
    "/plans/{plan_id}/role-actions/{role_id}/{action_id}",
    response_model=RoleActionPermissionOut,
)
async def set_role_action(
    plan_id: int,
    role_id: int,
    action_id: int,
    body: RoleActionPermissionSet,
    db: Session = Depends(get_db),
    permissions: PermissionService = Depends(get_permission_service),
    principal: Principal = Depends(require_admin),
):
    return permissions.upsert_role_action_permission(db, plan_id, role_id, action_id, body.allowed)


@router.delete("/plans/{plan_id}/role-actions/{role_id}/{action_id}", response_model=MessageResponse)
async def delete_role_action(
    plan_id: int,
    role_id: int,
    action_id: int,
    db: Session = Depends(get_db),
    permissions: PermissionService = Depends(get_permission_service),
    principal: Principal = Depends(require_admin),
):
    permissions.delete_role_action_permission(db, plan_id, role_id, action_id)
    return MessageResponse(message="Role allowance removed")


@router.get("/check", response_model=PermissionCheckOut)
async def check_permission(
    action: str = Query(..., min_length=1),
    plan_id: Optional[int] = Query(None),
    role_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    permissions: PermissionService = Depends(get_permission_service),
    principal: Principal = Depends(get_current_principal),
):
    """Check an action for the caller, or for another plan/role pair if admin."""
    target_plan = principal.plan_id if plan_id is None else plan_id
    target_role = principal.role_id if role_id is None else role_id
    if (target_plan, target_role) != (principal.plan_id, principal.role_id):
        await require_admin(principal=principal, db=db, cache=permissions.cache)
    allowed = permissions.can_role_perform_action(db, target_plan, target_role, action)
    return PermissionCheckOut(plan_id=target_plan, role_id=target_role, action=action, allowed=allowed)


@router.get("/cache")
async def cache_stats(
    cache=Depends(get_permission_cache),
    principal: Principal = Depends(require_admin),
):
    return cache.stats()


@router.delete("/cache", response_model=MessageResponse)
async def clear_cache(
    cache=Depends(get_permission_cache),
    principal: Principal = Depends(require_admin),
):
    removed = cache.clear()
    return MessageResponse(message=f"Cleared {removed} cached permission decisions")
