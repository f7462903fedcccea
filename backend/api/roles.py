"""Roles API router."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.api.deps import get_role_service
from backend.core.security import Principal, get_current_principal, require_admin
from backend.db.session import get_db
from backend.schemas.schemas import RoleCreate, RoleUpdate, RoleOut, MessageResponse
from backend.services.role_service import RoleService

router = APIRouter(prefix="/roles", tags=["roles"])


@router.get("/", response_model=List[RoleOut])
async def list_roles(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """List roles, highest authority first."""
    return RoleService.find_all(db)


@router.get("/{role_id}", response_model=RoleOut)
async def get_role(
    role_id: int,
    db: Session = Depends(get_db),
    roles: RoleService = Depends(get_role_service),
    principal: Principal = Depends(get_current_principal),
):
    return roles.get(db, role_id)


@router.post("/", response_model=RoleOut, status_code=201)
async def create_role(
    body: RoleCreate,
    db: Session = Depends(get_db),
    roles: RoleService = Depends(get_role_service),
    principal: Principal = Depends(require_admin),
):
    return roles.create(db, body)


@router.patch("/{role_id}", response_model=RoleOut)
async def update_role(
    role_id: int,
    body: RoleUpdate,
    db: Session = Depends(get_db),
    roles: RoleService = Depends(get_role_service),
    principal: Principal = Depends(require_admin),
):
    """Partial update: omitted fields are left unchanged."""
    return roles.update(db, role_id, body)


@router.delete("/{role_id}", response_model=MessageResponse)
async def delete_role(
    role_id: int,
    db: Session = Depends(get_db),
    roles: RoleService = Depends(get_role_service),
    principal: Principal = Depends(require_admin),
):
    roles.delete(db, role_id)
    return MessageResponse(message="Role deleted")
