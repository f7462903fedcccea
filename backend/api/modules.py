"""Modules API router — module CRUD and module/action membership."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.core.security import Principal, get_current_principal, require_admin
from backend.db.session import get_db
from backend.schemas.schemas import (
    ModuleCreate, ModuleUpdate, ModuleOut, ModuleActionOut,
    ModuleActionsSet, ModuleActionAdd, MessageResponse,
)
from backend.services.module_service import module_service

router = APIRouter(prefix="/modules", tags=["modules"])


@router.get("/", response_model=List[ModuleOut])
async def list_modules(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return module_service.find_all(db)


@router.get("/{module_id}", response_model=ModuleOut)
async def get_module(
    module_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return module_service.get(db, module_id)


@router.post("/", response_model=ModuleOut, status_code=201)
async def create_module(
    body: ModuleCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    return module_service.create(db, body)


@router.patch("/{module_id}", response_model=ModuleOut)
async def update_module(
    module_id: int,
    body: ModuleUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    return module_service.update(db, module_id, body)


@router.delete("/{module_id}", response_model=MessageResponse)
async def delete_module(
    module_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    module_service.delete(db, module_id)
    return MessageResponse(message="Module deleted")


@router.get("/{module_id}/actions", response_model=List[ModuleActionOut])
async def list_module_actions(
    module_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return module_service.list_actions(db, module_id)


@router.post("/{module_id}/actions", response_model=ModuleActionOut, status_code=201)
async def add_module_action(
    module_id: int,
    body: ModuleActionAdd,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    return module_service.add_action(db, module_id, body.action_id)


@router.put("/{module_id}/actions", response_model=List[ModuleActionOut])
async def set_module_actions(
    module_id: int,
    body: ModuleActionsSet,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    """Replace the module's whole action set atomically."""
    return module_service.set_actions(db, module_id, body.action_ids)


@router.delete("/{module_id}/actions/{action_id}", response_model=MessageResponse)
async def remove_module_action(
    module_id: int,
    action_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    module_service.remove_action(db, module_id, action_id)
    return MessageResponse(message="Action removed from module")
