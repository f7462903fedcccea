"""Actions API router."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backend.api.deps import get_action_service
from backend.core.security import Principal, get_current_principal, require_admin
from backend.db.session import get_db
from backend.schemas.schemas import ActionCreate, ActionUpdate, ActionOut, MessageResponse
from backend.services.action_service import ActionService

router = APIRouter(prefix="/actions", tags=["actions"])


@router.get("/", response_model=List[ActionOut])
async def list_actions(
    category: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """List the action catalog, optionally restricted to one category."""
    if category:
        return ActionService.find_by_category(db, category)
    return ActionService.find_all(db)


@router.get("/{action_id}", response_model=ActionOut)
async def get_action(
    action_id: int,
    db: Session = Depends(get_db),
    actions: ActionService = Depends(get_action_service),
    principal: Principal = Depends(get_current_principal),
):
    return actions.get(db, action_id)


@router.post("/", response_model=ActionOut, status_code=201)
async def create_action(
    body: ActionCreate,
    db: Session = Depends(get_db),
    actions: ActionService = Depends(get_action_service),
    principal: Principal = Depends(require_admin),
):
    return actions.create(db, body)


@router.patch("/{action_id}", response_model=ActionOut)
async def update_action(
    action_id: int,
    body: ActionUpdate,
    db: Session = Depends(get_db),
    actions: ActionService = Depends(get_action_service),
    principal: Principal = Depends(require_admin),
):
    return actions.update(db, action_id, body)


@router.delete("/{action_id}", response_model=MessageResponse)
async def delete_action(
    action_id: int,
    db: Session = Depends(get_db),
    actions: ActionService = Depends(get_action_service),
    principal: Principal = Depends(require_admin),
):
    actions.delete(db, action_id)
    return MessageResponse(message="Action deleted")
