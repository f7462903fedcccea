"""Subscription plans API router."""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backend.api.deps import get_plan_service
from backend.core.security import Principal, get_current_principal, require_admin
from backend.db.session import get_db
from backend.schemas.schemas import PlanCreate, PlanUpdate, PlanOut, MessageResponse
from backend.services.plan_service import PlanService

router = APIRouter(prefix="/plans", tags=["plans"])


@router.get("/", response_model=List[PlanOut])
async def list_plans(
    active_only: bool = Query(False),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    if active_only:
        return PlanService.find_active(db)
    return PlanService.find_all(db)


@router.get("/{plan_id}", response_model=PlanOut)
async def get_plan(
    plan_id: int,
    db: Session = Depends(get_db),
    plans: PlanService = Depends(get_plan_service),
    principal: Principal = Depends(get_current_principal),
):
    return plans.get(db, plan_id)


@router.post("/", response_model=PlanOut, status_code=201)
async def create_plan(
    body: PlanCreate,
    db: Session = Depends(get_db),
    plans: PlanService = Depends(get_plan_service),
    principal: Principal = Depends(require_admin),
):
    return plans.create(db, body)


@router.patch("/{plan_id}", response_model=PlanOut)
async def update_plan(
    plan_id: int,
    body: PlanUpdate,
    db: Session = Depends(get_db),
    plans: PlanService = Depends(get_plan_service),
    principal: Principal = Depends(require_admin),
):
    return plans.update(db, plan_id, body)


@router.delete("/{plan_id}", response_model=MessageResponse)
async def delete_plan(
    plan_id: int,
    db: Session = Depends(get_db),
    plans: PlanService = Depends(get_plan_service),
    principal: Principal = Depends(require_admin),
):
    plans.delete(db, plan_id)
    return MessageResponse(message="Plan deleted")
