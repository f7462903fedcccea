"""Navigation API router."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.api.deps import get_permission_service
from backend.core.security import Principal, get_current_principal
from backend.db.session import get_db
from backend.schemas.schemas import NavItemOut
from backend.services.navigation_service import (
    DEFAULT_NAV_ITEMS, active_module_nav_items, filter_navigation,
)
from backend.services.permission_service import PermissionService

router = APIRouter(prefix="/navigation", tags=["navigation"])


@router.get("/", response_model=List[NavItemOut])
async def get_navigation(
    db: Session = Depends(get_db),
    permissions: PermissionService = Depends(get_permission_service),
    principal: Principal = Depends(get_current_principal),
):
    """Navigation entries the caller can use, followed by active modules."""
    items = filter_navigation(db, permissions, principal.plan_id, principal.role_id, DEFAULT_NAV_ITEMS)
    items += active_module_nav_items(db, permissions, principal.plan_id, principal.role_id)
    return [NavItemOut(title=item.title, href=item.href, icon=item.icon) for item in items]
