"""Pydantic schemas for API request/response serialization.

``*Update`` models are patches: services apply ``model_dump(exclude_unset=True)``
so an omitted field is left untouched while an explicit ``null`` clears it.
"""

from datetime import datetime
from typing import Optional, List, Dict

from pydantic import BaseModel, ConfigDict, Field


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ---- Role ----
class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    priority: int = 0
    description: Optional[str] = None

class RoleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    priority: Optional[int] = None
    description: Optional[str] = None

class RoleOut(ORMModel):
    id: int
    name: str
    priority: int
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ---- Action ----
class ActionCreate(BaseModel):
    slug: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z0-9][a-z0-9:_\-]*$")
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    category: str = Field(..., min_length=1)

class ActionUpdate(BaseModel):
    # Accepted only when equal to the stored slug; slugs never change.
    slug: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1)

class ActionOut(ORMModel):
    id: int
    slug: str
    name: str
    description: Optional[str] = None
    category: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ---- Plan ----
class PlanCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    display_name: str = Field(..., min_length=1)
    description: Optional[str] = None
    stripe_price_id_monthly: Optional[str] = None
    stripe_price_id_yearly: Optional[str] = None
    is_active: bool = True

class PlanUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    display_name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    stripe_price_id_monthly: Optional[str] = None
    stripe_price_id_yearly: Optional[str] = None
    is_active: Optional[bool] = None

class PlanOut(ORMModel):
    id: int
    name: str
    display_name: str
    description: Optional[str] = None
    stripe_price_id_monthly: Optional[str] = None
    stripe_price_id_yearly: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ---- Module ----
class ModuleCreate(BaseModel):
    slug: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    icon: Optional[str] = None
    is_active: bool = True

class ModuleUpdate(BaseModel):
    slug: Optional[str] = Field(None, min_length=1, max_length=100)
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    icon: Optional[str] = None
    is_active: Optional[bool] = None

class ModuleOut(ORMModel):
    id: int
    slug: str
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ModuleActionOut(ORMModel):
    id: int
    module_id: int
    action_id: int
    action: ActionOut
    created_at: Optional[datetime] = None

class ModuleActionsSet(BaseModel):
    action_ids: List[int]

class ModuleActionAdd(BaseModel):
    action_id: int


# ---- Permission tables ----
class PlanActionPermissionSet(BaseModel):
    enabled: bool = True

class RoleActionPermissionSet(BaseModel):
    allowed: bool = True

class PlanActionPermissionOut(ORMModel):
    id: int
    plan_id: int
    action_id: int
    enabled: bool
    action: Optional[ActionOut] = None
    updated_at: Optional[datetime] = None

class RoleActionPermissionOut(ORMModel):
    id: int
    plan_id: int
    role_id: int
    action_id: int
    allowed: bool
    role: Optional[RoleOut] = None
    action: Optional[ActionOut] = None
    updated_at: Optional[datetime] = None

class MatrixRow(BaseModel):
    action: ActionOut
    enabled: bool
    roles: Dict[str, bool]

class PermissionCheckOut(BaseModel):
    plan_id: int
    role_id: int
    action: str
    allowed: bool


# ---- Navigation ----
class NavItemOut(BaseModel):
    title: str
    href: str
    icon: Optional[str] = None


# ---- Common ----
class MessageResponse(BaseModel):
    message: str
