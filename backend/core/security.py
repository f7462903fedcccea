"""JWT authentication and permission-based authorization helpers."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from backend.core.config import settings
from backend.core.exceptions import AuthorizationError, unauthorized
from backend.db.session import get_db
from backend.services.permission_service import PermissionService

# JWT bearer scheme
security_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """Who is calling, and under which plan and project role."""

    user_id: int
    role_id: int
    plan_id: int


def create_access_token(
    user_id: int, role_id: int, plan_id: int, expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a JWT access token carrying the caller's role and plan."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.JWT_EXPIRY_MINUTES)
    )
    to_encode = {
        "sub": str(user_id),
        "role_id": role_id,
        "plan_id": plan_id,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token."""
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise unauthorized("Invalid or expired token")


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
) -> Principal:
    """Extract the principal from the JWT Bearer token."""
    if credentials is None:
        raise unauthorized()
    payload = decode_token(credentials.credentials)
    try:
        return Principal(
            user_id=int(payload["sub"]),
            role_id=int(payload["role_id"]),
            plan_id=int(payload["plan_id"]),
        )
    except (KeyError, TypeError, ValueError):
        raise unauthorized("Invalid token payload")


def get_permission_cache(request: Request):
    """The process-wide permission cache built at startup."""
    return request.app.state.permission_cache


class RequirePermission:
    """Dependency that lets the request through only if the caller's role may
    perform ``action_slug`` under the caller's plan.

    A denial, for whatever reason, is a bare 403 with no hint of which check
    failed.
    """

    def __init__(self, action_slug: str):
        self.action_slug = action_slug

    async def __call__(
        self,
        principal: Principal = Depends(get_current_principal),
        db: Session = Depends(get_db),
        cache=Depends(get_permission_cache),
    ) -> Principal:
        permissions = PermissionService(cache)
        if not permissions.can_role_perform_action(
            db, principal.plan_id, principal.role_id, self.action_slug,
        ):
            raise AuthorizationError("Forbidden")
        return principal


require_admin = RequirePermission(settings.ADMIN_ACTION_SLUG)
