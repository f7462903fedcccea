"""Role store: CRUD over project roles."""

import logging
from typing import Optional, List

from sqlalchemy.orm import Session

from backend.models import Role, RoleActionPermission
from backend.core.exceptions import ResourceConflictError, ResourceNotFoundError
from backend.services.store_utils import (
    apply_patch, commit_or_conflict, ensure_no_dependents, patch_fields,
)

logger = logging.getLogger("saas_permissions.roles")


class RoleService:
    """Manages roles and keeps the permission cache in step with them."""

    def __init__(self, cache):
        self.cache = cache

    @staticmethod
    def find_all(db: Session) -> List[Role]:
        """All roles, most powerful (lowest priority number) first."""
        return db.query(Role).order_by(Role.priority.asc(), Role.name.asc()).all()

    @staticmethod
    def find_by_id(db: Session, role_id: int) -> Optional[Role]:
        return db.query(Role).filter(Role.id == role_id).first()

    @staticmethod
    def find_by_name(db: Session, name: str) -> Optional[Role]:
        return db.query(Role).filter(Role.name == name).first()

    def get(self, db: Session, role_id: int) -> Role:
        role = self.find_by_id(db, role_id)
        if not role:
            raise ResourceNotFoundError(f"Role {role_id} not found")
        return role

    def create(self, db: Session, data) -> Role:
        """Create a role. Raises ResourceConflictError if the name is taken."""
        fields = patch_fields(data)
        if self.find_by_name(db, fields["name"]):
            raise ResourceConflictError(f"Role '{fields['name']}' already exists")
        role = Role(**fields)
        db.add(role)
        commit_or_conflict(db, f"Role '{fields['name']}' already exists")
        db.refresh(role)
        self.cache.clear_role(role.id)
        logger.info("Role created: %s (id=%s)", role.name, role.id)
        return role

    def update(self, db: Session, role_id: int, patch) -> Role:
        """Apply a partial update; fields not in the patch are left alone."""
        role = self.get(db, role_id)
        changes = patch_fields(patch)
        new_name = changes.get("name")
        if new_name and new_name != role.name and self.find_by_name(db, new_name):
            raise ResourceConflictError(f"Role '{new_name}' already exists")
        apply_patch(role, changes)
        commit_or_conflict(db, f"Role '{new_name}' already exists")
        db.refresh(role)
        self.cache.clear_role(role.id)
        logger.info("Role %s updated: %s", role.id, sorted(changes))
        return role

    def delete(self, db: Session, role_id: int) -> None:
        """Delete a role that no allowance row references."""
        role = self.get(db, role_id)
        ensure_no_dependents(f"Role '{role.name}'", {
            "role_action_permissions": db.query(RoleActionPermission)
            .filter(RoleActionPermission.role_id == role_id).count(),
        })
        db.delete(role)
        db.commit()
        self.cache.clear_role(role_id)
        logger.info("Role %s deleted", role_id)
