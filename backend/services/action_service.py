"""Action catalog: CRUD over discrete capabilities."""

import logging
from typing import Optional, List

from sqlalchemy.orm import Session

from backend.models import Action, ModuleAction, PlanActionPermission, RoleActionPermission
from backend.core.exceptions import ResourceConflictError, ResourceNotFoundError, ValidationError
from backend.services.store_utils import (
    apply_patch, commit_or_conflict, ensure_no_dependents, patch_fields,
)

logger = logging.getLogger("saas_permissions.actions")


class ActionService:
    """Manages the action catalog. Slugs are fixed at creation."""

    def __init__(self, cache):
        self.cache = cache

    @staticmethod
    def find_all(db: Session) -> List[Action]:
        return db.query(Action).order_by(Action.category.asc(), Action.name.asc()).all()

    @staticmethod
    def find_by_category(db: Session, category: str) -> List[Action]:
        return db.query(Action).filter(Action.category == category).order_by(Action.name.asc()).all()

    @staticmethod
    def find_by_id(db: Session, action_id: int) -> Optional[Action]:
        return db.query(Action).filter(Action.id == action_id).first()

    @staticmethod
    def find_by_slug(db: Session, slug: str) -> Optional[Action]:
        return db.query(Action).filter(Action.slug == slug).first()

    def get(self, db: Session, action_id: int) -> Action:
        action = self.find_by_id(db, action_id)
        if not action:
            raise ResourceNotFoundError(f"Action {action_id} not found")
        return action

    def create(self, db: Session, data) -> Action:
        fields = patch_fields(data)
        if self.find_by_slug(db, fields["slug"]):
            raise ResourceConflictError(f"Action '{fields['slug']}' already exists")
        action = Action(**fields)
        db.add(action)
        commit_or_conflict(db, f"Action '{fields['slug']}' already exists")
        db.refresh(action)
        self.cache.clear_action(action.slug)
        logger.info("Action created: %s (id=%s)", action.slug, action.id)
        return action

    def update(self, db: Session, action_id: int, patch) -> Action:
        """Partial update. A patch carrying a different slug is rejected."""
        action = self.get(db, action_id)
        changes = patch_fields(patch)
        if "slug" in changes:
            if changes["slug"] != action.slug:
                raise ValidationError("Action slug cannot be changed after creation")
            del changes["slug"]
        apply_patch(action, changes)
        db.commit()
        db.refresh(action)
        self.cache.clear_action(action.slug)
        logger.info("Action %s updated: %s", action.slug, sorted(changes))
        return action

    def delete(self, db: Session, action_id: int) -> None:
        """Delete an action no entitlement, allowance or module references."""
        action = self.get(db, action_id)
        ensure_no_dependents(f"Action '{action.slug}'", {
            "plan_action_permissions": db.query(PlanActionPermission)
            .filter(PlanActionPermission.action_id == action_id).count(),
            "role_action_permissions": db.query(RoleActionPermission)
            .filter(RoleActionPermission.action_id == action_id).count(),
            "module_actions": db.query(ModuleAction)
            .filter(ModuleAction.action_id == action_id).count(),
        })
        slug = action.slug
        db.delete(action)
        db.commit()
        self.cache.clear_action(slug)
        logger.info("Action %s deleted", slug)
