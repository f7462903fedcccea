"""Module service: module CRUD and the module/action association."""

import logging
from typing import Optional, List, Iterable

from sqlalchemy import delete
from sqlalchemy.orm import Session

from backend.models import Action, Module, ModuleAction
from backend.core.exceptions import ResourceConflictError, ResourceNotFoundError
from backend.services.store_utils import (
    apply_patch, commit_or_conflict, ensure_no_dependents, patch_fields,
)

logger = logging.getLogger("saas_permissions.modules")


class ModuleService:
    """Manages feature modules. Modules group actions for the UI only."""

    @staticmethod
    def find_all(db: Session) -> List[Module]:
        return db.query(Module).order_by(Module.name.asc()).all()

    @staticmethod
    def find_active(db: Session) -> List[Module]:
        return db.query(Module).filter(Module.is_active.is_(True)).order_by(Module.name.asc()).all()

    @staticmethod
    def find_by_id(db: Session, module_id: int) -> Optional[Module]:
        return db.query(Module).filter(Module.id == module_id).first()

    @staticmethod
    def find_by_slug(db: Session, slug: str) -> Optional[Module]:
        return db.query(Module).filter(Module.slug == slug).first()

    def get(self, db: Session, module_id: int) -> Module:
        module = self.find_by_id(db, module_id)
        if not module:
            raise ResourceNotFoundError(f"Module {module_id} not found")
        return module

    def create(self, db: Session, data) -> Module:
        fields = patch_fields(data)
        if self.find_by_slug(db, fields["slug"]):
            raise ResourceConflictError(f"Module '{fields['slug']}' already exists")
        module = Module(**fields)
        db.add(module)
        commit_or_conflict(db, f"Module '{fields['slug']}' already exists")
        db.refresh(module)
        logger.info("Module created: %s (id=%s)", module.slug, module.id)
        return module

    def update(self, db: Session, module_id: int, patch) -> Module:
        module = self.get(db, module_id)
        changes = patch_fields(patch)
        new_slug = changes.get("slug")
        if new_slug and new_slug != module.slug and self.find_by_slug(db, new_slug):
            raise ResourceConflictError(f"Module '{new_slug}' already exists")
        apply_patch(module, changes)
        commit_or_conflict(db, f"Module '{new_slug}' already exists")
        db.refresh(module)
        return module

    def delete(self, db: Session, module_id: int) -> None:
        """Delete a module. Its action set must be emptied first."""
        module = self.get(db, module_id)
        ensure_no_dependents(f"Module '{module.slug}'", {
            "module_actions": db.query(ModuleAction)
            .filter(ModuleAction.module_id == module_id).count(),
        })
        db.delete(module)
        db.commit()
        logger.info("Module %s deleted", module_id)

    # ---- module <-> action association ----

    def list_actions(self, db: Session, module_id: int) -> List[ModuleAction]:
        """Association rows for a module, grouped by action category then name."""
        self.get(db, module_id)
        return (
            db.query(ModuleAction)
            .join(Action, Action.id == ModuleAction.action_id)
            .filter(ModuleAction.module_id == module_id)
            .order_by(Action.category.asc(), Action.name.asc())
            .all()
        )

    def add_action(self, db: Session, module_id: int, action_id: int) -> ModuleAction:
        self.get(db, module_id)
        self._require_actions(db, [action_id])
        existing = db.query(ModuleAction).filter(
            ModuleAction.module_id == module_id, ModuleAction.action_id == action_id,
        ).first()
        if existing:
            raise ResourceConflictError(f"Action {action_id} is already in module {module_id}")
        row = ModuleAction(module_id=module_id, action_id=action_id)
        db.add(row)
        commit_or_conflict(db, f"Action {action_id} is already in module {module_id}")
        db.refresh(row)
        return row

    def remove_action(self, db: Session, module_id: int, action_id: int) -> None:
        row = db.query(ModuleAction).filter(
            ModuleAction.module_id == module_id, ModuleAction.action_id == action_id,
        ).first()
        if not row:
            raise ResourceNotFoundError(f"Action {action_id} is not in module {module_id}")
        db.delete(row)
        db.commit()

    def set_actions(self, db: Session, module_id: int, action_ids: Iterable[int]) -> List[ModuleAction]:
        """Replace the module's whole action set in a single transaction.

        Readers see either the previous complete set or the new one. On any
        failure the transaction is rolled back and the previous set survives.
        """
        wanted = list(dict.fromkeys(action_ids))
        try:
            self.get(db, module_id)
            self._require_actions(db, wanted)
            db.execute(delete(ModuleAction).where(ModuleAction.module_id == module_id))
            for action_id in wanted:
                db.add(ModuleAction(module_id=module_id, action_id=action_id))
            db.flush()
            db.commit()
        except Exception:
            db.rollback()
            raise
        logger.info("Module %s now has %d actions", module_id, len(wanted))
        return self.list_actions(db, module_id)

    @staticmethod
    def _require_actions(db: Session, action_ids: List[int]) -> None:
        if not action_ids:
            return
        found = {row.id for row in db.query(Action.id).filter(Action.id.in_(action_ids))}
        missing = [action_id for action_id in action_ids if action_id not in found]
        if missing:
            raise ResourceNotFoundError(f"Actions not found: {missing}")


module_service = ModuleService()
