"""Tests for modules and the atomic replacement of a module's action set."""

from __future__ import annotations

import pytest

from backend.core.exceptions import (
    DependencyInUseError, ResourceConflictError, ResourceNotFoundError,
)
from backend.schemas.schemas import ModuleCreate, ModuleUpdate
from backend.services.module_service import ModuleService


@pytest.fixture
def modules() -> ModuleService:
    return ModuleService()


@pytest.fixture
def module(db, modules: ModuleService):
    return modules.create(db, ModuleCreate(slug="projects", name="Projects", icon="folder"))


def slugs(rows) -> set:
    return {row.action.slug for row in rows}


class TestModuleCrud:
    def test_duplicate_slug(self, db, modules, module) -> None:
        with pytest.raises(ResourceConflictError):
            modules.create(db, ModuleCreate(slug="projects", name="Other"))

    def test_update_and_find_active(self, db, modules, module) -> None:
        modules.update(db, module.id, ModuleUpdate(is_active=False))
        assert modules.find_active(db) == []
        assert modules.find_by_slug(db, "projects").icon == "folder"

    def test_delete_requires_empty_action_set(self, db, seeded, modules, module) -> None:
        modules.add_action(db, module.id, seeded.actions["project:view"])
        with pytest.raises(DependencyInUseError):
            modules.delete(db, module.id)
        modules.set_actions(db, module.id, [])
        modules.delete(db, module.id)
        assert modules.find_by_id(db, module.id) is None


class TestModuleActions:
    def test_add_list_remove(self, db, seeded, modules, module) -> None:
        modules.add_action(db, module.id, seeded.actions["project:view"])
        modules.add_action(db, module.id, seeded.actions["dashboard:view"])
        rows = modules.list_actions(db, module.id)
        assert [row.action.category for row in rows] == ["dashboard", "project"]

        with pytest.raises(ResourceConflictError):
            modules.add_action(db, module.id, seeded.actions["project:view"])

        modules.remove_action(db, module.id, seeded.actions["project:view"])
        assert slugs(modules.list_actions(db, module.id)) == {"dashboard:view"}
        with pytest.raises(ResourceNotFoundError):
            modules.remove_action(db, module.id, seeded.actions["project:view"])

    def test_set_actions_replaces_whole_set(self, db, seeded, modules, module) -> None:
        modules.set_actions(db, module.id, [seeded.actions["project:view"], seeded.actions["project:create"]])
        rows = modules.set_actions(db, module.id, [
            seeded.actions["project:update"],
            seeded.actions["project:delete"],
            seeded.actions["project:update"],
        ])
        assert slugs(rows) == {"project:update", "project:delete"}
        assert len(rows) == 2

    def test_set_actions_unknown_action_keeps_old_set(self, db, seeded, modules, module) -> None:
        modules.set_actions(db, module.id, [seeded.actions["project:view"]])
        with pytest.raises(ResourceNotFoundError):
            modules.set_actions(db, module.id, [seeded.actions["project:create"], 9999])
        assert slugs(modules.list_actions(db, module.id)) == {"project:view"}

    def test_failure_midway_rolls_back(self, db, seeded, modules, module, monkeypatch) -> None:
        modules.set_actions(db, module.id, [seeded.actions["project:view"], seeded.actions["member:view"]])

        original_add = db.add
        calls = []

        def failing_add(instance, *args, **kwargs):
            calls.append(instance)
            if len(calls) == 2:
                raise RuntimeError("connection lost")
            return original_add(instance, *args, **kwargs)

        monkeypatch.setattr(db, "add", failing_add)
        with pytest.raises(RuntimeError):
            modules.set_actions(db, module.id, [
                seeded.actions["billing:view"], seeded.actions["billing:update"],
            ])
        monkeypatch.undo()

        assert slugs(modules.list_actions(db, module.id)) == {"project:view", "member:view"}

    def test_unknown_module(self, db, seeded, modules) -> None:
        with pytest.raises(ResourceNotFoundError):
            modules.set_actions(db, 9999, [seeded.actions["project:view"]])
        with pytest.raises(ResourceNotFoundError):
            modules.list_actions(db, 9999)
