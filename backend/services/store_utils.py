"""Helpers shared by the stores: patch application, commits and native upserts."""

import logging
from typing import Any, Dict, Iterable, Union

from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.core.exceptions import DependencyInUseError, ResourceConflictError, ValidationError

logger = logging.getLogger("saas_permissions.store")


def patch_fields(patch: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
    """Fields the caller actually supplied. Omitted fields are absent, not None."""
    if isinstance(patch, BaseModel):
        return patch.model_dump(exclude_unset=True)
    return dict(patch)


def apply_patch(obj, changes: Dict[str, Any]) -> Dict[str, Any]:
    """Write only the supplied fields onto ``obj``.

    An explicit ``None`` clears a nullable column and is rejected for a
    required one.
    """
    columns = obj.__table__.columns
    for field, value in changes.items():
        if field not in columns or field in ("id", "created_at", "updated_at"):
            raise ValidationError(f"Unknown or read-only field: {field}")
        if value is None and not columns[field].nullable:
            raise ValidationError(f"Field '{field}' cannot be null")
        setattr(obj, field, value)
    return changes


def commit_or_conflict(db: Session, message: str) -> None:
    """Commit, translating a unique-constraint violation into ResourceConflictError."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ResourceConflictError(message) from e


def upsert(
    db: Session,
    model,
    conflict_columns: Iterable[str],
    values: Dict[str, Any],
    update_columns: Iterable[str],
):
    """Insert a row or update it in place when the composite key already exists.

    Uses the database's atomic insert-on-conflict so concurrent writers on the
    same key can never produce duplicate rows; the last writer wins. The caller
    owns the transaction and must commit.
    """
    conflict_columns = list(conflict_columns)
    key = {column: values[column] for column in conflict_columns}
    updates = {column: values[column] for column in update_columns}
    updates["updated_at"] = func.now()

    table = model.__table__
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = pg_insert(table).values(**values).on_conflict_do_update(
            index_elements=conflict_columns, set_=updates,
        )
    elif dialect == "sqlite":
        stmt = sqlite_insert(table).values(**values).on_conflict_do_update(
            index_elements=conflict_columns, set_=updates,
        )
    elif dialect in ("mysql", "mariadb"):
        stmt = mysql_insert(table).values(**values).on_duplicate_key_update(**updates)
    else:
        return _upsert_fallback(db, model, key, values, update_columns)

    db.execute(stmt)
    return db.query(model).filter_by(**key).populate_existing().one()


def _upsert_fallback(db: Session, model, key, values, update_columns):
    # Dialects without a native upsert: the savepoint confines a lost insert race.
    try:
        with db.begin_nested():
            row = db.query(model).filter_by(**key).one_or_none()
            if row is None:
                row = model(**values)
                db.add(row)
            else:
                for column in update_columns:
                    setattr(row, column, values[column])
        return row
    except IntegrityError:
        logger.debug("Upsert race on %s %s; retrying as update", model.__tablename__, key)
        row = db.query(model).filter_by(**key).one()
        for column in update_columns:
            setattr(row, column, values[column])
        db.flush()
        return row


def ensure_no_dependents(entity: str, counts: Dict[str, int]) -> None:
    """Reject a delete while any dependent rows still reference the entity."""
    in_use = {table: count for table, count in counts.items() if count}
    if in_use:
        summary = ", ".join(f"{count} {table}" for table, count in sorted(in_use.items()))
        raise DependencyInUseError(f"{entity} is still referenced by {summary}", in_use)
