"""Shared pytest fixtures.

Every test gets a fresh in-memory SQLite database with foreign keys enforced,
so ON DELETE RESTRICT behaves as it does on MySQL/PostgreSQL.
"""

from __future__ import annotations

from typing import Generator

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import backend.models  # noqa: F401  registers the tables on Base.metadata
from backend.db.base import Base
from backend.db.seeds import run_all_seeds
from backend.models import Action, Role, SubscriptionPlan
from backend.services.permission_cache import PermissionCache
from backend.services.permission_service import PermissionService


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine) -> Generator[Session, None, None]:
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> PermissionCache:
    return PermissionCache(ttl_seconds=600, check_period_seconds=120, clock=clock)


@pytest.fixture
def permissions(cache: PermissionCache) -> PermissionService:
    return PermissionService(cache)


class Seeded:
    """Ids of the seeded catalog, looked up by name/slug."""

    def __init__(self, db: Session) -> None:
        self.roles = {role.name: role.id for role in db.query(Role)}
        self.plans = {plan.name: plan.id for plan in db.query(SubscriptionPlan)}
        self.actions = {action.slug: action.id for action in db.query(Action)}


@pytest.fixture
def seeded(db: Session, cache: PermissionCache) -> Seeded:
    run_all_seeds(db, cache)
    cache.clear()
    return Seeded(db)
