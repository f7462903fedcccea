"""Seed the default project roles."""

from sqlalchemy.orm import Session

from backend.core.constants import ROLE_OWNER, ROLE_ADMIN, ROLE_MEMBER
from backend.models import Role
from backend.services.store_utils import upsert

DEFAULT_ROLES = [
    {
        "name": ROLE_OWNER,
        "priority": 0,
        "description": "Full control over the project. Can perform all actions including deletion.",
    },
    {
        "name": ROLE_ADMIN,
        "priority": 1,
        "description": "Can manage members and settings, but cannot delete the project.",
    },
    {
        "name": ROLE_MEMBER,
        "priority": 2,
        "description": "Standard access. Can view project and members but has limited permissions.",
    },
]


def seed_roles(db: Session) -> dict:
    """Upsert default roles, leaving edited ones alone. Returns name -> Role."""
    roles = {}
    for role_data in DEFAULT_ROLES:
        roles[role_data["name"]] = upsert(
            db, Role, conflict_columns=("name",), values=role_data, update_columns=(),
        )

    db.commit()
    print(f"✅ Seeded {len(DEFAULT_ROLES)} roles")
    return roles
