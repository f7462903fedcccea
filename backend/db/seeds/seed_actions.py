"""Seed the action catalog."""

from sqlalchemy.orm import Session

from backend.core.constants import ACTIONS, ACTION_DETAILS, action_category
from backend.models import Action
from backend.services.store_utils import upsert


def seed_actions(db: Session) -> dict:
    """Upsert every catalog action. Returns slug -> Action.

    Existing rows keep whatever name and description an admin gave them.
    """
    actions = {}
    for slug in ACTIONS.values():
        name, description = ACTION_DETAILS[slug]
        actions[slug] = upsert(
            db, Action,
            conflict_columns=("slug",),
            values={
                "slug": slug,
                "name": name,
                "description": description,
                "category": action_category(slug),
            },
            update_columns=(),
        )

    db.commit()
    print(f"✅ Seeded {len(actions)} actions")
    return actions
