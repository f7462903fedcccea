"""Action model: a single capability that can be entitled and allowed."""

from sqlalchemy import Column, Integer, String
from backend.db.base import Base, TimestampMixin


class Action(TimestampMixin, Base):
    """Discrete capability identified by an immutable slug."""
    __tablename__ = "actions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(500), nullable=True)
    category = Column(String(100), nullable=False, index=True)
