"""Role model."""

from sqlalchemy import Column, Integer, String
from backend.db.base import Base, TimestampMixin


class Role(TimestampMixin, Base):
    """Project role. Priority only orders roles for display; it grants nothing."""
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), unique=True, nullable=False, index=True)
    priority = Column(Integer, nullable=False, default=0)
    description = Column(String(255), nullable=True)
