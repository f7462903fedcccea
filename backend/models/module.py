"""Module and ModuleAction models."""

from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from backend.db.base import Base, TimestampMixin


class Module(TimestampMixin, Base):
    """UI-facing bundle of actions. Plays no part in authorization."""
    __tablename__ = "modules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(500), nullable=True)
    icon = Column(String(100), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)


class ModuleAction(TimestampMixin, Base):
    """Association between a module and one of its actions."""
    __tablename__ = "module_actions"
    __table_args__ = (
        UniqueConstraint("module_id", "action_id", name="uq_module_actions_module_action"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    module_id = Column(Integer, ForeignKey("modules.id", ondelete="RESTRICT"), nullable=False, index=True)
    action_id = Column(Integer, ForeignKey("actions.id", ondelete="RESTRICT"), nullable=False, index=True)

    action = relationship("Action", lazy="joined")
