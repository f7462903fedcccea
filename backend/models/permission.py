"""Plan entitlement and role allowance tables."""

from sqlalchemy import Column, Integer, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from backend.db.base import Base, TimestampMixin


class PlanActionPermission(TimestampMixin, Base):
    """Whether an action is reachable at all under a plan."""
    __tablename__ = "plan_action_permissions"
    __table_args__ = (
        UniqueConstraint("plan_id", "action_id", name="uq_plan_action_permissions_plan_action"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    plan_id = Column(Integer, ForeignKey("subscription_plans.id", ondelete="RESTRICT"), nullable=False, index=True)
    action_id = Column(Integer, ForeignKey("actions.id", ondelete="RESTRICT"), nullable=False, index=True)
    enabled = Column(Boolean, default=True, nullable=False)

    action = relationship("Action", lazy="joined")


class RoleActionPermission(TimestampMixin, Base):
    """Whether a role may perform an action, given the plan entitles it."""
    __tablename__ = "role_action_permissions"
    __table_args__ = (
        UniqueConstraint(
            "plan_id", "role_id", "action_id",
            name="uq_role_action_permissions_plan_role_action",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    plan_id = Column(Integer, ForeignKey("subscription_plans.id", ondelete="RESTRICT"), nullable=False, index=True)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="RESTRICT"), nullable=False, index=True)
    action_id = Column(Integer, ForeignKey("actions.id", ondelete="RESTRICT"), nullable=False, index=True)
    allowed = Column(Boolean, default=True, nullable=False)

    role = relationship("Role", lazy="joined")
    action = relationship("Action", lazy="joined")
