"""Subscription plan model."""

from sqlalchemy import Column, Integer, String, Boolean
from backend.db.base import Base, TimestampMixin


class SubscriptionPlan(TimestampMixin, Base):
    """Billing plan. Stripe price ids are references only; billing lives elsewhere."""
    __tablename__ = "subscription_plans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), unique=True, nullable=False, index=True)
    display_name = Column(String(255), nullable=False)
    description = Column(String(500), nullable=True)
    stripe_price_id_monthly = Column(String(255), nullable=True, index=True)
    stripe_price_id_yearly = Column(String(255), nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
