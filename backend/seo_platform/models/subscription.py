"""
Billing subscription model (one per workspace)
"""

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship, validates
from enum import Enum

from seo_platform.models.base import BaseModel


class Plan(str, Enum):
    FREE = "FREE"
    PRO = "PRO"
    AGENCY = "AGENCY"


class Subscription(BaseModel):
    __tablename__ = "subscriptions"

    workspace_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        comment="User who started the subscription"
    )

    stripe_customer_id = Column(String(255), nullable=True, unique=True)
    stripe_subscription_id = Column(String(255), nullable=True, unique=True)
    stripe_price_id = Column(String(255), nullable=True)

    plan = Column(String(20), nullable=False, default=Plan.FREE.value)
    status = Column(String(50), nullable=False, default="active")

    current_period_start = Column(DateTime(timezone=True), nullable=True)
    current_period_end = Column(DateTime(timezone=True), nullable=True)
    cancel_at_period_end = Column(Boolean, nullable=False, default=False)

    workspace = relationship("Workspace", back_populates="subscription")

    @validates('plan')
    def validate_plan(self, key: str, plan: str) -> str:
        return Plan(plan).value

    def __repr__(self) -> str:
        return f"<Subscription(workspace_id={self.workspace_id}, plan={self.plan})>"
