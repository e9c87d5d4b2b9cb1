from sqlalchemy import (
    Column, Integer, String, Boolean, Text, DateTime, Enum as SAEnum, ForeignKey, Index, func,
)
from gymdesk.core.database import Base

SUBSCRIPTION_STATUSES = ("ACTIVE", "EXPIRED", "CANCELLED")


class CustomerSubscription(Base):
    """Membership period of a customer. Renewals append rows; rows are never deleted."""

    __tablename__ = "customer_subscriptions"
    __table_args__ = (
        Index("ix_customer_subscriptions_customer_created", "customer_id", "created_at"),
        Index("ix_customer_subscriptions_status_end", "status", "end_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    branch_id = Column(Integer, ForeignKey("branches.id", ondelete="SET NULL"), nullable=True, index=True)
    customer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    membership_plan_id = Column(Integer, ForeignKey("membership_plans.id", ondelete="RESTRICT"), nullable=False)
    status = Column(SAEnum(*SUBSCRIPTION_STATUSES, name="subscription_status"), nullable=False, default="ACTIVE")
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    price = Column(Integer, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="PHP")
    auto_renew = Column(Boolean, nullable=False, default=True)
    cancelled_at = Column(DateTime, nullable=True)
    cancellation_reason = Column(String(255), nullable=True)
    cancellation_notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
