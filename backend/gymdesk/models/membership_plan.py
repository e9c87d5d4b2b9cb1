from sqlalchemy import Column, Integer, String, Boolean, Text, DateTime, ForeignKey, func
from gymdesk.core.database import Base


class MembershipPlan(Base):
    __tablename__ = "membership_plans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Integer, nullable=False, comment="Price in whole currency units")
    duration = Column(Integer, nullable=False, comment="Length in days")
    plan_type = Column(String(50), nullable=False, default="MONTHLY")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
