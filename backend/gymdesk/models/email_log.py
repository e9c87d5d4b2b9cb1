from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum as SAEnum, func
from gymdesk.core.database import Base


class EmailLog(Base):
    __tablename__ = "email_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="SET NULL"), nullable=True, index=True)
    recipient_email = Column(String(255), nullable=False)
    email_type = Column(String(50), nullable=False, index=True, comment="expiring_soon/expired/renewal/welcome")
    subscription_id = Column(Integer, ForeignKey("customer_subscriptions.id", ondelete="SET NULL"),
                             nullable=True, index=True)
    status = Column(SAEnum("SENT", "FAILED", name="email_status"), nullable=False)
    provider_message_id = Column(String(255), nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)
