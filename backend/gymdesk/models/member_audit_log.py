from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, ForeignKey, func
from gymdesk.core.database import Base


class MemberAuditLog(Base):
    __tablename__ = "member_audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    member_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    action = Column(String(50), nullable=False, index=True,
                    comment="ACCOUNT_ACTIVATED/ACCOUNT_DEACTIVATED/ACCOUNT_DELETED/ACCOUNT_RESTORED/SUBSCRIPTION_*")
    reason = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    previous_state = Column(String(30), nullable=True)
    new_state = Column(String(30), nullable=True)
    performed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)
