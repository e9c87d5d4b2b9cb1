from sqlalchemy import Column, Integer, String, DateTime, JSON, ForeignKey, func
from gymdesk.core.database import Base


class AccessEvent(Base):
    __tablename__ = "access_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    branch_id = Column(Integer, ForeignKey("branches.id", ondelete="CASCADE"), nullable=False, index=True)
    terminal_id = Column(Integer, ForeignKey("terminals.id", ondelete="SET NULL"), nullable=True, index=True)
    event_type = Column(String(50), nullable=False, index=True, comment="ACCESS_ALLOW/ACCESS_DENY_*/CARD_*/...")
    card_uid = Column(String(64), nullable=True)
    member_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    actor_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)
