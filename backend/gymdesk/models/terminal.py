from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, func
from gymdesk.core.database import Base


class Terminal(Base):
    """Kiosk device installed at a branch"""

    __tablename__ = "terminals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    branch_id = Column(Integer, ForeignKey("branches.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    secret_hash = Column(String(255), nullable=False, comment="bcrypt hash of the terminal secret")
    is_active = Column(Boolean, nullable=False, default=True)
    last_seen_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
