from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum as SAEnum, ForeignKey, func
from gymdesk.core.database import Base


class InventoryCard(Base):
    """Physical card stock allocated to a branch"""

    __tablename__ = "inventory_cards"

    uid = Column(String(64), primary_key=True)
    allocated_branch_id = Column(Integer, ForeignKey("branches.id", ondelete="SET NULL"), nullable=True, index=True)
    status = Column(SAEnum("AVAILABLE", "ASSIGNED", "DISABLED", name="inventory_card_status"),
                    nullable=False, default="AVAILABLE")
    batch_id = Column(String(100), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())


class Card(Base):
    """Operational card bound to a member"""

    __tablename__ = "cards"

    uid = Column(String(64), primary_key=True)
    branch_id = Column(Integer, ForeignKey("branches.id", ondelete="CASCADE"), nullable=False, index=True)
    member_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    card_type = Column(SAEnum("MONTHLY", "DAILY", name="card_type"), nullable=False, default="MONTHLY")
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())


class PendingMemberAssignment(Base):
    """Binds the next unknown card tapped at a branch kiosk to a member; one per branch"""

    __tablename__ = "pending_member_assignments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    branch_id = Column(Integer, ForeignKey("branches.id", ondelete="CASCADE"), nullable=False, unique=True)
    member_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    purpose = Column(SAEnum("ONBOARD", "REPLACE", name="assignment_purpose"), nullable=False, default="ONBOARD")
    old_card_uid = Column(String(64), nullable=True)
    expires_at = Column(DateTime, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
