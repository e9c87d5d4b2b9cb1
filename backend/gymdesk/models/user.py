from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum as SAEnum, ForeignKey, func
from gymdesk.core.database import Base

STAFF_ROLES = ("SUPER_ADMIN", "OWNER", "MANAGER", "STAFF")


class User(Base):
    """Staff accounts and gym members share this table, told apart by role"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=True, index=True,
                       comment="NULL for super admins")
    branch_id = Column(Integer, ForeignKey("branches.id", ondelete="SET NULL"), nullable=True, index=True,
                       comment="Home branch (members)")
    email = Column(String(255), nullable=True, index=True)
    password_hash = Column(String(255), nullable=True, comment="NULL for members without a login")
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone_number = Column(String(50), nullable=True)
    role = Column(
        SAEnum("SUPER_ADMIN", "OWNER", "MANAGER", "STAFF", "GYM_MEMBER", name="user_role"),
        nullable=False,
        default="GYM_MEMBER",
    )
    is_active = Column(Boolean, nullable=False, default=True)
    deleted_at = Column(DateTime, nullable=True, comment="Soft delete timestamp")
    deleted_by = Column(Integer, nullable=True)
    deletion_reason = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES
