from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum as SAEnum, func
from gymdesk.core.database import Base


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    category = Column(
        SAEnum("GYM", "COFFEE", "ECOMMERCE", "OTHER", name="business_category"),
        nullable=False,
        default="GYM",
    )
    email = Column(String(255), nullable=True, comment="Owner contact address")
    is_active = Column(Boolean, nullable=False, default=True)
    welcome_email_enabled = Column(Boolean, nullable=False, default=True, comment="Send welcome email to new members")
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
