from sqlalchemy import Column, Integer, String, Text, DateTime, func
from gymdesk.core.database import Base


class SystemSetting(Base):
    __tablename__ = "system_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)

    site_name = Column(String(255), nullable=False, default="GymDesk")
    site_url = Column(String(500), nullable=False, default="http://localhost:8000")
    from_email = Column(String(255), nullable=False, default="noreply@example.com")

    # encrypted API keys
    resend_api_key_enc = Column(Text, nullable=True, comment="Resend API key (encrypted)")

    expiry_reminder_days = Column(Integer, nullable=False, default=7, comment="Expiring-soon reminder window")

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
