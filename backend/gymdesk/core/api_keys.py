"""Secret/setting resolution: system_settings row first, environment second"""
from typing import Optional

from gymdesk.core.database import SessionLocal
from gymdesk.core.config import settings
from gymdesk.core.security import decrypt
from gymdesk.core.logging import get_logger

logger = get_logger(__name__)


def _load_setting():
    db = SessionLocal()
    try:
        from gymdesk.models.system_setting import SystemSetting
        return db.query(SystemSetting).first()
    except Exception as e:
        logger.debug(f"system_settings lookup skipped: {e}")
        return None
    finally:
        db.close()


def _get_encrypted(field_name: str) -> Optional[str]:
    """Decrypt an encrypted column of system_settings"""
    setting = _load_setting()
    if not setting:
        return None
    enc_value = getattr(setting, field_name, None)
    if not enc_value:
        return None
    try:
        return decrypt(enc_value, field_name)
    except Exception as e:
        logger.warning(f"Could not decrypt {field_name}: {e}")
        return None


def get_resend_api_key() -> str:
    """Resend API key: DB first, then environment"""
    return _get_encrypted("resend_api_key_enc") or settings.RESEND_API_KEY


def get_from_email() -> str:
    setting = _load_setting()
    if setting and setting.from_email:
        return setting.from_email
    return settings.RESEND_FROM_EMAIL


def get_site_name() -> str:
    setting = _load_setting()
    if setting and setting.site_name:
        return setting.site_name
    return settings.SITE_NAME


def get_site_url() -> str:
    setting = _load_setting()
    if setting and setting.site_url:
        return setting.site_url
    return settings.SITE_URL


def get_expiry_reminder_days() -> int:
    """Reminder window in days for the expiring-members job"""
    setting = _load_setting()
    if setting and setting.expiry_reminder_days is not None:
        return setting.expiry_reminder_days
    return settings.EXPIRY_REMINDER_DAYS
