"""Daily: tell members their membership has lapsed"""
from datetime import datetime
from typing import Optional

from gymdesk.core.database import SessionLocal
from gymdesk.core.timeutil import utcnow
from gymdesk.services.notification_service import NotificationSummary, notify_expired
from gymdesk.core.logging import get_logger

logger = get_logger(__name__)

EXPIRED_LOOKBACK_DAYS = 1


def notify_expired_members(now: Optional[datetime] = None) -> Optional[NotificationSummary]:
    db = SessionLocal()
    try:
        now = now or utcnow()
        summary = notify_expired(db, now, within_days=EXPIRED_LOOKBACK_DAYS)
        logger.info(
            f"Expired notices: candidates={summary.candidates}, sent={summary.sent}, "
            f"failed={summary.failed}, skipped={summary.skipped}",
            extra={"job": "expired_notice"},
        )
        return summary
    except Exception as e:
        logger.error(f"Expired notice job error: {e}")
        db.rollback()
        return None
    finally:
        db.close()
