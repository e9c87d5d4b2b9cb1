"""Daily: remind members whose membership is about to lapse"""
from datetime import datetime
from typing import Optional

from gymdesk.core.api_keys import get_expiry_reminder_days
from gymdesk.core.database import SessionLocal
from gymdesk.core.timeutil import utcnow
from gymdesk.services.notification_service import NotificationSummary, notify_expiring
from gymdesk.core.logging import get_logger

logger = get_logger(__name__)


def notify_expiring_members(now: Optional[datetime] = None) -> Optional[NotificationSummary]:
    """Email every member lapsing within the reminder window, once per subscription"""
    db = SessionLocal()
    try:
        now = now or utcnow()
        days = get_expiry_reminder_days()
        summary = notify_expiring(db, days, now)
        logger.info(
            f"Expiring reminders: days={days}, candidates={summary.candidates}, "
            f"sent={summary.sent}, failed={summary.failed}, skipped={summary.skipped}",
            extra={"job": "expiry_reminder"},
        )
        return summary
    except Exception as e:
        logger.error(f"Expiring reminder job error: {e}")
        db.rollback()
        return None
    finally:
        db.close()
