"""Every 5 minutes: drop pending card assignments past their TTL"""
from datetime import datetime
from typing import Optional

from gymdesk.core.database import SessionLocal
from gymdesk.core.timeutil import utcnow
from gymdesk.services.card_assignment_service import delete_expired_assignments
from gymdesk.core.logging import get_logger

logger = get_logger(__name__)


def cleanup_expired_assignments(now: Optional[datetime] = None) -> int:
    db = SessionLocal()
    try:
        removed = delete_expired_assignments(db, now or utcnow())
        if removed:
            logger.info(f"Expired pending assignments removed: {removed}", extra={"job": "pending_assignment_cleaner"})
        return removed
    except Exception as e:
        logger.error(f"Pending assignment cleanup error: {e}")
        db.rollback()
        return 0
    finally:
        db.close()
