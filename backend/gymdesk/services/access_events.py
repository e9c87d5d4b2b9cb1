"""Kiosk and card event log"""
from typing import Optional

from sqlalchemy.orm import Session

from gymdesk.models.access_event import AccessEvent
from gymdesk.core.logging import get_logger

logger = get_logger(__name__)


def log_event(
    db: Session,
    branch_id: int,
    event_type: str,
    terminal_id: Optional[int] = None,
    card_uid: Optional[str] = None,
    member_id: Optional[int] = None,
    actor_user_id: Optional[int] = None,
    details: Optional[dict] = None,
    commit: bool = True,
) -> AccessEvent:
    event = AccessEvent(
        branch_id=branch_id,
        terminal_id=terminal_id,
        event_type=event_type,
        card_uid=card_uid,
        member_id=member_id,
        actor_user_id=actor_user_id,
        details=details,
    )
    db.add(event)
    if commit:
        db.commit()
    logger.info(
        f"Access event: type={event_type}, card_uid={card_uid}",
        extra={"branch_id": branch_id, "terminal_id": terminal_id, "member_id": member_id},
    )
    return event


def recent_events(db: Session, branch_id: int, limit: int = 50) -> list[AccessEvent]:
    return (
        db.query(AccessEvent)
        .filter(AccessEvent.branch_id == branch_id)
        .order_by(AccessEvent.created_at.desc(), AccessEvent.id.desc())
        .limit(limit)
        .all()
    )
