"""Member state derivation from subscription history"""
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from gymdesk.core.exceptions import MemberNotFound
from gymdesk.models.customer_subscription import CustomerSubscription
from gymdesk.models.user import User


class MemberState(str, Enum):
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"
    NO_SUBSCRIPTION = "NO_SUBSCRIPTION"
    DELETED = "DELETED"


def _lapsed(end_date, now: datetime) -> bool:
    """end_date strictly before now; unusable dates never count as lapsed"""
    if not isinstance(end_date, datetime):
        return False
    try:
        return end_date < now
    except TypeError:
        # aware vs naive
        return False


def resolve_member_state(
    member,
    subscriptions: Sequence,
    now: datetime,
) -> MemberState:
    """
    Member state, first match wins:
    DELETED > NO_SUBSCRIPTION > CANCELLED > EXPIRED > ACTIVE.

    `subscriptions` must be ordered newest first; only the first row is read.
    A set cancelled_at counts as CANCELLED whatever the status says, and
    an EXPIRED date overrides a stale ACTIVE status.
    """
    if member.deleted_at is not None:
        return MemberState.DELETED

    if not subscriptions:
        return MemberState.NO_SUBSCRIPTION

    current = subscriptions[0]
    if current.status == "CANCELLED" or current.cancelled_at is not None:
        return MemberState.CANCELLED

    if _lapsed(current.end_date, now) or current.status == "EXPIRED":
        return MemberState.EXPIRED

    return MemberState.ACTIVE


def subscription_history(db: Session, member_id: int) -> list[CustomerSubscription]:
    """Every subscription row of a member, newest first (insertion order breaks ties)"""
    return (
        db.query(CustomerSubscription)
        .filter(CustomerSubscription.customer_id == member_id)
        .order_by(CustomerSubscription.created_at.desc(), CustomerSubscription.id.desc())
        .all()
    )


def get_member(db: Session, member_id: int, tenant_id: Optional[int] = None) -> User:
    query = db.query(User).filter(User.id == member_id, User.role == "GYM_MEMBER")
    if tenant_id is not None:
        query = query.filter(User.tenant_id == tenant_id)
    member = query.first()
    if not member:
        raise MemberNotFound(member_id)
    return member


def get_member_state(
    db: Session,
    member_id: int,
    now: datetime,
    tenant_id: Optional[int] = None,
) -> tuple[User, MemberState, Optional[CustomerSubscription]]:
    """Load a member with its history and resolve its state"""
    member = get_member(db, member_id, tenant_id)
    history = subscription_history(db, member.id)
    state = resolve_member_state(member, history, now)
    return member, state, history[0] if history else None
