"""Membership subscription lifecycle"""
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from gymdesk.core.exceptions import (
    DuplicateRenewal,
    InvalidMemberTransition,
    PlanNotFound,
    SubscriptionNotFound,
)
from gymdesk.models.customer_subscription import CustomerSubscription, SUBSCRIPTION_STATUSES
from gymdesk.models.membership_plan import MembershipPlan
from gymdesk.services.audit_service import write_audit_log
from gymdesk.services.member_state import get_member, resolve_member_state, subscription_history
from gymdesk.services.notification_service import send_renewal_notice
from gymdesk.core.logging import get_logger

logger = get_logger(__name__)


def get_subscription_history(db: Session, member_id: int, tenant_id: Optional[int] = None) -> list[CustomerSubscription]:
    """Subscription rows of a member, newest first"""
    member = get_member(db, member_id, tenant_id)
    return subscription_history(db, member.id)


def get_current_subscription(db: Session, member_id: int) -> Optional[CustomerSubscription]:
    """Latest row by creation; None when the member never subscribed"""
    return (
        db.query(CustomerSubscription)
        .filter(CustomerSubscription.customer_id == member_id)
        .order_by(CustomerSubscription.created_at.desc(), CustomerSubscription.id.desc())
        .first()
    )


def _renewed_today(db: Session, member_id: int, now: datetime) -> bool:
    day_start = datetime(now.year, now.month, now.day)
    return db.query(CustomerSubscription).filter(
        CustomerSubscription.customer_id == member_id,
        CustomerSubscription.created_at >= day_start,
        CustomerSubscription.created_at < day_start + timedelta(days=1),
    ).count() > 0


def renew_membership(
    db: Session,
    member_id: int,
    plan_id: int,
    now: datetime,
    performed_by: Optional[int] = None,
    tenant_id: Optional[int] = None,
    notify: bool = True,
) -> CustomerSubscription:
    """
    Start a new subscription period for a member.

    The previous ACTIVE row is closed as EXPIRED (reason "renewed") and a new
    ACTIVE row covering [now, now + plan.duration days] is appended.
    """
    member = get_member(db, member_id, tenant_id)
    plan = db.query(MembershipPlan).filter(
        MembershipPlan.id == plan_id,
        MembershipPlan.tenant_id == member.tenant_id,
        MembershipPlan.is_active == True,
    ).first()
    if not plan:
        raise PlanNotFound(plan_id)

    if member.deleted_at is not None:
        raise InvalidMemberTransition("Cannot renew a deleted member")

    if _renewed_today(db, member.id, now):
        raise DuplicateRenewal("Membership was already renewed today")

    history = subscription_history(db, member.id)
    previous_state = resolve_member_state(member, history, now)

    for old in history:
        if old.status == "ACTIVE":
            old.status = "EXPIRED"
            old.cancelled_at = now
            old.cancellation_reason = "renewed"
            old.auto_renew = False

    branch_id = member.branch_id
    if branch_id is None and history:
        branch_id = history[0].branch_id

    sub = CustomerSubscription(
        tenant_id=member.tenant_id,
        branch_id=branch_id,
        customer_id=member.id,
        membership_plan_id=plan.id,
        status="ACTIVE",
        start_date=now,
        end_date=now + timedelta(days=plan.duration),
        price=plan.price,
        currency="PHP",
        auto_renew=True,
        created_at=now,
    )
    db.add(sub)
    member.is_active = True

    db.flush()
    write_audit_log(
        db,
        member_id=member.id,
        action="SUBSCRIPTION_RENEWED",
        previous_state=previous_state.value,
        new_state="ACTIVE",
        performed_by=performed_by,
        details={"plan_id": plan.id, "subscription_id": sub.id, "end_date": sub.end_date.isoformat()},
    )
    db.commit()
    db.refresh(sub)
    logger.info(f"Membership renewed: member_id={member.id}, plan_id={plan.id}, subscription_id={sub.id}")

    if notify:
        send_renewal_notice(db, member, sub, plan)
    return sub


def cancel_membership(
    db: Session,
    member_id: int,
    now: datetime,
    reason: Optional[str] = None,
    notes: Optional[str] = None,
    performed_by: Optional[int] = None,
    tenant_id: Optional[int] = None,
) -> CustomerSubscription:
    """Cancel the member's current subscription; it must be ACTIVE"""
    member = get_member(db, member_id, tenant_id)
    current = get_current_subscription(db, member.id)
    if current is None:
        raise SubscriptionNotFound(f"Member {member.id} has no subscription")
    if current.status != "ACTIVE":
        raise InvalidMemberTransition(f"Cannot cancel a {current.status} subscription")

    current.status = "CANCELLED"
    current.cancelled_at = now
    current.cancellation_reason = reason
    current.cancellation_notes = notes
    current.auto_renew = False

    write_audit_log(
        db,
        member_id=member.id,
        action="SUBSCRIPTION_CANCELLED",
        previous_state="ACTIVE",
        new_state="CANCELLED",
        performed_by=performed_by,
        reason=reason,
        notes=notes,
        details={"subscription_id": current.id},
    )
    db.commit()
    db.refresh(current)
    logger.info(f"Membership cancelled: member_id={member.id}, subscription_id={current.id}")
    return current


def subscription_stats(db: Session, tenant_id: int) -> dict:
    """Row counts per stored status for a tenant"""
    rows = (
        db.query(CustomerSubscription.status, func.count(CustomerSubscription.id))
        .filter(CustomerSubscription.tenant_id == tenant_id)
        .group_by(CustomerSubscription.status)
        .all()
    )
    counts = {status: 0 for status in SUBSCRIPTION_STATUSES}
    for status, count in rows:
        counts[status] = count
    return {
        "tenant_id": tenant_id,
        "total": sum(counts.values()),
        "active": counts["ACTIVE"],
        "expired": counts["EXPIRED"],
        "cancelled": counts["CANCELLED"],
    }

