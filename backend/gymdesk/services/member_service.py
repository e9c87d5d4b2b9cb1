"""Member account actions: create, activate, cancel, delete, restore"""
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from gymdesk.core.exceptions import DuplicateMember, GymDeskError, InvalidMemberTransition, NotFound, PlanNotFound
from gymdesk.models.branch import Branch
from gymdesk.models.card import Card
from gymdesk.models.customer_subscription import CustomerSubscription
from gymdesk.models.membership_plan import MembershipPlan
from gymdesk.models.tenant import Tenant
from gymdesk.models.user import User
from gymdesk.services.audit_service import write_audit_log
from gymdesk.services.member_state import MemberState, get_member, resolve_member_state, subscription_history
from gymdesk.services.notification_service import send_welcome_notice
from gymdesk.core.logging import get_logger

logger = get_logger(__name__)

ACTIVATION_REASONS = (
    "PAYMENT_RECEIVED", "ISSUE_RESOLVED", "POLICY_UPDATE", "ADMIN_DECISION", "SUBSCRIPTION_RENEWED", "OTHER",
)
CANCELLATION_REASONS = (
    "NON_PAYMENT", "POLICY_VIOLATION", "MEMBER_REQUEST", "FACILITY_ABUSE", "ADMIN_DECISION", "OTHER",
)
DELETION_REASONS = (
    "MEMBER_REQUEST", "DUPLICATE_ACCOUNT", "DATA_ERROR", "POLICY_VIOLATION", "ADMIN_DECISION", "OTHER",
)
RESTORATION_REASONS = (
    "DATA_ERROR", "POLICY_CHANGE", "MEMBER_REQUEST", "ADMIN_ERROR", "PAYMENT_RESOLVED", "OTHER",
)


def _check_reason(reason: str, allowed: tuple, kind: str) -> None:
    if reason not in allowed:
        raise GymDeskError(f"Invalid {kind} reason: {reason}")


def _current_state(db: Session, member: User, now: datetime) -> tuple[MemberState, Optional[CustomerSubscription]]:
    history = subscription_history(db, member.id)
    return resolve_member_state(member, history, now), (history[0] if history else None)


def create_member(
    db: Session,
    tenant_id: int,
    first_name: str,
    last_name: str,
    now: datetime,
    email: Optional[str] = None,
    phone_number: Optional[str] = None,
    branch_id: Optional[int] = None,
    plan_id: Optional[int] = None,
    performed_by: Optional[int] = None,
) -> User:
    """
    Register a gym member, optionally starting a first subscription.

    A welcome email goes out when the tenant has welcome emails enabled.
    """
    tenant = db.query(Tenant).filter(Tenant.id == tenant_id).first()
    if not tenant:
        raise NotFound(f"Tenant {tenant_id} not found")

    if branch_id is not None:
        branch = db.query(Branch).filter(Branch.id == branch_id, Branch.tenant_id == tenant_id).first()
        if not branch:
            raise NotFound(f"Branch {branch_id} not found")

    if email:
        email = email.lower()
        exists = db.query(User).filter(
            User.tenant_id == tenant_id,
            User.email == email,
            User.deleted_at.is_(None),
        ).first()
        if exists:
            raise DuplicateMember(f"A member with email {email} already exists")

    plan = None
    if plan_id is not None:
        plan = db.query(MembershipPlan).filter(
            MembershipPlan.id == plan_id,
            MembershipPlan.tenant_id == tenant_id,
            MembershipPlan.is_active == True,
        ).first()
        if not plan:
            raise PlanNotFound(plan_id)

    member = User(
        tenant_id=tenant_id,
        branch_id=branch_id,
        email=email,
        first_name=first_name,
        last_name=last_name,
        phone_number=phone_number,
        role="GYM_MEMBER",
        is_active=True,
    )
    db.add(member)
    db.flush()

    write_audit_log(db, member.id, "ACCOUNT_CREATED", new_state="NO_SUBSCRIPTION", performed_by=performed_by)

    if plan is not None:
        sub = CustomerSubscription(
            tenant_id=tenant_id,
            branch_id=branch_id,
            customer_id=member.id,
            membership_plan_id=plan.id,
            status="ACTIVE",
            start_date=now,
            end_date=now + timedelta(days=plan.duration),
            price=plan.price,
            created_at=now,
        )
        db.add(sub)
        db.flush()
        write_audit_log(
            db, member.id, "SUBSCRIPTION_STARTED",
            previous_state="NO_SUBSCRIPTION",
            new_state="ACTIVE",
            performed_by=performed_by,
            details={"plan_id": plan.id, "subscription_id": sub.id},
        )

    db.commit()
    db.refresh(member)
    logger.info(f"Member created: member_id={member.id}, tenant_id={tenant_id}")

    send_welcome_notice(db, member, tenant)
    return member


def activate_member(
    db: Session,
    member_id: int,
    now: datetime,
    reason: str = "ADMIN_DECISION",
    notes: Optional[str] = None,
    performed_by: Optional[int] = None,
    tenant_id: Optional[int] = None,
) -> User:
    """Re-enable a cancelled, expired or never-subscribed member"""
    _check_reason(reason, ACTIVATION_REASONS, "activation")
    member = get_member(db, member_id, tenant_id)
    state, current = _current_state(db, member, now)

    if state not in (MemberState.CANCELLED, MemberState.EXPIRED, MemberState.NO_SUBSCRIPTION):
        raise InvalidMemberTransition(f"Cannot activate member in {state.value} state")

    member.is_active = True
    reopened = False
    if current is not None and current.status == "CANCELLED":
        current.status = "ACTIVE"
        current.cancelled_at = None
        current.cancellation_reason = None
        current.cancellation_notes = None
        reopened = True

    write_audit_log(
        db, member.id, "ACCOUNT_ACTIVATED",
        previous_state=state.value,
        new_state=MemberState.ACTIVE.value,
        performed_by=performed_by,
        reason=reason,
        notes=notes,
        details={"subscription_id": current.id if current else None, "reopened": reopened},
    )
    db.commit()
    db.refresh(member)
    logger.info(f"Member activated: member_id={member.id}, previous_state={state.value}")
    return member


def cancel_member(
    db: Session,
    member_id: int,
    now: datetime,
    reason: str = "ADMIN_DECISION",
    notes: Optional[str] = None,
    performed_by: Optional[int] = None,
    tenant_id: Optional[int] = None,
) -> User:
    """Cancel an active or expired member's current subscription"""
    _check_reason(reason, CANCELLATION_REASONS, "cancellation")
    member = get_member(db, member_id, tenant_id)
    state, current = _current_state(db, member, now)

    if state not in (MemberState.ACTIVE, MemberState.EXPIRED):
        raise InvalidMemberTransition(f"Cannot cancel member in {state.value} state")

    current.status = "CANCELLED"
    current.cancelled_at = now
    current.cancellation_reason = reason
    current.cancellation_notes = notes
    current.auto_renew = False

    write_audit_log(
        db, member.id, "ACCOUNT_DEACTIVATED",
        previous_state=state.value,
        new_state=MemberState.CANCELLED.value,
        performed_by=performed_by,
        reason=reason,
        notes=notes,
        details={"subscription_id": current.id, "end_date": current.end_date.isoformat()},
    )
    db.commit()
    db.refresh(member)
    logger.info(f"Member cancelled: member_id={member.id}")
    return member


def soft_delete_member(
    db: Session,
    member_id: int,
    now: datetime,
    reason: str = "ADMIN_DECISION",
    notes: Optional[str] = None,
    performed_by: Optional[int] = None,
    tenant_id: Optional[int] = None,
) -> User:
    """Mark a member deleted and switch off their cards. Rows are kept."""
    _check_reason(reason, DELETION_REASONS, "deletion")
    member = get_member(db, member_id, tenant_id)
    state, _ = _current_state(db, member, now)

    if state == MemberState.DELETED:
        raise InvalidMemberTransition("Member is already deleted")

    member.deleted_at = now
    member.deleted_by = performed_by
    member.deletion_reason = reason
    member.is_active = False

    cards = db.query(Card).filter(Card.member_id == member.id, Card.active == True).all()
    for card in cards:
        card.active = False

    write_audit_log(
        db, member.id, "ACCOUNT_DELETED",
        previous_state=state.value,
        new_state=MemberState.DELETED.value,
        performed_by=performed_by,
        reason=reason,
        notes=notes,
        details={"deactivated_cards": [c.uid for c in cards]},
    )
    db.commit()
    db.refresh(member)
    logger.info(f"Member deleted: member_id={member.id}, cards_deactivated={len(cards)}")
    return member


def restore_member(
    db: Session,
    member_id: int,
    now: datetime,
    reason: str = "ADMIN_ERROR",
    notes: Optional[str] = None,
    performed_by: Optional[int] = None,
    tenant_id: Optional[int] = None,
) -> User:
    """Undo a soft delete"""
    _check_reason(reason, RESTORATION_REASONS, "restoration")
    member = get_member(db, member_id, tenant_id)
    if member.deleted_at is None:
        raise InvalidMemberTransition("Member is not deleted")

    member.deleted_at = None
    member.deleted_by = None
    member.deletion_reason = None
    member.is_active = True

    new_state, _ = _current_state(db, member, now)
    write_audit_log(
        db, member.id, "ACCOUNT_RESTORED",
        previous_state=MemberState.DELETED.value,
        new_state=new_state.value,
        performed_by=performed_by,
        reason=reason,
        notes=notes,
    )
    db.commit()
    db.refresh(member)
    logger.info(f"Member restored: member_id={member.id}")
    return member

