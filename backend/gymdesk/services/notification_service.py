"""Expiry notifications: who to email, sending, and the email_logs ledger"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from gymdesk.models.customer_subscription import CustomerSubscription
from gymdesk.models.email_log import EmailLog
from gymdesk.models.membership_plan import MembershipPlan
from gymdesk.models.tenant import Tenant
from gymdesk.models.user import User
from gymdesk.services import mail_service
from gymdesk.services.expiring_service import (
    days_until,
    find_expiring_subscriptions,
    find_expired_members,
)
from gymdesk.core.logging import get_logger

logger = get_logger(__name__)

EXPIRING_SOON = "expiring_soon"
EXPIRED = "expired"
RENEWAL = "renewal"
WELCOME = "welcome"


@dataclass
class NotificationSummary:
    candidates: int = 0
    sent: int = 0
    failed: int = 0
    skipped: int = 0


def record_email(
    db: Session,
    result: mail_service.EmailResult,
    recipient_email: str,
    email_type: str,
    tenant_id: Optional[int] = None,
    subscription_id: Optional[int] = None,
) -> EmailLog:
    log = EmailLog(
        tenant_id=tenant_id,
        recipient_email=recipient_email,
        email_type=email_type,
        subscription_id=subscription_id,
        status="SENT" if result.ok else "FAILED",
        provider_message_id=result.message_id,
        error_message=result.error,
    )
    db.add(log)
    return log


def already_notified(db: Session, subscription_id: int, email_type: str) -> bool:
    """A SENT email of this type exists for the subscription"""
    return db.query(EmailLog).filter(
        EmailLog.subscription_id == subscription_id,
        EmailLog.email_type == email_type,
        EmailLog.status == "SENT",
    ).count() > 0


def _context(db: Session, sub: CustomerSubscription) -> tuple[str, str]:
    tenant = db.query(Tenant).filter(Tenant.id == sub.tenant_id).first()
    plan = db.query(MembershipPlan).filter(MembershipPlan.id == sub.membership_plan_id).first()
    return (tenant.name if tenant else "Your gym"), (plan.name if plan else "membership")


def notify_expiring(db: Session, days: int, now: datetime) -> NotificationSummary:
    """Email every member in the expiring window once per subscription"""
    rows = find_expiring_subscriptions(db, days, now)
    summary = NotificationSummary(candidates=len(rows))

    for sub, member in rows:
        if not member.email or already_notified(db, sub.id, EXPIRING_SOON):
            summary.skipped += 1
            continue

        business_name, plan_name = _context(db, sub)
        result = mail_service.send_expiring_soon_email(
            to_email=member.email,
            name=member.full_name,
            business_name=business_name,
            plan_name=plan_name,
            expiration_date=sub.end_date.strftime("%B %d, %Y"),
            days_until_expiry=days_until(sub.end_date, now),
        )
        record_email(db, result, member.email, EXPIRING_SOON, sub.tenant_id, sub.id)
        db.commit()
        if result:
            summary.sent += 1
        else:
            summary.failed += 1

    return summary


def notify_expired(db: Session, now: datetime, within_days: int = 1) -> NotificationSummary:
    """Email members whose membership lapsed within the last `within_days`"""
    rows = find_expired_members(db, now, within_days=within_days)
    summary = NotificationSummary(candidates=len(rows))

    for sub, member in rows:
        if not member.email or already_notified(db, sub.id, EXPIRED):
            summary.skipped += 1
            continue

        business_name, plan_name = _context(db, sub)
        result = mail_service.send_membership_expired_email(
            to_email=member.email,
            name=member.full_name,
            business_name=business_name,
            plan_name=plan_name,
            expiration_date=sub.end_date.strftime("%B %d, %Y"),
        )
        record_email(db, result, member.email, EXPIRED, sub.tenant_id, sub.id)
        db.commit()
        if result:
            summary.sent += 1
        else:
            summary.failed += 1

    return summary


def send_renewal_notice(db: Session, member: User, sub: CustomerSubscription, plan: MembershipPlan) -> None:
    if not member.email:
        return
    tenant = db.query(Tenant).filter(Tenant.id == sub.tenant_id).first()
    result = mail_service.send_renewal_confirmation_email(
        to_email=member.email,
        name=member.full_name,
        business_name=tenant.name if tenant else "Your gym",
        plan_name=plan.name,
        price=sub.price,
        currency=sub.currency,
        start_date=sub.start_date.strftime("%B %d, %Y"),
        end_date=sub.end_date.strftime("%B %d, %Y"),
    )
    record_email(db, result, member.email, RENEWAL, sub.tenant_id, sub.id)
    db.commit()


def send_welcome_notice(db: Session, member: User, tenant: Tenant) -> None:
    if not member.email or not tenant.welcome_email_enabled:
        return
    result = mail_service.send_member_welcome_email(member.email, member.full_name, tenant.name)
    record_email(db, result, member.email, WELCOME, tenant.id)
    db.commit()
