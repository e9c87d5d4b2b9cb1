"""Member state, subscriptions and account actions"""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gymdesk.core.database import get_db
from gymdesk.core.timeutil import utcnow
from gymdesk.routers.deps import require_roles, require_staff, resolve_tenant_id, tenant_filter
from gymdesk.schemas.member import (
    AuditLogOut,
    CancelSubscriptionRequest,
    CreateMemberRequest,
    MemberActionRequest,
    MemberOut,
    MemberStateOut,
    RenewRequest,
    SubscriptionOut,
)
from gymdesk.services import member_service, subscription_service
from gymdesk.services.audit_service import get_audit_trail
from gymdesk.services.member_state import get_member, get_member_state

router = APIRouter(prefix="/api/members", tags=["members"])

require_manager = require_roles("SUPER_ADMIN", "OWNER", "MANAGER")


@router.post("", response_model=MemberOut, status_code=201)
async def create_member(
    req: CreateMemberRequest,
    db: Session = Depends(get_db),
    user=Depends(require_staff),
):
    member = member_service.create_member(
        db,
        tenant_id=resolve_tenant_id(user, req.tenant_id),
        first_name=req.first_name,
        last_name=req.last_name,
        now=utcnow(),
        email=req.email,
        phone_number=req.phone_number,
        branch_id=req.branch_id,
        plan_id=req.plan_id,
        performed_by=user.id,
    )
    return MemberOut.model_validate(member)


@router.get("/{member_id}/state", response_model=MemberStateOut)
async def member_state(member_id: int, db: Session = Depends(get_db), user=Depends(require_staff)):
    """Derived member state plus the subscription it was derived from"""
    member, state, current = get_member_state(db, member_id, utcnow(), tenant_id=tenant_filter(user))
    return MemberStateOut(
        member_id=member.id,
        state=state.value,
        current_subscription=SubscriptionOut.model_validate(current) if current else None,
    )


@router.get("/{member_id}/subscriptions", response_model=list[SubscriptionOut])
async def member_subscriptions(member_id: int, db: Session = Depends(get_db), user=Depends(require_staff)):
    history = subscription_service.get_subscription_history(db, member_id, tenant_id=tenant_filter(user))
    return [SubscriptionOut.model_validate(s) for s in history]


@router.get("/{member_id}/audit-log", response_model=list[AuditLogOut])
async def member_audit_log(member_id: int, db: Session = Depends(get_db), user=Depends(require_staff)):
    member = get_member(db, member_id, tenant_filter(user))
    return [AuditLogOut.model_validate(log) for log in get_audit_trail(db, member.id)]


@router.post("/{member_id}/renew", response_model=SubscriptionOut)
async def renew(member_id: int, req: RenewRequest, db: Session = Depends(get_db), user=Depends(require_staff)):
    sub = subscription_service.renew_membership(
        db, member_id, req.plan_id, utcnow(), performed_by=user.id, tenant_id=tenant_filter(user),
    )
    return SubscriptionOut.model_validate(sub)


@router.post("/{member_id}/subscription/cancel", response_model=SubscriptionOut)
async def cancel_subscription(
    member_id: int,
    req: CancelSubscriptionRequest,
    db: Session = Depends(get_db),
    user=Depends(require_staff),
):
    sub = subscription_service.cancel_membership(
        db, member_id, utcnow(),
        reason=req.reason, notes=req.notes, performed_by=user.id, tenant_id=tenant_filter(user),
    )
    return SubscriptionOut.model_validate(sub)


@router.post("/{member_id}/activate", response_model=MemberOut)
async def activate(
    member_id: int,
    req: MemberActionRequest,
    db: Session = Depends(get_db),
    user=Depends(require_staff),
):
    member = member_service.activate_member(
        db, member_id, utcnow(),
        reason=req.reason, notes=req.notes, performed_by=user.id, tenant_id=tenant_filter(user),
    )
    return MemberOut.model_validate(member)


@router.post("/{member_id}/cancel", response_model=MemberOut)
async def cancel(
    member_id: int,
    req: MemberActionRequest,
    db: Session = Depends(get_db),
    user=Depends(require_staff),
):
    member = member_service.cancel_member(
        db, member_id, utcnow(),
        reason=req.reason, notes=req.notes, performed_by=user.id, tenant_id=tenant_filter(user),
    )
    return MemberOut.model_validate(member)


@router.delete("/{member_id}", response_model=MemberOut)
async def delete_member(
    member_id: int,
    reason: str = "ADMIN_DECISION",
    notes: Optional[str] = None,
    db: Session = Depends(get_db),
    user=Depends(require_manager),
):
    """Soft delete"""
    member = member_service.soft_delete_member(
        db, member_id, utcnow(),
        reason=reason, notes=notes, performed_by=user.id, tenant_id=tenant_filter(user),
    )
    return MemberOut.model_validate(member)


@router.post("/{member_id}/restore", response_model=MemberOut)
async def restore(
    member_id: int,
    req: MemberActionRequest,
    db: Session = Depends(get_db),
    user=Depends(require_manager),
):
    member = member_service.restore_member(
        db, member_id, utcnow(),
        reason=req.reason, notes=req.notes, performed_by=user.id, tenant_id=tenant_filter(user),
    )
    return MemberOut.model_validate(member)
