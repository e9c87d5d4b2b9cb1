"""Membership plan catalogue, one per tenant"""
from typing import Optional

from sqlalchemy.orm import Session

from gymdesk.core.exceptions import Conflict, NotFound
from gymdesk.models.membership_plan import MembershipPlan
from gymdesk.services.tenant_service import get_tenant
from gymdesk.core.logging import get_logger

logger = get_logger(__name__)

UPDATABLE_FIELDS = ("name", "description", "price", "duration", "plan_type")


def _ensure_unique_name(db: Session, tenant_id: int, name: str, exclude_id: Optional[int] = None) -> None:
    q = db.query(MembershipPlan).filter(MembershipPlan.tenant_id == tenant_id, MembershipPlan.name == name)
    if exclude_id is not None:
        q = q.filter(MembershipPlan.id != exclude_id)
    if q.first():
        raise Conflict(f"A membership plan named {name} already exists")


def list_plans(db: Session, tenant_id: int, active_only: bool = False) -> list[MembershipPlan]:
    """Active plans first, then by name"""
    q = db.query(MembershipPlan).filter(MembershipPlan.tenant_id == tenant_id)
    if active_only:
        q = q.filter(MembershipPlan.is_active == True)
    return q.order_by(MembershipPlan.is_active.desc(), MembershipPlan.name).all()


def get_plan(db: Session, plan_id: int, tenant_id: Optional[int] = None) -> MembershipPlan:
    q = db.query(MembershipPlan).filter(MembershipPlan.id == plan_id)
    if tenant_id is not None:
        q = q.filter(MembershipPlan.tenant_id == tenant_id)
    plan = q.first()
    if not plan:
        raise NotFound(f"Membership plan {plan_id} not found")
    return plan


def create_plan(
    db: Session,
    tenant_id: int,
    name: str,
    price: int,
    duration: int,
    description: Optional[str] = None,
    plan_type: str = "MONTHLY",
    is_active: bool = True,
) -> MembershipPlan:
    get_tenant(db, tenant_id)
    _ensure_unique_name(db, tenant_id, name)

    plan = MembershipPlan(
        tenant_id=tenant_id,
        name=name,
        description=description,
        price=price,
        duration=duration,
        plan_type=plan_type,
        is_active=is_active,
    )
    db.add(plan)
    db.commit()
    db.refresh(plan)
    logger.info(f"Membership plan created: plan_id={plan.id}, name={name}", extra={"tenant_id": tenant_id})
    return plan


def update_plan(db: Session, plan_id: int, changes: dict, tenant_id: Optional[int] = None) -> MembershipPlan:
    """
    Partial update. Existing subscriptions keep the price and dates they were
    sold with.
    """
    plan = get_plan(db, plan_id, tenant_id)
    if changes.get("name") and changes["name"] != plan.name:
        _ensure_unique_name(db, plan.tenant_id, changes["name"], exclude_id=plan.id)

    for field in UPDATABLE_FIELDS:
        if changes.get(field) is not None:
            setattr(plan, field, changes[field])
    db.commit()
    db.refresh(plan)
    logger.info(f"Membership plan updated: plan_id={plan.id}", extra={"tenant_id": plan.tenant_id})
    return plan


def toggle_plan_status(db: Session, plan_id: int, tenant_id: Optional[int] = None) -> MembershipPlan:
    """Flip is_active. Inactive plans cannot be sold or renewed into."""
    plan = get_plan(db, plan_id, tenant_id)
    plan.is_active = not plan.is_active
    db.commit()
    db.refresh(plan)
    logger.info(
        f"Membership plan {'activated' if plan.is_active else 'deactivated'}: plan_id={plan.id}",
        extra={"tenant_id": plan.tenant_id},
    )
    return plan
