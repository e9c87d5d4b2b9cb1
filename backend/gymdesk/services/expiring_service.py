"""Expiring / expired membership queries"""
import math
from datetime import datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from gymdesk.models.branch import Branch
from gymdesk.models.customer_subscription import CustomerSubscription
from gymdesk.models.membership_plan import MembershipPlan
from gymdesk.models.tenant import Tenant
from gymdesk.models.user import User
from gymdesk.services.branch_scope import Scope
from gymdesk.core.logging import get_logger

logger = get_logger(__name__)

MAX_WINDOW_DAYS = 365
MAX_PAGE_SIZE = 100


def latest_per_customer(subscriptions: Iterable[CustomerSubscription]) -> list[CustomerSubscription]:
    """
    Keep one row per customer: the latest created_at, then the larger id.
    Input order does not matter.
    """
    latest: dict[int, CustomerSubscription] = {}
    for sub in subscriptions:
        existing = latest.get(sub.customer_id)
        if existing is None or (sub.created_at, sub.id) > (existing.created_at, existing.id):
            latest[sub.customer_id] = sub
    return list(latest.values())


def _base_query(db: Session, scope: Optional[Scope]):
    query = (
        db.query(CustomerSubscription, User)
        .join(User, CustomerSubscription.customer_id == User.id)
        .filter(
            CustomerSubscription.status == "ACTIVE",
            CustomerSubscription.cancelled_at.is_(None),
            User.deleted_at.is_(None),
            User.is_active == True,
        )
    )
    if scope is not None:
        if scope.tenant_id is not None:
            query = query.filter(CustomerSubscription.tenant_id == scope.tenant_id)
        if scope.branch_ids is not None:
            query = query.filter(CustomerSubscription.branch_id.in_(scope.branch_ids))
    return query


def _dedup_rows(rows: list[tuple[CustomerSubscription, User]]) -> list[tuple[CustomerSubscription, User]]:
    members = {sub.customer_id: user for sub, user in rows}
    latest = latest_per_customer(sub for sub, _ in rows)
    latest.sort(key=lambda s: (s.end_date, s.id))
    return [(sub, members[sub.customer_id]) for sub in latest]


def find_expiring_subscriptions(
    db: Session,
    days: int,
    now: datetime,
    scope: Optional[Scope] = None,
) -> list[tuple[CustomerSubscription, User]]:
    """
    Subscriptions lapsing within (now, now + days], at most one per customer,
    soonest first. Already lapsed rows belong to find_expired_members().
    """
    if scope is not None and scope.is_empty:
        return []

    window_end = now + timedelta(days=days)
    rows = (
        _base_query(db, scope)
        .filter(
            CustomerSubscription.end_date > now,
            CustomerSubscription.end_date <= window_end,
        )
        .all()
    )
    result = _dedup_rows(rows)
    logger.debug(f"expiring window: days={days}, matched_rows={len(rows)}, customers={len(result)}")
    return result


def find_expired_members(
    db: Session,
    now: datetime,
    within_days: Optional[int] = None,
    scope: Optional[Scope] = None,
) -> list[tuple[CustomerSubscription, User]]:
    """ACTIVE-status subscriptions whose end_date already passed, one per customer"""
    if scope is not None and scope.is_empty:
        return []

    query = _base_query(db, scope).filter(CustomerSubscription.end_date < now)
    if within_days is not None:
        query = query.filter(CustomerSubscription.end_date >= now - timedelta(days=within_days))
    return _dedup_rows(query.all())


def count_expiring_members(
    db: Session,
    days: int,
    now: datetime,
    scope: Optional[Scope] = None,
) -> int:
    return len(find_expiring_subscriptions(db, days, now, scope))


def days_until(end_date: datetime, now: datetime) -> int:
    """Whole days left, rounded up"""
    return math.ceil((end_date - now).total_seconds() / 86400)


def urgency_for(days_left: int) -> str:
    if days_left <= 1:
        return "critical"
    if days_left <= 3:
        return "high"
    return "medium"


def _lookup(db: Session, model, ids: set[int]) -> dict:
    if not ids:
        return {}
    return {obj.id: obj for obj in db.query(model).filter(model.id.in_(ids)).all()}


def serialize_expiring(sub: CustomerSubscription, member: User, now: datetime, plan=None, branch=None,
                       tenant=None) -> dict:
    days_left = days_until(sub.end_date, now)
    return {
        "subscription_id": sub.id,
        "member_id": member.id,
        "member_name": member.full_name,
        "email": member.email,
        "phone_number": member.phone_number,
        "status": sub.status,
        "start_date": sub.start_date.isoformat() if sub.start_date else None,
        "end_date": sub.end_date.isoformat() if sub.end_date else None,
        "created_at": sub.created_at.isoformat() if sub.created_at else None,
        "days_until_expiry": days_left,
        "is_expired": days_left <= 0,
        "urgency": urgency_for(days_left),
        "plan": {"id": plan.id, "name": plan.name, "price": plan.price} if plan else None,
        "branch": {"id": branch.id, "name": branch.name, "address": branch.address} if branch else None,
        "tenant": {"id": tenant.id, "name": tenant.name} if tenant else None,
    }


def build_expiring_overview(
    db: Session,
    days: int,
    now: datetime,
    scope: Scope,
    role: str,
    page: int = 1,
    limit: int = 10,
) -> dict:
    """Paginated, enriched expiring list with tenant/branch grouping for dashboards"""
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)

    rows = find_expiring_subscriptions(db, days, now, scope)
    total = len(rows)
    page_rows = rows[(page - 1) * limit: page * limit]

    plans = _lookup(db, MembershipPlan, {s.membership_plan_id for s, _ in page_rows})
    branches = _lookup(db, Branch, {s.branch_id for s, _ in page_rows if s.branch_id})
    tenants = _lookup(db, Tenant, {s.tenant_id for s, _ in page_rows})

    items = [
        serialize_expiring(
            sub, member, now,
            plan=plans.get(sub.membership_plan_id),
            branch=branches.get(sub.branch_id),
            tenant=tenants.get(sub.tenant_id),
        )
        for sub, member in page_rows
    ]

    grouped_by_tenant = None
    if role == "SUPER_ADMIN":
        grouped_by_tenant = {}
        for item in items:
            name = item["tenant"]["name"] if item["tenant"] else "Unknown"
            group = grouped_by_tenant.setdefault(name, {"tenant": item["tenant"], "members": [], "count": 0})
            group["members"].append(item)
            group["count"] += 1

    grouped_by_branch = None
    if role != "SUPER_ADMIN" and len(scope.available_branches) > 1:
        grouped_by_branch = {}
        for item in items:
            branch = item["branch"] or {"id": None, "name": "No Branch Assigned", "address": None}
            group = grouped_by_branch.setdefault(branch["name"], {"branch": branch, "members": [], "count": 0})
            group["members"].append(item)
            group["count"] += 1

    return {
        "subscriptions": items,
        "grouped_by_tenant": grouped_by_tenant,
        "grouped_by_branch": grouped_by_branch,
        "available_branches": [
            {"id": b.id, "name": b.name, "address": b.address} for b in scope.available_branches
        ],
        "user_role": role,
        "access_summary": {
            "total_accessible_branches": len(scope.available_branches),
            "can_filter_by_branch": len(scope.available_branches) > 1,
            "can_filter_by_tenant": role == "SUPER_ADMIN",
        },
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit) if total else 0,
            "has_next": page * limit < total,
            "has_prev": page > 1,
        },
        "summary": {
            "total_expiring": total,
            "days": days,
            "critical": sum(1 for i in items if i["urgency"] == "critical"),
            "high": sum(1 for i in items if i["urgency"] == "high"),
            "medium": sum(1 for i in items if i["urgency"] == "medium"),
        },
    }
