"""Dashboard: expiring and expired memberships"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from gymdesk.core.database import get_db
from gymdesk.core.timeutil import utcnow
from gymdesk.routers.deps import require_staff
from gymdesk.services.branch_scope import resolve_branch_scope
from gymdesk.services.expiring_service import (
    MAX_PAGE_SIZE,
    MAX_WINDOW_DAYS,
    build_expiring_overview,
    count_expiring_members,
    find_expired_members,
    find_expiring_subscriptions,
    serialize_expiring,
)

router = APIRouter(prefix="/api/members", tags=["expiring"])


@router.get("/expiring")
async def list_expiring(
    days: int = Query(7, ge=0, le=MAX_WINDOW_DAYS),
    tenant_id: Optional[int] = None,
    branch_id: Optional[int] = None,
    db: Session = Depends(get_db),
    user=Depends(require_staff),
):
    """Members whose current subscription lapses within `days`, soonest first"""
    now = utcnow()
    scope = resolve_branch_scope(db, user, tenant_id=tenant_id, branch_id=branch_id)
    rows = find_expiring_subscriptions(db, days, now, scope)
    return {
        "days": days,
        "count": len(rows),
        "members": [serialize_expiring(sub, member, now) for sub, member in rows],
    }


@router.get("/expiring/count")
async def expiring_count(
    days: int = Query(7, ge=0, le=MAX_WINDOW_DAYS),
    tenant_id: Optional[int] = None,
    branch_id: Optional[int] = None,
    db: Session = Depends(get_db),
    user=Depends(require_staff),
):
    scope = resolve_branch_scope(db, user, tenant_id=tenant_id, branch_id=branch_id)
    return {"count": count_expiring_members(db, days, utcnow(), scope), "days": days}


@router.get("/expiring/overview")
async def expiring_overview(
    days: int = Query(7, ge=0, le=MAX_WINDOW_DAYS),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    tenant_id: Optional[int] = None,
    branch_id: Optional[int] = None,
    db: Session = Depends(get_db),
    user=Depends(require_staff),
):
    """Enriched, paginated view with grouping for the dashboard widget"""
    scope = resolve_branch_scope(db, user, tenant_id=tenant_id, branch_id=branch_id)
    return build_expiring_overview(db, days, utcnow(), scope, user.role, page=page, limit=limit)


@router.get("/expired")
async def list_expired(
    within_days: Optional[int] = Query(None, ge=1, le=MAX_WINDOW_DAYS),
    tenant_id: Optional[int] = None,
    branch_id: Optional[int] = None,
    db: Session = Depends(get_db),
    user=Depends(require_staff),
):
    """Members whose ACTIVE subscription already ran past its end date"""
    now = utcnow()
    scope = resolve_branch_scope(db, user, tenant_id=tenant_id, branch_id=branch_id)
    rows = find_expired_members(db, now, within_days=within_days, scope=scope)
    return {
        "count": len(rows),
        "members": [serialize_expiring(sub, member, now) for sub, member in rows],
    }
