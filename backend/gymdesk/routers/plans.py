"""Membership plan catalogue"""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gymdesk.core.database import get_db
from gymdesk.routers.deps import require_roles, require_staff, resolve_tenant_id, tenant_filter
from gymdesk.schemas.plan import PlanCreateRequest, PlanOut, PlanUpdateRequest
from gymdesk.services import plan_service

router = APIRouter(prefix="/api/plans", tags=["plans"])

require_manager = require_roles("SUPER_ADMIN", "OWNER", "MANAGER")


@router.get("", response_model=list[PlanOut])
async def list_plans(
    tenant_id: Optional[int] = None,
    active_only: bool = False,
    db: Session = Depends(get_db),
    user=Depends(require_staff),
):
    plans = plan_service.list_plans(db, resolve_tenant_id(user, tenant_id), active_only=active_only)
    return [PlanOut.model_validate(p) for p in plans]


@router.get("/{plan_id}", response_model=PlanOut)
async def get_plan(plan_id: int, db: Session = Depends(get_db), user=Depends(require_staff)):
    return PlanOut.model_validate(plan_service.get_plan(db, plan_id, tenant_filter(user)))


@router.post("", response_model=PlanOut, status_code=201)
async def create_plan(req: PlanCreateRequest, db: Session = Depends(get_db), user=Depends(require_manager)):
    plan = plan_service.create_plan(
        db,
        tenant_id=resolve_tenant_id(user, req.tenant_id),
        name=req.name,
        price=req.price,
        duration=req.duration,
        description=req.description,
        plan_type=req.plan_type,
        is_active=req.is_active,
    )
    return PlanOut.model_validate(plan)


@router.patch("/{plan_id}", response_model=PlanOut)
async def update_plan(
    plan_id: int,
    req: PlanUpdateRequest,
    db: Session = Depends(get_db),
    user=Depends(require_manager),
):
    plan = plan_service.update_plan(db, plan_id, req.model_dump(exclude_unset=True), tenant_id=tenant_filter(user))
    return PlanOut.model_validate(plan)


@router.patch("/{plan_id}/toggle-status", response_model=PlanOut)
async def toggle_status(plan_id: int, db: Session = Depends(get_db), user=Depends(require_manager)):
    return PlanOut.model_validate(plan_service.toggle_plan_status(db, plan_id, tenant_filter(user)))
