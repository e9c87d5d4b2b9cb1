"""Admin: tenants, branches and staff accounts"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from gymdesk.core.database import get_db
from gymdesk.routers.deps import require_roles, resolve_tenant_id, tenant_filter
from gymdesk.schemas.admin import (
    BranchCreateRequest,
    BranchOut,
    StaffCreateRequest,
    StaffOut,
    TenantCreateRequest,
    TenantOut,
)
from gymdesk.services import tenant_service

router = APIRouter(prefix="/api/admin", tags=["admin-setup"])

require_super_admin = require_roles("SUPER_ADMIN")
require_owner = require_roles("SUPER_ADMIN", "OWNER")


@router.post("/tenants", response_model=TenantOut, status_code=201)
async def create_tenant(req: TenantCreateRequest, db: Session = Depends(get_db), user=Depends(require_super_admin)):
    tenant = tenant_service.create_tenant(db, req.name, req.slug, email=req.email)
    return TenantOut.model_validate(tenant)


@router.get("/branches", response_model=list[BranchOut])
async def list_branches(
    tenant_id: Optional[int] = None,
    db: Session = Depends(get_db),
    user=Depends(require_owner),
):
    scoped = tenant_filter(user)
    branches = tenant_service.list_branches(db, scoped if scoped is not None else tenant_id)
    return [BranchOut.model_validate(b) for b in branches]


@router.post("/branches", response_model=BranchOut, status_code=201)
async def create_branch(req: BranchCreateRequest, db: Session = Depends(get_db), user=Depends(require_owner)):
    branch = tenant_service.create_branch(db, resolve_tenant_id(user, req.tenant_id), req.name, address=req.address)
    return BranchOut.model_validate(branch)


@router.get("/staff", response_model=list[StaffOut])
async def list_staff(
    tenant_id: Optional[int] = None,
    db: Session = Depends(get_db),
    user=Depends(require_owner),
):
    scoped = tenant_filter(user)
    staff = tenant_service.list_staff(db, scoped if scoped is not None else tenant_id)
    return [StaffOut.model_validate(u) for u in staff]


@router.post("/staff", response_model=StaffOut, status_code=201)
async def create_staff(req: StaffCreateRequest, db: Session = Depends(get_db), user=Depends(require_owner)):
    """Owners add managers and staff to their own tenant; super admins also add owners"""
    if user.role == "OWNER" and req.role not in tenant_service.OWNER_GRANTABLE_ROLES:
        raise HTTPException(status_code=403, detail="Insufficient permissions")
    staff = tenant_service.create_staff_account(
        db,
        tenant_id=resolve_tenant_id(user, req.tenant_id),
        email=req.email,
        password=req.password,
        first_name=req.first_name,
        last_name=req.last_name,
        role=req.role,
        branch_ids=req.branch_ids,
    )
    return StaffOut.model_validate(staff)
