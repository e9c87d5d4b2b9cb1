"""Admin: blank card stock per branch"""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gymdesk.core.database import get_db
from gymdesk.routers.deps import require_roles, tenant_filter
from gymdesk.schemas.access import (
    InventoryBatchStatusRequest,
    InventoryCardOut,
    InventoryCreateRequest,
    InventoryCreateResult,
    InventoryMoveRequest,
    InventoryMoveResult,
)
from gymdesk.services import inventory_service

router = APIRouter(prefix="/api/admin/inventory-cards", tags=["admin-inventory"])

require_owner = require_roles("SUPER_ADMIN", "OWNER")


@router.get("", response_model=list[InventoryCardOut])
async def list_cards(
    branch_id: int,
    status: Optional[str] = None,
    batch_id: Optional[str] = None,
    limit: int = inventory_service.DEFAULT_LIST_LIMIT,
    db: Session = Depends(get_db),
    user=Depends(require_owner),
):
    cards = inventory_service.list_cards(
        db, branch_id, tenant_id=tenant_filter(user), status=status, batch_id=batch_id, limit=limit,
    )
    return [InventoryCardOut.model_validate(c) for c in cards]


@router.post("", response_model=InventoryCreateResult, status_code=201)
async def create_cards(req: InventoryCreateRequest, db: Session = Depends(get_db), user=Depends(require_owner)):
    return inventory_service.create_cards(
        db, req.branch_id, req.uids,
        batch_id=req.batch_id, tenant_id=tenant_filter(user), performed_by=user.id,
    )


@router.post("/move", response_model=InventoryMoveResult)
async def move_cards(req: InventoryMoveRequest, db: Session = Depends(get_db), user=Depends(require_owner)):
    """Allocate AVAILABLE stock to another branch"""
    return inventory_service.move_available_cards(
        db, req.from_branch_id, req.to_branch_id,
        uid=req.uid, batch_id=req.batch_id, tenant_id=tenant_filter(user), performed_by=user.id,
    )


@router.post("/batch-status")
async def set_batch_status(
    req: InventoryBatchStatusRequest,
    db: Session = Depends(get_db),
    user=Depends(require_owner),
):
    return inventory_service.set_batch_status(
        db, req.branch_id, req.batch_id, req.status, tenant_id=tenant_filter(user), performed_by=user.id,
    )
