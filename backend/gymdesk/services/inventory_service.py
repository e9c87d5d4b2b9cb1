"""Card stock: registering blank cards and moving them between branches"""
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from gymdesk.core.exceptions import GymDeskError, NotFound
from gymdesk.models.branch import Branch
from gymdesk.models.card import InventoryCard
from gymdesk.services.access_events import log_event
from gymdesk.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_LIST_LIMIT = 200
MAX_LIST_LIMIT = 1000


def _get_branch(db: Session, branch_id: int, tenant_id: Optional[int] = None) -> Branch:
    """Active branch, confined to `tenant_id` unless it is None"""
    q = db.query(Branch).filter(Branch.id == branch_id, Branch.is_active == True)
    if tenant_id is not None:
        q = q.filter(Branch.tenant_id == tenant_id)
    branch = q.first()
    if not branch:
        raise NotFound(f"Branch {branch_id} not found")
    return branch


def _clean(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


def list_cards(
    db: Session,
    branch_id: int,
    tenant_id: Optional[int] = None,
    status: Optional[str] = None,
    batch_id: Optional[str] = None,
    limit: int = DEFAULT_LIST_LIMIT,
) -> list[InventoryCard]:
    _get_branch(db, branch_id, tenant_id)
    limit = min(max(limit, 1), MAX_LIST_LIMIT)

    q = db.query(InventoryCard).filter(InventoryCard.allocated_branch_id == branch_id)
    if status:
        q = q.filter(InventoryCard.status == status)
    if batch_id:
        q = q.filter(InventoryCard.batch_id == batch_id)
    return q.order_by(InventoryCard.created_at.desc(), InventoryCard.uid).limit(limit).all()


def create_cards(
    db: Session,
    branch_id: int,
    uids: Iterable[str],
    batch_id: Optional[str] = None,
    tenant_id: Optional[int] = None,
    performed_by: Optional[int] = None,
) -> dict:
    """
    Register blank cards as AVAILABLE stock of a branch.

    UIDs are trimmed and de-duplicated; ones already in stock anywhere are
    skipped and reported in `skipped`.
    """
    _get_branch(db, branch_id, tenant_id)
    normalized = list(dict.fromkeys(u for u in (_clean(u) for u in uids) if u))
    if not normalized:
        raise GymDeskError("No valid card UIDs given")
    batch_id = _clean(batch_id)

    existing = {
        uid for (uid,) in db.query(InventoryCard.uid).filter(InventoryCard.uid.in_(normalized))
    }
    created = [uid for uid in normalized if uid not in existing]
    for uid in created:
        db.add(InventoryCard(uid=uid, allocated_branch_id=branch_id, batch_id=batch_id, status="AVAILABLE"))

    log_event(
        db, branch_id, "INVENTORY_CARD_BULK_CREATED",
        actor_user_id=performed_by,
        details={"batch_id": batch_id, "requested": len(normalized), "created": len(created)},
        commit=False,
    )
    db.commit()
    logger.info(f"Inventory cards created: count={len(created)}, batch_id={batch_id}", extra={"branch_id": branch_id})
    return {
        "requested": len(normalized),
        "created": len(created),
        "skipped": sorted(existing),
        "batch_id": batch_id,
    }


def move_available_cards(
    db: Session,
    from_branch_id: int,
    to_branch_id: int,
    uid: Optional[str] = None,
    batch_id: Optional[str] = None,
    tenant_id: Optional[int] = None,
    performed_by: Optional[int] = None,
) -> dict:
    """
    Reallocate AVAILABLE stock to another branch of the same tenant, by UID
    or by batch. Assigned and disabled cards stay where they are.
    """
    source = _get_branch(db, from_branch_id, tenant_id)
    target = _get_branch(db, to_branch_id, tenant_id)
    if source.tenant_id != target.tenant_id:
        raise GymDeskError("Cards can only move between branches of one tenant")

    uid, batch_id = _clean(uid), _clean(batch_id)
    if not uid and not batch_id:
        raise GymDeskError("uid or batch_id is required")

    q = db.query(InventoryCard).filter(
        InventoryCard.allocated_branch_id == from_branch_id,
        InventoryCard.status == "AVAILABLE",
    )
    if uid:
        q = q.filter(InventoryCard.uid == uid)
    if batch_id:
        q = q.filter(InventoryCard.batch_id == batch_id)
    moved = q.update({InventoryCard.allocated_branch_id: to_branch_id}, synchronize_session=False)

    log_event(
        db, from_branch_id, "INVENTORY_CARD_MOVED",
        card_uid=uid,
        actor_user_id=performed_by,
        details={"to_branch_id": to_branch_id, "batch_id": batch_id, "moved": moved},
        commit=False,
    )
    db.commit()
    logger.info(f"Inventory cards moved: count={moved}, to_branch_id={to_branch_id}", extra={"branch_id": from_branch_id})
    return {
        "moved": moved,
        "from_branch_id": from_branch_id,
        "to_branch_id": to_branch_id,
        "uid": uid,
        "batch_id": batch_id,
    }


def set_batch_status(
    db: Session,
    branch_id: int,
    batch_id: str,
    status: str,
    tenant_id: Optional[int] = None,
    performed_by: Optional[int] = None,
) -> dict:
    """Enable or disable a batch of unassigned stock"""
    if status not in ("AVAILABLE", "DISABLED"):
        raise GymDeskError(f"Batch status must be AVAILABLE or DISABLED, got {status}")
    _get_branch(db, branch_id, tenant_id)
    batch_id = _clean(batch_id)
    if not batch_id:
        raise GymDeskError("batch_id is required")

    updated = (
        db.query(InventoryCard)
        .filter(
            InventoryCard.allocated_branch_id == branch_id,
            InventoryCard.batch_id == batch_id,
            InventoryCard.status != "ASSIGNED",
        )
        .update({InventoryCard.status: status}, synchronize_session=False)
    )
    log_event(
        db, branch_id, "INVENTORY_CARD_BATCH_STATUS_UPDATED",
        actor_user_id=performed_by,
        details={"batch_id": batch_id, "status": status, "updated": updated},
        commit=False,
    )
    db.commit()
    return {"batch_id": batch_id, "status": status, "updated": updated}
