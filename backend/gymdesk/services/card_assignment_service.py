"""Pending card assignments and binding cards to members"""
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from gymdesk.core.config import settings
from gymdesk.core.exceptions import CardAssignmentError, GymDeskError, MemberNotFound, NotFound
from gymdesk.models.branch import Branch
from gymdesk.models.card import Card, InventoryCard, PendingMemberAssignment
from gymdesk.models.user import User
from gymdesk.services.access_events import log_event
from gymdesk.core.logging import get_logger

logger = get_logger(__name__)

PURPOSES = ("ONBOARD", "REPLACE")


def get_pending_assignment(db: Session, branch_id: int) -> Optional[PendingMemberAssignment]:
    return db.query(PendingMemberAssignment).filter(PendingMemberAssignment.branch_id == branch_id).first()


def create_pending_assignment(
    db: Session,
    branch_id: int,
    member_id: int,
    now: datetime,
    purpose: str = "ONBOARD",
    old_card_uid: Optional[str] = None,
    created_by: Optional[int] = None,
    ttl_minutes: Optional[int] = None,
) -> PendingMemberAssignment:
    """
    Arm a branch kiosk: the next unknown card tapped there is bound to the member.
    Any previous pending assignment of the branch is replaced.
    """
    if purpose not in PURPOSES:
        raise GymDeskError(f"Invalid purpose: {purpose}")
    if ttl_minutes is None:
        ttl_minutes = settings.PENDING_ASSIGNMENT_TTL_MINUTES

    branch = db.query(Branch).filter(Branch.id == branch_id).first()
    if not branch:
        raise NotFound(f"Branch {branch_id} not found")

    member = db.query(User).filter(
        User.id == member_id,
        User.role == "GYM_MEMBER",
        User.tenant_id == branch.tenant_id,
        User.deleted_at.is_(None),
    ).first()
    if not member:
        raise MemberNotFound(member_id)

    if purpose == "REPLACE":
        if not old_card_uid:
            raise GymDeskError("old_card_uid is required to replace a card")
        old_card = db.query(Card).filter(Card.uid == old_card_uid).first()
        if not old_card or old_card.member_id != member_id or old_card.branch_id != branch_id or not old_card.active:
            raise GymDeskError("Invalid old card for replacement")
    else:
        old_card_uid = None

    existing = get_pending_assignment(db, branch_id)
    replaced_member_id = existing.member_id if existing else None
    if existing:
        db.delete(existing)
        db.flush()

    pending = PendingMemberAssignment(
        branch_id=branch_id,
        member_id=member_id,
        purpose=purpose,
        old_card_uid=old_card_uid,
        expires_at=now + timedelta(minutes=ttl_minutes),
        created_by=created_by,
    )
    db.add(pending)
    log_event(
        db, branch_id, "PENDING_ASSIGNMENT_CREATED",
        member_id=member_id,
        actor_user_id=created_by,
        details={"purpose": purpose, "old_card_uid": old_card_uid, "replaced_member_id": replaced_member_id},
        commit=False,
    )
    db.commit()
    db.refresh(pending)
    return pending


def cancel_pending_assignment(db: Session, branch_id: int, performed_by: Optional[int] = None) -> None:
    pending = get_pending_assignment(db, branch_id)
    if not pending:
        raise NotFound(f"No pending assignment for branch {branch_id}")
    log_event(
        db, branch_id, "PENDING_ASSIGNMENT_CANCELLED",
        member_id=pending.member_id,
        actor_user_id=performed_by,
        commit=False,
    )
    db.delete(pending)
    db.commit()


def delete_expired_assignments(db: Session, now: datetime) -> int:
    """Remove pending assignments whose expires_at has passed"""
    expired = db.query(PendingMemberAssignment).filter(PendingMemberAssignment.expires_at < now).all()
    for pending in expired:
        db.delete(pending)
    db.commit()
    return len(expired)


def check_inventory_availability(db: Session, branch_id: int, card_uid: str) -> bool:
    """The card is unused stock allocated to this branch. DAILY cards are walk-in only."""
    operational = db.query(Card).filter(Card.uid == card_uid).first()
    if operational is not None and operational.card_type == "DAILY":
        return False
    inventory = db.query(InventoryCard).filter(InventoryCard.uid == card_uid).first()
    return inventory is not None and inventory.status == "AVAILABLE" and inventory.allocated_branch_id == branch_id


def assign_card(
    db: Session,
    branch_id: int,
    member_id: int,
    card_uid: str,
    purpose: str,
    old_card_uid: Optional[str] = None,
) -> dict:
    """
    Bind an inventory card to a member in one transaction. For REPLACE the old
    card is switched off and its stock row disabled.
    """
    try:
        inventory = db.query(InventoryCard).filter(InventoryCard.uid == card_uid).first()
        if not inventory or inventory.status != "AVAILABLE" or inventory.allocated_branch_id != branch_id:
            raise CardAssignmentError("Card not available for assignment")

        pending = get_pending_assignment(db, branch_id)
        if pending:
            db.delete(pending)

        replaced_uid = None
        if purpose == "REPLACE":
            if not old_card_uid:
                raise CardAssignmentError("Old card UID required for REPLACE purpose")
            old_card = db.query(Card).filter(Card.uid == old_card_uid).first()
            if not old_card or old_card.member_id != member_id or old_card.branch_id != branch_id or not old_card.active:
                raise CardAssignmentError("Invalid old card for replacement")
            old_card.active = False
            old_inventory = db.query(InventoryCard).filter(InventoryCard.uid == old_card_uid).first()
            if old_inventory:
                old_inventory.status = "DISABLED"
            replaced_uid = old_card_uid

        card = db.query(Card).filter(Card.uid == card_uid).first()
        if card is None:
            card = Card(uid=card_uid)
            db.add(card)
        card.branch_id = branch_id
        card.member_id = member_id
        card.card_type = "MONTHLY"
        card.active = True
        inventory.status = "ASSIGNED"
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Card assigned: card_uid={card_uid}, member_id={member_id}, purpose={purpose}")
    return {"card_uid": card_uid, "member_id": member_id, "old_card_uid": replaced_uid}
