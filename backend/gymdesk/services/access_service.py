"""Kiosk access decision for a card tap"""
import base64
import binascii
import re
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from gymdesk.core.exceptions import CardAssignmentError
from gymdesk.models.card import Card, InventoryCard
from gymdesk.models.terminal import Terminal
from gymdesk.models.user import User
from gymdesk.services.access_events import log_event
from gymdesk.services.card_assignment_service import (
    assign_card,
    check_inventory_availability,
    get_pending_assignment,
)
from gymdesk.services.member_state import MemberState, resolve_member_state, subscription_history
from gymdesk.core.timeutil import isoformat
from gymdesk.core.logging import get_logger

logger = get_logger(__name__)

ALLOW = "ALLOW"
ASSIGNED = "ASSIGNED"
DENY_GYM_MISMATCH = "DENY_GYM_MISMATCH"
DENY_EXPIRED = "DENY_EXPIRED"
DENY_DISABLED = "DENY_DISABLED"
DENY_UNKNOWN = "DENY_UNKNOWN"
DUPLICATE_TAP = "DUPLICATE_TAP"

_DIGITS = re.compile(r"^\d{1,49}$")


def decode_card_uid(raw: str) -> str:
    """Readers send either the plain UID or base64 of its decimal digits"""
    try:
        decoded = base64.b64decode(raw, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return raw
    if _DIGITS.match(decoded):
        return decoded
    return raw


def _name(member: Optional[User]) -> Optional[str]:
    return member.full_name if member else None


def _result(result: str, member: Optional[User] = None, expires_at: Optional[datetime] = None) -> dict:
    return {"result": result, "member_name": _name(member), "expires_at": isoformat(expires_at)}


def _check_member_card(db: Session, terminal: Terminal, card: Card, member: User, now: datetime) -> dict:
    """Active card of this branch with an owner: the owner's member state decides"""
    history = subscription_history(db, member.id)
    current = history[0] if history else None
    state = resolve_member_state(member, history, now)

    if state == MemberState.ACTIVE:
        log_event(db, terminal.branch_id, "ACCESS_ALLOW", terminal_id=terminal.id, card_uid=card.uid,
                  member_id=member.id)
        return _result(ALLOW, member, current.end_date)

    log_event(
        db, terminal.branch_id, "ACCESS_DENY_EXPIRED",
        terminal_id=terminal.id,
        card_uid=card.uid,
        member_id=card.member_id,
        details={"member_state": state.value},
    )
    return _result(DENY_EXPIRED, member, current.end_date if current else None)


def check_access(db: Session, terminal: Terminal, card_uid: str, now: datetime) -> dict:
    """
    Decide a tap at `terminal`. Known cards are judged by their owner's member
    state; an unknown card is bound to the branch's pending assignment if one
    is armed and the card is free stock of this branch.
    """
    branch_id = terminal.branch_id

    card = db.query(Card).filter(Card.uid == card_uid).first()
    if card is not None:
        owner = db.query(User).filter(User.id == card.member_id).first() if card.member_id else None

        if card.branch_id != branch_id:
            log_event(
                db, branch_id, "ACCESS_DENY_GYM_MISMATCH",
                terminal_id=terminal.id,
                card_uid=card_uid,
                member_id=card.member_id,
                details={"card_branch_id": card.branch_id, "terminal_branch_id": branch_id},
            )
            return _result(DENY_GYM_MISMATCH, owner)

        if not card.active:
            log_event(db, branch_id, "ACCESS_DENY_DISABLED", terminal_id=terminal.id, card_uid=card_uid,
                      member_id=card.member_id)
            return _result(DENY_DISABLED, owner)

        if owner is not None:
            return _check_member_card(db, terminal, card, owner, now)

    pending = get_pending_assignment(db, branch_id)
    if pending is None:
        log_event(db, branch_id, "ACCESS_DENY_UNKNOWN", terminal_id=terminal.id, card_uid=card_uid)
        return _result(DENY_UNKNOWN)

    if now > pending.expires_at:
        member_id = pending.member_id
        db.delete(pending)
        log_event(db, branch_id, "PENDING_ASSIGNMENT_EXPIRED", terminal_id=terminal.id, card_uid=card_uid,
                  member_id=member_id)
        return _result(DENY_UNKNOWN)

    if not check_inventory_availability(db, branch_id, card_uid):
        inventory = db.query(InventoryCard).filter(InventoryCard.uid == card_uid).first()
        log_event(
            db, branch_id, "INVENTORY_MISMATCH",
            terminal_id=terminal.id,
            card_uid=card_uid,
            member_id=pending.member_id,
            details={
                "inventory_status": inventory.status if inventory else None,
                "allocated_branch_id": inventory.allocated_branch_id if inventory else None,
            },
        )
        return _result(DENY_UNKNOWN)

    member = db.query(User).filter(User.id == pending.member_id).first()
    purpose = pending.purpose
    try:
        assignment = assign_card(db, branch_id, pending.member_id, card_uid, purpose, pending.old_card_uid)
    except CardAssignmentError as e:
        log_event(db, branch_id, "CARD_ASSIGNMENT_FAILED", terminal_id=terminal.id, card_uid=card_uid,
                  member_id=member.id if member else None, details={"error": e.message})
        return _result(DENY_UNKNOWN)

    log_event(
        db, branch_id, "CARD_REPLACED" if purpose == "REPLACE" else "CARD_ASSIGNED",
        terminal_id=terminal.id,
        card_uid=card_uid,
        member_id=assignment["member_id"],
        details={"old_card_uid": assignment["old_card_uid"]} if purpose == "REPLACE" else None,
    )

    history = subscription_history(db, member.id) if member else []
    return _result(ASSIGNED, member, history[0].end_date if history else None)
