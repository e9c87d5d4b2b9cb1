"""Kiosk endpoints (terminal auth) and staff card assignment controls"""
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from sqlalchemy.orm import Session

from gymdesk.core.database import get_db
from gymdesk.core.exceptions import TerminalAuthError
from gymdesk.core.redis import get_redis
from gymdesk.core.rate_limit import limiter, ACCESS_CHECK_RATE_LIMIT, get_terminal_key
from gymdesk.core.timeutil import utcnow
from gymdesk.models.terminal import Terminal
from gymdesk.routers.deps import require_staff
from gymdesk.schemas.access import (
    AccessCheckRequest,
    AccessCheckResponse,
    AccessEventOut,
    PendingAssignmentOut,
    PendingAssignmentRequest,
)
from gymdesk.services import access_service, card_assignment_service, terminal_service
from gymdesk.services.access_events import recent_events
from gymdesk.services.branch_scope import can_access_branch
from gymdesk.services.tap_cooldown import is_duplicate_and_record_tap
from gymdesk.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/access", tags=["access"])


async def get_terminal(
    x_terminal_id: Optional[str] = Header(None),
    x_terminal_secret: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> Terminal:
    """Kiosk authentication via X-Terminal-Id / X-Terminal-Secret (base64)"""
    if not x_terminal_id or not x_terminal_secret or not x_terminal_id.isdigit():
        raise TerminalAuthError("Terminal credentials required")
    return terminal_service.validate_terminal(db, int(x_terminal_id), x_terminal_secret, utcnow())


def _ensure_branch(db: Session, user, branch_id: int) -> None:
    if not can_access_branch(db, user, branch_id):
        raise HTTPException(status_code=403, detail="No access to this branch")


@router.post("/check", response_model=AccessCheckResponse)
@limiter.limit(ACCESS_CHECK_RATE_LIMIT, key_func=get_terminal_key)
async def check(
    request: Request,
    req: AccessCheckRequest,
    terminal: Terminal = Depends(get_terminal),
    db: Session = Depends(get_db),
    r=Depends(get_redis),
):
    card_uid = access_service.decode_card_uid(req.card_uid)

    if await is_duplicate_and_record_tap(r, terminal.id, card_uid):
        logger.debug(f"Duplicate tap ignored: terminal_id={terminal.id}, card_uid={card_uid}")
        return AccessCheckResponse(result=access_service.DUPLICATE_TAP)

    return AccessCheckResponse(**access_service.check_access(db, terminal, card_uid, utcnow()))


@router.get("/ping")
async def ping(terminal: Terminal = Depends(get_terminal), db: Session = Depends(get_db)):
    return terminal_service.ping(db, terminal)


@router.get("/pending-assignments/{branch_id}", response_model=PendingAssignmentOut)
async def get_pending(branch_id: int, db: Session = Depends(get_db), user=Depends(require_staff)):
    _ensure_branch(db, user, branch_id)
    pending = card_assignment_service.get_pending_assignment(db, branch_id)
    if not pending:
        raise HTTPException(status_code=404, detail="No pending assignment")
    return PendingAssignmentOut.model_validate(pending)


@router.post("/pending-assignments", response_model=PendingAssignmentOut, status_code=201)
async def create_pending(req: PendingAssignmentRequest, db: Session = Depends(get_db), user=Depends(require_staff)):
    """Arm the branch kiosk to bind the next unknown card to a member"""
    _ensure_branch(db, user, req.branch_id)
    pending = card_assignment_service.create_pending_assignment(
        db,
        branch_id=req.branch_id,
        member_id=req.member_id,
        now=utcnow(),
        purpose=req.purpose,
        old_card_uid=req.old_card_uid,
        created_by=user.id,
    )
    return PendingAssignmentOut.model_validate(pending)


@router.delete("/pending-assignments/{branch_id}")
async def cancel_pending(branch_id: int, db: Session = Depends(get_db), user=Depends(require_staff)):
    _ensure_branch(db, user, branch_id)
    card_assignment_service.cancel_pending_assignment(db, branch_id, performed_by=user.id)
    return {"message": "Pending assignment cancelled"}


@router.get("/events/{branch_id}", response_model=list[AccessEventOut])
async def branch_events(
    branch_id: int,
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    user=Depends(require_staff),
):
    """Latest kiosk and card events of a branch, newest first"""
    _ensure_branch(db, user, branch_id)
    return [AccessEventOut.model_validate(e) for e in recent_events(db, branch_id, limit=limit)]
