"""Admin: kiosk terminal registration"""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gymdesk.core.database import get_db
from gymdesk.models.branch import Branch
from gymdesk.models.terminal import Terminal
from gymdesk.routers.deps import require_roles, tenant_filter
from gymdesk.schemas.access import TerminalCreateRequest, TerminalCreated, TerminalOut
from gymdesk.services import terminal_service

router = APIRouter(prefix="/api/admin/terminals", tags=["admin-terminals"])

require_owner = require_roles("SUPER_ADMIN", "OWNER")


@router.get("", response_model=list[TerminalOut])
async def list_terminals(
    branch_id: Optional[int] = None,
    db: Session = Depends(get_db),
    user=Depends(require_owner),
):
    q = db.query(Terminal).join(Branch, Terminal.branch_id == Branch.id)
    tenant_id = tenant_filter(user)
    if tenant_id is not None:
        q = q.filter(Branch.tenant_id == tenant_id)
    if branch_id is not None:
        q = q.filter(Terminal.branch_id == branch_id)
    return [TerminalOut.model_validate(t) for t in q.order_by(Terminal.id).all()]


@router.post("", response_model=TerminalCreated, status_code=201)
async def create_terminal(req: TerminalCreateRequest, db: Session = Depends(get_db), user=Depends(require_owner)):
    """Register a terminal. The secret is only ever shown in this response."""
    terminal, secret = terminal_service.create_terminal(db, req.branch_id, req.name, tenant_id=tenant_filter(user))
    return TerminalCreated(
        id=terminal.id,
        branch_id=terminal.branch_id,
        name=terminal.name,
        is_active=terminal.is_active,
        last_seen_at=terminal.last_seen_at,
        secret=secret,
    )
