"""Kiosk terminal registration and authentication"""
import base64
import binascii
import secrets
from datetime import datetime
from typing import Optional

import bcrypt
from sqlalchemy.orm import Session

from gymdesk.core.exceptions import NotFound, TerminalAuthError
from gymdesk.models.branch import Branch
from gymdesk.models.terminal import Terminal
from gymdesk.core.logging import get_logger

logger = get_logger(__name__)


def _decode_secret(encoded_secret: str) -> str:
    try:
        return base64.b64decode(encoded_secret, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        raise TerminalAuthError("Invalid terminal credentials")


def validate_terminal(db: Session, terminal_id: int, encoded_secret: str, now: datetime) -> Terminal:
    """
    Check a terminal's base64 encoded secret against its bcrypt hash.
    Touches last_seen_at on success.
    """
    terminal = db.query(Terminal).filter(Terminal.id == terminal_id, Terminal.is_active == True).first()
    if not terminal:
        raise TerminalAuthError("Terminal not found or inactive")

    secret = _decode_secret(encoded_secret)
    if not bcrypt.checkpw(secret.encode("utf-8"), terminal.secret_hash.encode("utf-8")):
        logger.warning(f"Terminal secret mismatch: terminal_id={terminal_id}")
        raise TerminalAuthError("Invalid terminal credentials")

    terminal.last_seen_at = now
    db.commit()
    return terminal


def ping(db: Session, terminal: Terminal) -> dict:
    branch = db.query(Branch).filter(Branch.id == terminal.branch_id).first()
    return {
        "ok": True,
        "terminal_id": terminal.id,
        "terminal_name": terminal.name,
        "branch_id": terminal.branch_id,
        "branch_name": branch.name if branch else None,
    }


def create_terminal(db: Session, branch_id: int, name: str, tenant_id: Optional[int] = None) -> tuple[Terminal, str]:
    """Register a terminal. The plain secret is returned once and only its hash is stored."""
    query = db.query(Branch).filter(Branch.id == branch_id)
    if tenant_id is not None:
        query = query.filter(Branch.tenant_id == tenant_id)
    if not query.first():
        raise NotFound(f"Branch {branch_id} not found")

    secret = secrets.token_urlsafe(24)
    terminal = Terminal(
        branch_id=branch_id,
        name=name,
        secret_hash=bcrypt.hashpw(secret.encode("utf-8"), bcrypt.gensalt()).decode("utf-8"),
        is_active=True,
    )
    db.add(terminal)
    db.commit()
    db.refresh(terminal)
    logger.info(f"Terminal created: terminal_id={terminal.id}, branch_id={branch_id}")
    return terminal, secret
