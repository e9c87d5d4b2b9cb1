"""Member audit trail"""
from typing import Optional

from sqlalchemy.orm import Session

from gymdesk.models.member_audit_log import MemberAuditLog


def write_audit_log(
    db: Session,
    member_id: int,
    action: str,
    previous_state: Optional[str] = None,
    new_state: Optional[str] = None,
    performed_by: Optional[int] = None,
    reason: Optional[str] = None,
    notes: Optional[str] = None,
    details: Optional[dict] = None,
) -> MemberAuditLog:
    """Add an audit row to the session; the caller commits"""
    log = MemberAuditLog(
        member_id=member_id,
        action=action,
        previous_state=previous_state,
        new_state=new_state,
        performed_by=performed_by,
        reason=reason,
        notes=notes,
        details=details,
    )
    db.add(log)
    return log


def get_audit_trail(db: Session, member_id: int, limit: int = 50) -> list[MemberAuditLog]:
    return (
        db.query(MemberAuditLog)
        .filter(MemberAuditLog.member_id == member_id)
        .order_by(MemberAuditLog.created_at.desc(), MemberAuditLog.id.desc())
        .limit(limit)
        .all()
    )
