"""Role based tenant/branch visibility for staff users"""
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.orm import Session

from gymdesk.models.branch import Branch, UserBranch
from gymdesk.models.user import User


@dataclass
class Scope:
    """
    Query scope. `tenant_id=None` means every tenant; `branch_ids=None` means
    every branch of the tenant, while an empty set matches nothing.
    """

    tenant_id: Optional[int] = None
    branch_ids: Optional[set[int]] = None
    available_branches: list[Branch] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.branch_ids is not None and not self.branch_ids


def granted_branch_ids(db: Session, user_id: int) -> set[int]:
    rows = db.query(UserBranch.branch_id).filter(UserBranch.user_id == user_id).all()
    return {branch_id for (branch_id,) in rows}


def _active_branches(db: Session, tenant_id: int) -> list[Branch]:
    return (
        db.query(Branch)
        .filter(Branch.tenant_id == tenant_id, Branch.is_active == True)
        .order_by(Branch.name)
        .all()
    )


def resolve_branch_scope(
    db: Session,
    user: User,
    tenant_id: Optional[int] = None,
    branch_id: Optional[int] = None,
) -> Scope:
    """Scope visible to `user`, narrowed by the optional tenant/branch filters"""
    if user.role == "SUPER_ADMIN":
        scope = Scope(tenant_id=tenant_id)
        if tenant_id is not None:
            scope.available_branches = _active_branches(db, tenant_id)
        if branch_id is not None:
            scope.branch_ids = {branch_id}
        return scope

    if user.role == "OWNER":
        scope = Scope(tenant_id=user.tenant_id, available_branches=_active_branches(db, user.tenant_id))
        if branch_id is not None:
            scope.branch_ids = {branch_id}
        return scope

    granted = granted_branch_ids(db, user.id)
    branches = []
    if granted:
        branches = (
            db.query(Branch)
            .filter(Branch.id.in_(granted), Branch.tenant_id == user.tenant_id)
            .order_by(Branch.name)
            .all()
        )
    scope = Scope(tenant_id=user.tenant_id, available_branches=branches)

    if user.role == "MANAGER":
        if branch_id is None:
            scope.branch_ids = set(granted)
        elif branch_id in granted:
            scope.branch_ids = {branch_id}
        else:
            scope.branch_ids = set()
        return scope

    # STAFF: a branch outside the grant falls back to every granted branch
    if branch_id is not None and branch_id in granted:
        scope.branch_ids = {branch_id}
    else:
        scope.branch_ids = set(granted)
    return scope


def can_access_branch(db: Session, user: User, branch_id: int) -> bool:
    """Whether `user` may act on a single branch"""
    if user.role == "SUPER_ADMIN":
        return True
    branch = db.query(Branch).filter(Branch.id == branch_id).first()
    if branch is None or branch.tenant_id != user.tenant_id:
        return False
    if user.role == "OWNER":
        return True
    return branch_id in granted_branch_ids(db, user.id)
