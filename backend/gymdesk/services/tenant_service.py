"""Tenant, branch and staff account setup"""
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from gymdesk.core.exceptions import Conflict, GymDeskError, NotFound
from gymdesk.models.branch import Branch, UserBranch
from gymdesk.models.tenant import Tenant
from gymdesk.models.user import User
from gymdesk.services.auth_service import create_staff_user
from gymdesk.core.logging import get_logger

logger = get_logger(__name__)

# roles an owner may hand out inside its own tenant
OWNER_GRANTABLE_ROLES = ("MANAGER", "STAFF")
DEFAULT_ACCESS_LEVEL = {
    "OWNER": "FULL_ACCESS",
    "MANAGER": "MANAGER_ACCESS",
    "STAFF": "STAFF_ACCESS",
}


def create_tenant(
    db: Session,
    name: str,
    slug: str,
    email: Optional[str] = None,
    category: str = "GYM",
) -> Tenant:
    slug = slug.strip().lower()
    if db.query(Tenant).filter(Tenant.slug == slug).first():
        raise Conflict(f"Tenant slug {slug} is already taken")

    tenant = Tenant(name=name, slug=slug, email=email, category=category, is_active=True)
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    logger.info(f"Tenant created: slug={slug}", extra={"tenant_id": tenant.id})
    return tenant


def get_tenant(db: Session, tenant_id: int) -> Tenant:
    tenant = db.query(Tenant).filter(Tenant.id == tenant_id).first()
    if not tenant:
        raise NotFound(f"Tenant {tenant_id} not found")
    return tenant


def list_branches(db: Session, tenant_id: Optional[int] = None) -> list[Branch]:
    """Every branch, or a single tenant's when `tenant_id` is given"""
    q = db.query(Branch)
    if tenant_id is not None:
        q = q.filter(Branch.tenant_id == tenant_id)
    return q.order_by(Branch.tenant_id, Branch.name).all()


def create_branch(db: Session, tenant_id: int, name: str, address: Optional[str] = None) -> Branch:
    get_tenant(db, tenant_id)
    if db.query(Branch).filter(Branch.tenant_id == tenant_id, Branch.name == name).first():
        raise Conflict(f"Branch {name} already exists")

    branch = Branch(tenant_id=tenant_id, name=name, address=address, is_active=True)
    db.add(branch)
    db.commit()
    db.refresh(branch)
    logger.info(f"Branch created: name={name}", extra={"tenant_id": tenant_id, "branch_id": branch.id})
    return branch


def create_staff_account(
    db: Session,
    tenant_id: int,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    role: str,
    branch_ids: Iterable[int] = (),
) -> User:
    """
    Staff account of a tenant plus its branch grants.

    Every granted branch must belong to the tenant; the first one is marked
    primary.
    """
    get_tenant(db, tenant_id)
    branch_ids = list(dict.fromkeys(branch_ids))
    if branch_ids:
        found = {
            branch_id for (branch_id,) in db.query(Branch.id).filter(
                Branch.id.in_(branch_ids), Branch.tenant_id == tenant_id,
            )
        }
        missing = [b for b in branch_ids if b not in found]
        if missing:
            raise GymDeskError(f"Branches not in tenant {tenant_id}: {missing}")

    user = create_staff_user(db, email, password, first_name, last_name, role=role, tenant_id=tenant_id)
    for i, branch_id in enumerate(branch_ids):
        db.add(UserBranch(
            user_id=user.id,
            branch_id=branch_id,
            access_level=DEFAULT_ACCESS_LEVEL.get(role, "STAFF_ACCESS"),
            is_primary=i == 0,
        ))
    db.commit()
    return user


def list_staff(db: Session, tenant_id: Optional[int] = None) -> list[User]:
    q = db.query(User).filter(User.role != "GYM_MEMBER", User.role != "SUPER_ADMIN", User.deleted_at.is_(None))
    if tenant_id is not None:
        q = q.filter(User.tenant_id == tenant_id)
    return q.order_by(User.id).all()
