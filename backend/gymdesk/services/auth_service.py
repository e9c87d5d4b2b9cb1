"""Staff authentication"""
from typing import Optional

import bcrypt
from sqlalchemy.orm import Session

from gymdesk.core.exceptions import DuplicateMember, GymDeskError
from gymdesk.models.user import User, STAFF_ROLES
from gymdesk.core.logging import get_logger

logger = get_logger(__name__)


def hash_password(password: str) -> str:
    """bcrypt hash"""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Staff account by login email (members never log in)"""
    return db.query(User).filter(
        User.email == email.lower(),
        User.role.in_(STAFF_ROLES),
        User.deleted_at.is_(None),
    ).first()


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        logger.info(f"Login failed: email={email}")
        return None
    return user


def create_staff_user(
    db: Session,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    role: str,
    tenant_id: Optional[int] = None,
) -> User:
    """Create a login-capable staff account"""
    if role not in STAFF_ROLES:
        raise GymDeskError(f"Not a staff role: {role}")
    if db.query(User).filter(User.email == email.lower()).first():
        raise DuplicateMember(f"User {email} already exists")

    user = User(
        tenant_id=tenant_id,
        email=email.lower(),
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        role=role,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Staff user created: user_id={user.id}, role={role}", extra={"tenant_id": tenant_id})
    return user
