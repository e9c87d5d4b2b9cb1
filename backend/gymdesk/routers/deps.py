"""Shared dependencies: authentication and role checks"""
from typing import Optional
from fastapi import Request, HTTPException, Depends
from sqlalchemy.orm import Session

from gymdesk.core.database import get_db
from gymdesk.core.redis import get_redis
from gymdesk.core.session import get_session
from gymdesk.models.user import User, STAFF_ROLES


async def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    r=Depends(get_redis),
) -> Optional[User]:
    """Cookie -> Redis -> DB. None when not logged in."""
    session_id = request.cookies.get("session_id")
    if not session_id:
        return None

    session_data = await get_session(r, session_id)
    if not session_data:
        return None

    user_id = int(session_data.get("user_id", 0))
    if not user_id:
        return None

    user = db.query(User).filter(
        User.id == user_id,
        User.is_active == True,
        User.deleted_at.is_(None),
    ).first()
    return user


async def require_login(
    user: Optional[User] = Depends(get_current_user),
) -> User:
    if user is None:
        raise HTTPException(status_code=401, detail="Login required")
    return user


async def require_staff(
    user: User = Depends(require_login),
) -> User:
    """Any staff role"""
    if user.role not in STAFF_ROLES:
        raise HTTPException(status_code=403, detail="Staff access required")
    return user


def require_roles(*roles: str):
    """Dependency factory restricting an endpoint to the given roles"""

    async def checker(user: User = Depends(require_login)) -> User:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return checker


def tenant_filter(user: User) -> Optional[int]:
    """Tenant a staff user is confined to; None for super admins"""
    if user.role == "SUPER_ADMIN":
        return None
    return user.tenant_id


def resolve_tenant_id(user: User, requested: Optional[int] = None) -> int:
    """Tenant a write lands in: the user's own, or the requested one for super admins"""
    tenant_id = tenant_filter(user)
    if tenant_id is None:
        tenant_id = requested
    if tenant_id is None:
        raise HTTPException(status_code=400, detail="tenant_id is required")
    return tenant_id
