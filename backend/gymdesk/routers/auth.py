"""Staff login, logout and session info"""
from fastapi import APIRouter, Depends, HTTPException, Response, Request
from sqlalchemy.orm import Session

from gymdesk.core.database import get_db
from gymdesk.core.redis import get_redis
from gymdesk.core.session import create_session, destroy_session, invalidate_user_sessions
from gymdesk.core.csrf import generate_csrf_token
from gymdesk.core.config import settings
from gymdesk.core.rate_limit import limiter, LOGIN_RATE_LIMIT
from gymdesk.schemas.auth import LoginRequest, AuthResponse, UserInfo
from gymdesk.services import auth_service
from gymdesk.routers.deps import require_login

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=AuthResponse)
@limiter.limit(LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    req: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    r=Depends(get_redis),
):
    user = auth_service.authenticate(db, req.email, req.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not user.is_active:
        raise HTTPException(status_code=403, detail="This account is disabled")

    # fresh session id on every login
    session_id = await create_session(r, user.id, user.role, user.tenant_id, user.email)
    csrf_token = await generate_csrf_token(r, session_id)

    response.set_cookie(
        key="session_id",
        value=session_id,
        httponly=True,
        secure=not settings.DEBUG,
        samesite="lax",
        max_age=settings.SESSION_TIMEOUT_MINUTES * 60,
    )
    response.headers["X-CSRF-Token"] = csrf_token

    return AuthResponse(message="Logged in", csrf_token=csrf_token)


@router.post("/logout")
async def logout(request: Request, response: Response, r=Depends(get_redis)):
    session_id = request.cookies.get("session_id")
    if session_id:
        await destroy_session(r, session_id)
    response.delete_cookie("session_id")
    return {"message": "Logged out"}


@router.post("/logout-all")
async def logout_all(request: Request, user=Depends(require_login), r=Depends(get_redis)):
    """End every other session of the current user"""
    removed = await invalidate_user_sessions(r, user.id, exclude_session_id=request.cookies.get("session_id"))
    return {"message": "Other sessions ended", "sessions_removed": removed}


@router.get("/me", response_model=UserInfo)
async def get_me(user=Depends(require_login)):
    return UserInfo.model_validate(user)
