import secrets
import redis.asyncio as aioredis
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from gymdesk.core.redis import get_redis

CSRF_PREFIX = "csrf:"
CSRF_TTL = 3600 * 2  # 2 hours

# Paths authenticated some other way (or not at all)
CSRF_EXEMPT_PATHS = {
    "/api/auth/login",
    "/api/access/check",
}

CSRF_METHODS = {"POST", "PUT", "DELETE", "PATCH"}


async def generate_csrf_token(r: aioredis.Redis, session_id: str) -> str:
    """Issue a CSRF token bound to the session"""
    token = secrets.token_hex(32)
    await r.set(f"{CSRF_PREFIX}{session_id}", token, ex=CSRF_TTL)
    return token


async def validate_csrf_token(r: aioredis.Redis, session_id: str, token: str) -> bool:
    if not session_id or not token:
        return False
    stored = await r.get(f"{CSRF_PREFIX}{session_id}")
    return stored is not None and secrets.compare_digest(stored, token)


class CSRFMiddleware(BaseHTTPMiddleware):
    """CSRF protection for cookie-authenticated requests"""

    async def dispatch(self, request: Request, call_next):
        if request.method not in CSRF_METHODS:
            return await call_next(request)

        if request.url.path in CSRF_EXEMPT_PATHS:
            return await call_next(request)

        session_id = request.cookies.get("session_id")
        if not session_id:
            return JSONResponse(status_code=403, content={"detail": "Invalid CSRF token"})

        # dependency overrides apply to the middleware as well
        redis_factory = request.app.dependency_overrides.get(get_redis, get_redis)
        r = await redis_factory()
        csrf_token = request.headers.get("X-CSRF-Token", "")
        if not await validate_csrf_token(r, session_id, csrf_token):
            return JSONResponse(status_code=403, content={"detail": "Invalid CSRF token"})

        return await call_next(request)
