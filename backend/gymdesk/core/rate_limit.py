"""Rate limiting (slowapi)"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from starlette.requests import Request
from starlette.responses import JSONResponse


def get_client_ip(request: Request) -> str:
    """
    Client IP address.
    Behind a proxy the first X-Forwarded-For entry wins.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


def get_terminal_key(request: Request) -> str:
    """Kiosk requests are limited per terminal, not per IP"""
    terminal_id = request.headers.get("X-Terminal-Id")
    if terminal_id:
        return f"terminal:{terminal_id}"
    return get_client_ip(request)


limiter = Limiter(
    key_func=get_client_ip,
    default_limits=["100/minute"],
    storage_uri="memory://",
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content={
            "detail": "Too many requests. Please wait a moment and try again.",
            "retry_after": exc.detail,
        },
    )


LOGIN_RATE_LIMIT = "5/minute"
ACCESS_CHECK_RATE_LIMIT = "60/minute"
GENERAL_RATE_LIMIT = "100/minute"
