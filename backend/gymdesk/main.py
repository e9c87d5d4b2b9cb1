from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from gymdesk.core.config import settings
from gymdesk.core.redis import close_redis
from gymdesk.core.exceptions import GymDeskError
from gymdesk.core.logging import setup_logging, get_logger
from gymdesk.core.csrf import CSRFMiddleware
from gymdesk.core.security_headers import SecurityHeadersMiddleware
from gymdesk.core.rate_limit import limiter, rate_limit_exceeded_handler
from gymdesk.routers import (
    health, auth, expiring, members, tenants, plans, access, admin_terminals, admin_inventory, admin_setup,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(debug=settings.DEBUG, service="api")
    logger.info("Application starting")
    yield
    await close_redis()
    logger.info("Application stopped")


app = FastAPI(
    title=settings.SITE_NAME,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


def _format_error(err: dict) -> str:
    t = err.get("type", "")
    ctx = err.get("ctx", {})
    loc = err.get("loc", [])
    field = str(loc[-1]) if loc else ""

    if t == "missing":
        return f"{field} is required"
    if t == "string_too_short":
        return f"{field} must be at least {ctx.get('min_length', '')} characters"
    if t == "string_too_long":
        return f"{field} must be at most {ctx.get('max_length', '')} characters"
    if t in ("int_parsing", "int_type"):
        return f"{field} must be an integer"
    if t == "greater_than_equal":
        return f"{field} must be >= {ctx.get('ge', '')}"
    if t == "less_than_equal":
        return f"{field} must be <= {ctx.get('le', '')}"
    if "email" in t or "email" in err.get("msg", "").lower():
        return f"{field} must be a valid email address"
    if t == "literal_error":
        return f"{field} must be one of {ctx.get('expected', '')}"
    return f"{field}: invalid value"


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = [_format_error(e) for e in exc.errors()]
    return JSONResponse(status_code=422, content={"detail": "; ".join(messages)})


@app.exception_handler(GymDeskError)
async def domain_error_handler(request: Request, exc: GymDeskError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Middleware: the last one added runs first
app.add_middleware(SecurityHeadersMiddleware, hsts=not settings.DEBUG)

app.add_middleware(CSRFMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-CSRF-Token"],
)

app.include_router(health.router)
app.include_router(auth.router)
# expiring routes before /api/members/{member_id}
app.include_router(expiring.router)
app.include_router(members.router)
app.include_router(tenants.router)
app.include_router(plans.router)
app.include_router(access.router)
app.include_router(admin_terminals.router)
app.include_router(admin_inventory.router)
app.include_router(admin_setup.router)
