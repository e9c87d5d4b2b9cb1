from fastapi import APIRouter, Depends
from gymdesk.core.database import check_db_connection
from gymdesk.core.redis import check_redis_connection, get_redis, scheduler_heartbeat_age

router = APIRouter()


@router.get("/health")
@router.get("/api/health")
async def health_check(r=Depends(get_redis)):
    """DB, Redis and scheduler liveness"""
    db_ok = check_db_connection()
    redis_ok = await check_redis_connection(r)

    heartbeat_age = await scheduler_heartbeat_age(r) if redis_ok else None

    return {
        "status": "ok" if (db_ok and redis_ok) else "degraded",
        "db": "connected" if db_ok else "disconnected",
        "redis": "connected" if redis_ok else "disconnected",
        "scheduler": "alive" if heartbeat_age is not None else "unknown",
    }
