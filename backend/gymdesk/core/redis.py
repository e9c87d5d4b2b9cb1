"""Redis clients: async for the API, sync for the scheduler"""
import time
from typing import Optional

import redis.asyncio as aioredis
import redis as sync_redis

from gymdesk.core.config import settings

SCHEDULER_HEARTBEAT_KEY = "scheduler:heartbeat"
HEARTBEAT_TTL = 300

redis_pool = aioredis.ConnectionPool.from_url(
    settings.REDIS_URL,
    max_connections=20,
    decode_responses=True,
)

sync_redis_pool = sync_redis.ConnectionPool.from_url(
    settings.REDIS_URL,
    max_connections=5,
    decode_responses=True,
)


async def get_redis() -> aioredis.Redis:
    """FastAPI dependency"""
    return aioredis.Redis(connection_pool=redis_pool)


def get_sync_redis() -> sync_redis.Redis:
    return sync_redis.Redis(connection_pool=sync_redis_pool)


async def close_redis() -> None:
    await redis_pool.disconnect()


async def check_redis_connection(r: aioredis.Redis) -> bool:
    try:
        await r.ping()
        return True
    except Exception:
        return False


def write_scheduler_heartbeat(r: sync_redis.Redis, now_ts: Optional[int] = None) -> None:
    """Record that the scheduler process is alive; the key lapses if it stops"""
    now_ts = int(time.time()) if now_ts is None else now_ts
    r.set(SCHEDULER_HEARTBEAT_KEY, str(now_ts), ex=HEARTBEAT_TTL)


async def scheduler_heartbeat_age(r: aioredis.Redis, now_ts: Optional[int] = None) -> Optional[int]:
    """Seconds since the last scheduler heartbeat, None when there is none"""
    value = await r.get(SCHEDULER_HEARTBEAT_KEY)
    if value is None:
        return None
    now_ts = int(time.time()) if now_ts is None else now_ts
    try:
        return max(now_ts - int(value), 0)
    except ValueError:
        return None
