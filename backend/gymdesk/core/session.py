import secrets
import time
from typing import Optional
import redis.asyncio as aioredis
from gymdesk.core.config import settings

SESSION_PREFIX = "session:"
SESSION_TTL = settings.SESSION_TIMEOUT_MINUTES * 60  # seconds


async def create_session(
    r: aioredis.Redis,
    user_id: int,
    role: str,
    tenant_id: Optional[int],
    email: str,
) -> str:
    """Create a new session and return its id"""
    session_id = secrets.token_hex(32)
    key = f"{SESSION_PREFIX}{session_id}"
    data = {
        "user_id": str(user_id),
        "role": role,
        "tenant_id": str(tenant_id) if tenant_id is not None else "",
        "email": email,
        "created_at": str(int(time.time())),
        "last_accessed": str(int(time.time())),
    }
    await r.hset(key, mapping=data)
    await r.expire(key, SESSION_TTL)
    return session_id


async def get_session(r: aioredis.Redis, session_id: str) -> Optional[dict]:
    """Load a session, sliding its idle timeout"""
    if not session_id:
        return None
    key = f"{SESSION_PREFIX}{session_id}"
    data = await r.hgetall(key)
    if not data:
        return None
    await r.expire(key, SESSION_TTL)
    await r.hset(key, "last_accessed", str(int(time.time())))
    return data


async def destroy_session(r: aioredis.Redis, session_id: str) -> None:
    """Delete a session"""
    if session_id:
        await r.delete(f"{SESSION_PREFIX}{session_id}")


async def invalidate_user_sessions(
    r: aioredis.Redis,
    user_id: int,
    exclude_session_id: Optional[str] = None,
) -> int:
    """
    Drop every session belonging to a user.

    Used when a staff account is deactivated or deleted.

    Returns:
        number of sessions removed
    """
    deleted_count = 0
    user_id_str = str(user_id)
    cursor = 0

    while True:
        cursor, keys = await r.scan(cursor, match=f"{SESSION_PREFIX}*", count=100)
        for key in keys:
            if isinstance(key, bytes):
                key = key.decode()
            session_id = key.replace(SESSION_PREFIX, "")
            if exclude_session_id and session_id == exclude_session_id:
                continue

            session_user_id = await r.hget(key, "user_id")
            if isinstance(session_user_id, bytes):
                session_user_id = session_user_id.decode()
            if session_user_id == user_id_str:
                await r.delete(key)
                deleted_count += 1

        if cursor == 0:
            break

    return deleted_count
