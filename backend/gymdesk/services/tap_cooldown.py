"""Duplicate tap suppression per (terminal, card), kept in Redis"""
import time
from typing import Optional

import redis.asyncio as aioredis

from gymdesk.core.config import settings

TAP_PREFIX = "tap:"


def _key(terminal_id: int, card_uid: str) -> str:
    return f"{TAP_PREFIX}{terminal_id}:{card_uid}"


async def is_duplicate_and_record_tap(
    r: aioredis.Redis,
    terminal_id: int,
    card_uid: str,
    cooldown_ms: Optional[int] = None,
    now_ms: Optional[int] = None,
) -> bool:
    """
    True when the same card tapped the same terminal less than cooldown_ms ago.
    Every tap refreshes the stored timestamp, so holding a card stays ignored.
    """
    if cooldown_ms is None:
        cooldown_ms = settings.TAP_COOLDOWN_MS
    if now_ms is None:
        now_ms = int(time.time() * 1000)

    key = _key(terminal_id, card_uid)
    previous = await r.get(key)
    await r.set(key, str(now_ms), px=cooldown_ms * 2)

    if previous is None:
        return False
    delta = now_ms - int(previous)
    return 0 <= delta < cooldown_ms
