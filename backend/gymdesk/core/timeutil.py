from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (matches DateTime columns)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()
