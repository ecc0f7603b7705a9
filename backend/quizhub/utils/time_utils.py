from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current instant as a naive UTC datetime (the form MongoDB hands back)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def in_window(start: datetime, end: datetime, now: datetime) -> bool:
    return start <= now <= end
