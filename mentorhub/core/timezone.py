"""
Timezone utilities for the application
Timestamps are stored as naive UTC datetimes
"""
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, matching the database columns"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime for storage.
    Aware values are converted to UTC; naive values are assumed to be UTC already.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)
