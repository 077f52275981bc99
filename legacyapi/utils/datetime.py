from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """
    Get the current time in UTC as a naive datetime.

    Timestamps are stored without timezone information; every column holds UTC.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(dt: Optional[datetime]) -> Optional[str]:
    """Format a stored (naive UTC) timestamp as ISO 8601 with a ``Z`` suffix."""
    if dt is None:
        return None
    return dt.replace(microsecond=0).isoformat() + "Z"
