"""
Timezone-aware datetime utilities.

Timestamps are handled as aware UTC datetimes in the application and stored
as naive UTC in the database.
"""

from datetime import datetime, timezone
from typing import Optional

# UTC timezone constant
UTC = timezone.utc


def now_utc() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure datetime is timezone-aware and in UTC.

    Naive datetimes are assumed to already be UTC.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def to_naive_utc(dt: datetime) -> datetime:
    """Convert to a naive UTC datetime for storage."""
    return ensure_utc(dt).replace(tzinfo=None)


def timestamp_session_id(at: Optional[datetime] = None) -> str:
    """Millisecond epoch timestamp as a session identifier, e.g. '1718000000000'."""
    moment = at or now_utc()
    return str(int(moment.timestamp() * 1000))


def default_session_name(at: Optional[datetime] = None) -> str:
    """Label for a session that was not named by the user: 'New Chat - 06/10/2024'."""
    moment = at or now_utc()
    return f"New Chat - {moment:%m/%d/%Y}"
