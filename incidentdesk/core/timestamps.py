from datetime import datetime, UTC
from typing import Optional

# Fixed-width so that string order matches chronological order.
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"


def format_timestamp(moment: datetime) -> str:
    """Render a datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    moment = moment.astimezone(UTC)
    return f"{moment.strftime(TIMESTAMP_FORMAT)}.{moment.microsecond // 1000:03d}Z"


def utc_timestamp(now: Optional[datetime] = None) -> str:
    return format_timestamp(now or datetime.now(UTC))


def parse_timestamp(value: str) -> datetime:
    """Parse a timestamp produced by format_timestamp back into an aware datetime."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))
