"""Settlement timing: when sale proceeds become withdrawable."""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from earnings_ledger.core.config import settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes read back from the store are UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Accepts a datetime or an ISO-8601 string; anything else is None."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return ensure_utc(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def resolve_event_date(event) -> Optional[datetime]:
    """First parseable of start_datetime, date_time, date, created_at."""
    for field in ("start_datetime", "date_time", "date", "created_at"):
        parsed = parse_datetime(getattr(event, field, None))
        if parsed is not None:
            return parsed
    return None


def resolve_event_end(event) -> Optional[datetime]:
    """End of the event for payout eligibility, falling back to its scheduling date."""
    return parse_datetime(getattr(event, "end_datetime", None)) or resolve_event_date(event)


def calculate_settlement_date(event_date: datetime, hold_days: Optional[int] = None) -> datetime:
    days = settings.SETTLEMENT_HOLD_DAYS if hold_days is None else hold_days
    return ensure_utc(event_date) + timedelta(days=days)


def is_settlement_ready(settlement_ready_date: Optional[datetime], now: Optional[datetime] = None) -> bool:
    if settlement_ready_date is None:
        return False
    return (now or utcnow()) >= ensure_utc(settlement_ready_date)
