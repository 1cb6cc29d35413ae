"""
Calendar helpers shared by the reporting and export code.

Timestamps are handled as naive UTC datetimes throughout; aware values are
converted on the way in.
"""
import calendar
from datetime import datetime, timezone
from typing import Any, Optional, Tuple

from dateutil.relativedelta import relativedelta

MIN_YEAR = 1
MAX_YEAR = 9999


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def format_timestamp(value: datetime) -> str:
    # Fixed width so stored strings sort chronologically
    return to_naive_utc(value).isoformat(timespec="microseconds")


def parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return to_naive_utc(value)
    return to_naive_utc(datetime.fromisoformat(str(value)))


def parse_int(value: Any) -> Optional[int]:
    """Lenient integer parsing for query parameters; ``None`` when unparseable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def month_bounds(year: int, month: int) -> Optional[Tuple[datetime, datetime]]:
    """Inclusive [first instant, last instant] of a calendar month."""
    if not (MIN_YEAR <= year <= MAX_YEAR and 1 <= month <= 12):
        return None
    last_day = calendar.monthrange(year, month)[1]
    return datetime(year, month, 1), datetime(year, month, last_day, 23, 59, 59, 999999)


def year_bounds(year: int) -> Optional[Tuple[datetime, datetime]]:
    if not MIN_YEAR <= year <= MAX_YEAR:
        return None
    return datetime(year, 1, 1), datetime(year, 12, 31, 23, 59, 59, 999999)


def trailing_window(months: int, now: datetime) -> Tuple[datetime, datetime]:
    """[now - months, now]; day-of-month is clamped for shorter months."""
    try:
        start = now - relativedelta(months=months)
    except (ValueError, OverflowError):
        start = datetime.min
    return start, now
