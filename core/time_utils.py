from datetime import date, datetime
from typing import Union
from zoneinfo import ZoneInfo

from core.config import settings

UTC = ZoneInfo("UTC")
LOCAL_TZ = ZoneInfo(settings.TIMEZONE)

DayLike = Union[date, datetime, str]

def get_current_time() -> datetime:
    """Returns the current time in the configured timezone."""
    return datetime.now(LOCAL_TZ)

def today() -> date:
    """Returns the current calendar day in the configured timezone."""
    return get_current_time().date()

def to_utc(dt: datetime) -> datetime:
    """Converts a datetime object to UTC."""
    if dt.tzinfo is None:
        # Assume naive datetimes from DB are UTC
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)

def to_calendar_day(value: DayLike) -> date:
    """
    Strips time-of-day from a value and returns the calendar day.

    - datetime: converted to the configured timezone first (naive = UTC).
    - date: returned as is.
    - str: ISO date or datetime, only the 'YYYY-MM-DD' part is read.
    """
    if isinstance(value, datetime):
        return to_utc(value).astimezone(LOCAL_TZ).date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])

def day_difference(later: DayLike, earlier: DayLike) -> int:
    """Number of calendar days from `earlier` to `later` (negative if reversed)."""
    return (to_calendar_day(later) - to_calendar_day(earlier)).days

def is_same_day(a: DayLike, b: DayLike) -> bool:
    return day_difference(a, b) == 0

def is_consecutive(previous: DayLike, current: DayLike) -> bool:
    """True when `current` is exactly the calendar day after `previous`."""
    return day_difference(current, previous) == 1
