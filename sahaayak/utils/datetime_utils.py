from datetime import date, datetime, timedelta
from typing import Optional, Union

import pytz

DateLike = Union[date, datetime, str]

def now_local(tz_name: Optional[str] = None) -> datetime:
    if tz_name is None:
        from sahaayak.config import config
        tz_name = config.behaviour.timezone
    return datetime.now(pytz.timezone(tz_name))

def today_local(tz_name: Optional[str] = None) -> date:
    return now_local(tz_name).date()

def now_iso() -> str:
    return datetime.now(pytz.utc).isoformat()

def to_date(value: DateLike) -> date:
    """Normalise a date, datetime or ISO string to a calendar date (midnight)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    if len(text) > 10:
        return datetime.fromisoformat(text.replace('Z', '+00:00')).date()
    return date.fromisoformat(text)

def days_between(earlier: DateLike, later: DateLike) -> int:
    """Whole-day difference later - earlier; negative when later is before earlier."""
    return (to_date(later) - to_date(earlier)).days

def week_start(day: DateLike) -> date:
    """Monday of the week containing day."""
    d = to_date(day)
    return d - timedelta(days=d.weekday())

def add_days(d: date, days: int) -> date:
    return d + timedelta(days=days)
