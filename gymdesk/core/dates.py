"""
Membership date arithmetic.

All values are naive local datetimes, the same convention the database
columns use. Functions that depend on "today" accept it as an argument so
callers (and tests) can pin the clock.
"""
import calendar
from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional, Tuple, Union

from gymdesk.core.enums import PlanType

DateLike = Union[date, datetime]


def to_datetime(value) -> Optional[datetime]:
    """Coerce a date, datetime or ISO string into a datetime, or None if invalid."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def start_of_day(value: DateLike) -> datetime:
    return datetime.combine(_as_date(value), time.min)


def end_of_day(value: DateLike) -> datetime:
    return datetime.combine(_as_date(value), time(23, 59, 59, 999000))


def day_bounds(value: DateLike) -> Tuple[datetime, datetime]:
    """Calendar day window [00:00:00, 23:59:59.999] containing ``value``."""
    return start_of_day(value), end_of_day(value)


def add_months(value: DateLike, months: int) -> datetime:
    """
    Add calendar months, clamping to the last day of the target month.

    Jan 31 + 1 month -> Feb 29 (leap) / Feb 28, never Mar 1/2.
    Time of day is preserved.
    """
    value = to_datetime(value)
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return value.replace(year=year, month=month, day=min(value.day, last_day))


def calculate_end_date(start_date: DateLike, plan_type) -> datetime:
    """End of the last day of a plan period starting at ``start_date``."""
    plan = PlanType.parse(plan_type)
    return end_of_day(add_months(start_date, plan.months))


def calculate_remaining_days(end_date, today: Optional[DateLike] = None) -> int:
    """
    Whole days from midnight today to midnight of ``end_date``, never negative.
    Invalid or missing end dates count as already expired.
    """
    end = to_datetime(end_date)
    if end is None:
        return 0
    today = _as_date(today) if today is not None else date.today()
    remaining = (end.date() - today).days
    return remaining if remaining > 0 else 0


def iter_days(first: DateLike, last: DateLike) -> Iterator[date]:
    """Every calendar date from ``first`` through ``last`` inclusive."""
    current = _as_date(first)
    last = _as_date(last)
    while current <= last:
        yield current
        current += timedelta(days=1)


def format_date(value) -> str:
    value = to_datetime(value)
    if value is None:
        return "unknown date"
    return value.strftime("%m/%d/%Y")


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value
