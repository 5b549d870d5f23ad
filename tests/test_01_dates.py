"""
Test Case 01: Plan and date arithmetic
- Calendar month clamping
- End-of-day normalisation
- Remaining days floor
"""
from datetime import date, datetime

import pytest

from gymdesk.core.dates import (
    add_months,
    calculate_end_date,
    calculate_remaining_days,
    day_bounds,
    format_date,
    iter_days,
    to_datetime,
)
from gymdesk.core.enums import PlanType

END_OF_DAY = (23, 59, 59, 999000)


@pytest.mark.parametrize(
    "start, plan, expected",
    [
        (datetime(2024, 1, 31), "Basic", datetime(2024, 2, 29, *END_OF_DAY)),
        (datetime(2023, 1, 31), "Basic", datetime(2023, 2, 28, *END_OF_DAY)),
        (datetime(2024, 5, 31), "Premium", datetime(2024, 8, 31, *END_OF_DAY)),
        (datetime(2024, 1, 31), "VIP", datetime(2024, 7, 31, *END_OF_DAY)),
        (datetime(2024, 11, 30), "Premium", datetime(2025, 2, 28, *END_OF_DAY)),
    ],
)
def test_calculate_end_date_clamps_to_month_end(start, plan, expected):
    assert calculate_end_date(start, plan) == expected


def test_calculate_end_date_accepts_plan_enum_and_date():
    assert calculate_end_date(date(2024, 3, 15), PlanType.BASIC) == datetime(2024, 4, 15, *END_OF_DAY)


def test_calculate_end_date_rejects_unknown_plan():
    with pytest.raises(ValueError):
        calculate_end_date(datetime(2024, 1, 1), "Platinum")


def test_add_months_keeps_time_of_day():
    assert add_months(datetime(2024, 3, 31, 8, 15), 1) == datetime(2024, 4, 30, 8, 15)


def test_add_months_crosses_year_boundary():
    assert add_months(datetime(2024, 12, 15), 2) == datetime(2025, 2, 15)


def test_remaining_days_is_never_negative():
    today = date(2024, 3, 15)
    assert calculate_remaining_days(datetime(2024, 3, 14, 23, 59), today) == 0
    assert calculate_remaining_days(datetime(2023, 1, 1), today) == 0


def test_remaining_days_counts_whole_days():
    today = datetime(2024, 3, 15, 18, 0)
    assert calculate_remaining_days(datetime(2024, 3, 15, *END_OF_DAY), today) == 0
    assert calculate_remaining_days(datetime(2024, 3, 16, 0, 0), today) == 1
    assert calculate_remaining_days(datetime(2024, 4, 15, *END_OF_DAY), today) == 31


def test_remaining_days_invalid_input_counts_as_expired():
    assert calculate_remaining_days(None, date(2024, 3, 15)) == 0
    assert calculate_remaining_days("not a date", date(2024, 3, 15)) == 0


def test_day_bounds_cover_the_whole_calendar_day():
    start, end = day_bounds(datetime(2024, 3, 15, 10, 30))
    assert start == datetime(2024, 3, 15)
    assert end == datetime(2024, 3, 15, *END_OF_DAY)


def test_iter_days_is_inclusive():
    days = list(iter_days(date(2024, 2, 28), date(2024, 3, 1)))
    assert days == [date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]
    assert list(iter_days(date(2024, 3, 2), date(2024, 3, 1))) == []


def test_to_datetime_and_format_date():
    assert to_datetime("2024-03-15T10:30:00") == datetime(2024, 3, 15, 10, 30)
    assert to_datetime(date(2024, 3, 15)) == datetime(2024, 3, 15)
    assert to_datetime("garbage") is None
    assert format_date(datetime(2024, 3, 5)) == "03/05/2024"
    assert format_date(None) == "unknown date"


def test_plan_table():
    assert [(p.value, p.months, p.price) for p in PlanType] == [
        ("Basic", 1, 500),
        ("Premium", 3, 1200),
        ("VIP", 6, 2000),
    ]
    assert PlanType.parse(" premium ") is PlanType.PREMIUM
    assert PlanType.parse("vip") is PlanType.VIP
    with pytest.raises(ValueError):
        PlanType.parse(None)
