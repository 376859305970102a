"""Recurrence Calendar - next_occurrence arithmetic for every pattern.

Tests cover:
    - Fixed steps (daily, weekly, biweekly)
    - Weekday / weekend skip tables for every day of the week
    - Month-length clamping, leap years, quarterly year rollover
    - Time-of-day and UTC offset preservation, strict monotonicity
    - Defensive paths (naive input, year overflow, day-1 fallback, sub-minute offsets)
    - Month steps agree with dateutil relativedelta
"""

import logging
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from dateutil.relativedelta import relativedelta

from merzah.core.domain_types import RecurrenceDuration, RecurrencePattern
from merzah.core.recurrence import (
    at_offset,
    days_in_month,
    is_leap_year,
    next_occurrence,
    preview_occurrences,
    recurrence_end_date,
    utc_offset_minutes,
)

UTC = timezone.utc
PLUS_0530 = timezone(timedelta(hours=5, minutes=30))
MINUS_0700 = timezone(timedelta(hours=-7))


def _dt(y, m, d, tz=UTC, hour=10, minute=0):
    return datetime(y, m, d, hour, minute, tzinfo=tz)


# ─── Fixed steps ─────────────────────────────────────────────────

def test_daily_adds_one_day():
    assert next_occurrence(_dt(2024, 1, 1), RecurrencePattern.DAILY) == _dt(2024, 1, 2)


def test_weekly_adds_seven_days():
    assert next_occurrence(_dt(2024, 1, 1), RecurrencePattern.WEEKLY) == _dt(2024, 1, 8)


def test_biweekly_adds_fourteen_days():
    assert next_occurrence(_dt(2024, 1, 1), RecurrencePattern.BIWEEKLY) == _dt(2024, 1, 15)


def test_daily_crosses_year_boundary():
    assert next_occurrence(_dt(2024, 12, 31), RecurrencePattern.DAILY) == _dt(2025, 1, 1)


# ─── Weekdays / weekends ─────────────────────────────────────────
# 2024-01-01 is a Monday

@pytest.mark.parametrize("day, expected_step", [
    (1, 1),  # Mon -> Tue
    (2, 1),  # Tue -> Wed
    (3, 1),  # Wed -> Thu
    (4, 1),  # Thu -> Fri
    (5, 3),  # Fri -> Mon
    (6, 2),  # Sat -> Mon
    (7, 1),  # Sun -> Mon
])
def test_weekdays_skip_table(day, expected_step):
    current = _dt(2024, 1, day)
    nxt = next_occurrence(current, RecurrencePattern.WEEKDAYS)
    assert nxt - current == timedelta(days=expected_step)
    assert nxt.weekday() < 5


@pytest.mark.parametrize("day, expected_step", [
    (1, 5),  # Mon -> Sat
    (2, 4),  # Tue -> Sat
    (3, 3),  # Wed -> Sat
    (4, 2),  # Thu -> Sat
    (5, 1),  # Fri -> Sat
    (6, 1),  # Sat -> Sun
    (7, 6),  # Sun -> next Sat
])
def test_weekends_skip_table(day, expected_step):
    current = _dt(2024, 1, day)
    nxt = next_occurrence(current, RecurrencePattern.WEEKENDS)
    assert nxt - current == timedelta(days=expected_step)
    assert nxt.weekday() >= 5


# ─── Monthly / quarterly / yearly ───────────────────────────────

def test_monthly_clamps_to_leap_february():
    assert next_occurrence(_dt(2024, 1, 31), RecurrencePattern.MONTHLY) == _dt(2024, 2, 29)


def test_monthly_clamps_to_non_leap_february():
    assert next_occurrence(_dt(2023, 1, 31), RecurrencePattern.MONTHLY) == _dt(2023, 2, 28)


def test_monthly_clamps_to_thirty_day_month():
    assert next_occurrence(_dt(2024, 3, 31), RecurrencePattern.MONTHLY) == _dt(2024, 4, 30)


def test_monthly_december_rolls_into_january():
    assert next_occurrence(_dt(2024, 12, 15), RecurrencePattern.MONTHLY) == _dt(2025, 1, 15)


def test_monthly_does_not_restore_clamped_day():
    feb = next_occurrence(_dt(2023, 1, 31), RecurrencePattern.MONTHLY)
    assert next_occurrence(feb, RecurrencePattern.MONTHLY) == _dt(2023, 3, 28)


def test_quarterly_chain_within_year():
    d = _dt(2024, 1, 15)
    chain = []
    for _ in range(3):
        d = next_occurrence(d, RecurrencePattern.QUARTERLY)
        chain.append(d)
    assert chain == [_dt(2024, 4, 15), _dt(2024, 7, 15), _dt(2024, 10, 15)]


def test_quarterly_rolls_over_year():
    assert next_occurrence(_dt(2024, 11, 15), RecurrencePattern.QUARTERLY) == _dt(2025, 2, 15)


def test_quarterly_into_december_keeps_year():
    assert next_occurrence(_dt(2024, 9, 15), RecurrencePattern.QUARTERLY) == _dt(2024, 12, 15)


def test_quarterly_clamps_day():
    assert next_occurrence(_dt(2023, 11, 30), RecurrencePattern.QUARTERLY) == _dt(2024, 2, 29)


def test_yearly_from_leap_day_clamps_and_stays_clamped():
    first = next_occurrence(_dt(2024, 2, 29), RecurrencePattern.YEARLY)
    assert first == _dt(2025, 2, 28)
    assert next_occurrence(first, RecurrencePattern.YEARLY) == _dt(2026, 2, 28)


def test_yearly_regular_date():
    assert next_occurrence(_dt(2024, 6, 1), RecurrencePattern.YEARLY) == _dt(2025, 6, 1)


# ─── Properties over every pattern ──────────────────────────────

_SAMPLE_DATES = [
    _dt(2024, 1, 1),
    _dt(2024, 2, 29, tz=PLUS_0530, hour=23, minute=45),
    _dt(2023, 12, 31, tz=MINUS_0700, hour=0, minute=5),
    _dt(2025, 8, 31, tz=PLUS_0530, hour=18),
    _dt(2100, 2, 28, hour=6),
]


@pytest.mark.parametrize("pattern", list(RecurrencePattern))
@pytest.mark.parametrize("current", _SAMPLE_DATES)
def test_preserves_time_of_day_and_offset(pattern, current):
    nxt = next_occurrence(current, pattern)
    assert nxt.timetz() == current.timetz()
    assert nxt.utcoffset() == current.utcoffset()


@pytest.mark.parametrize("pattern", list(RecurrencePattern))
@pytest.mark.parametrize("current", _SAMPLE_DATES)
def test_strictly_increasing(pattern, current):
    assert next_occurrence(current, pattern) > current


@pytest.mark.parametrize("pattern", list(RecurrencePattern))
def test_deterministic(pattern):
    current = _dt(2024, 5, 31, tz=PLUS_0530)
    assert next_occurrence(current, pattern) == next_occurrence(current, pattern)


def test_offset_not_normalized_to_utc():
    # 23:45 at +05:30 is still the same calendar day locally
    current = _dt(2024, 1, 31, tz=PLUS_0530, hour=23, minute=45)
    nxt = next_occurrence(current, RecurrencePattern.MONTHLY)
    assert (nxt.year, nxt.month, nxt.day) == (2024, 2, 29)
    assert nxt.tzinfo == PLUS_0530


# ─── Calendar helpers ───────────────────────────────────────────

def test_leap_year_rules():
    assert is_leap_year(2024)
    assert not is_leap_year(2023)
    assert not is_leap_year(1900)
    assert is_leap_year(2000)


def test_days_in_month_table():
    assert [days_in_month(2023, m) for m in range(1, 13)] == [
        31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31,
    ]
    assert days_in_month(2024, 2) == 29


# ─── Defensive paths ────────────────────────────────────────────

def test_naive_datetime_rejected():
    with pytest.raises(ValueError):
        next_occurrence(datetime(2024, 1, 1, 10), RecurrencePattern.DAILY)


def test_returns_none_past_year_9999(caplog):
    current = _dt(9999, 12, 15)
    with caplog.at_level(logging.ERROR, logger="merzah.core.recurrence"):
        assert next_occurrence(current, RecurrencePattern.MONTHLY) is None
    assert "past year 9999" in caplog.text


def test_clamp_mismatch_falls_back_to_first_of_month(caplog):
    # Pretend February 2024 has 28 days so the stepped Feb 29 looks wrong
    current = _dt(2024, 1, 31, tz=PLUS_0530, hour=18, minute=15)
    with patch("merzah.core.recurrence.days_in_month", return_value=28):
        with caplog.at_level(logging.ERROR, logger="merzah.core.recurrence"):
            nxt = next_occurrence(current, RecurrencePattern.MONTHLY)

    assert nxt == _dt(2024, 2, 1, tz=PLUS_0530, hour=18, minute=15)
    assert nxt.tzinfo == PLUS_0530
    assert "falling back to day 1 of 2024-02" in caplog.text


def test_correct_clamping_never_logs(caplog):
    with caplog.at_level(logging.ERROR, logger="merzah.core.recurrence"):
        next_occurrence(_dt(2023, 1, 31), RecurrencePattern.MONTHLY)
    assert caplog.text == ""


def test_fixed_step_overflow_returns_none():
    current = datetime(9999, 12, 31, 10, tzinfo=UTC)
    assert next_occurrence(current, RecurrencePattern.WEEKLY) is None


# ─── Creation helpers ───────────────────────────────────────────

def test_recurrence_end_date_adds_duration_days():
    start = _dt(2024, 1, 1, tz=PLUS_0530)
    end = recurrence_end_date(start, RecurrenceDuration.THREE_MONTHS)
    assert end == start + timedelta(days=90)
    assert end.utcoffset() == start.utcoffset()


def test_preview_stops_at_end_date():
    start = _dt(2024, 1, 1)
    until = recurrence_end_date(start, RecurrenceDuration.ONE_MONTH)
    dates = preview_occurrences(start, RecurrencePattern.WEEKLY, until=until, limit=10)
    assert dates == [_dt(2024, 1, 8), _dt(2024, 1, 15), _dt(2024, 1, 22), _dt(2024, 1, 29)]


def test_preview_respects_limit():
    dates = preview_occurrences(_dt(2024, 1, 1), RecurrencePattern.DAILY, limit=3)
    assert len(dates) == 3
    assert dates[-1] == _dt(2024, 1, 4)


@pytest.mark.parametrize("pattern, months", [
    (RecurrencePattern.MONTHLY, 1),
    (RecurrencePattern.QUARTERLY, 3),
    (RecurrencePattern.YEARLY, 12),
])
def test_month_steps_agree_with_relativedelta(pattern, months):
    day = _dt(2023, 1, 1, tz=MINUS_0700, hour=21)
    while day.year < 2025:
        assert next_occurrence(day, pattern) == day + relativedelta(months=months)
        day += timedelta(days=1)


def test_offset_helpers_round_trip():
    local = _dt(2024, 3, 10, tz=MINUS_0700, hour=19)
    minutes = utc_offset_minutes(local)
    assert minutes == -420
    stored = local.astimezone(UTC).replace(tzinfo=None)
    assert at_offset(stored, minutes) == local
    assert at_offset(stored, minutes).utcoffset() == timedelta(hours=-7)


def test_sub_minute_offset_rejected():
    odd = timezone(timedelta(hours=-5, seconds=-30))
    with pytest.raises(ValueError):
        utc_offset_minutes(datetime(2024, 1, 1, 10, tzinfo=odd))


def test_negative_whole_minute_offset():
    assert utc_offset_minutes(_dt(2024, 1, 1, tz=MINUS_0700)) == -420
