"""Recurrence Calendar - pure next-occurrence arithmetic for the eight recurrence patterns.

Invariants:
    - Time-of-day and UTC offset of the input are preserved exactly
    - next_occurrence(d, p) > d for every pattern
    - Day-of-month is clamped to the target month length (Jan 31 -> Feb 28/29)
    - Month-based steps (monthly, quarterly, yearly) go through relativedelta, which
      clamps the day and rolls over year boundaries
    - None is returned only when no calendar date can be built at all (year > 9999)
    - UTC offsets are whole minutes

Design Decisions:
    - Fixed-offset datetimes advance on their wall clock; no tz database lookups
    - A stepped date whose day disagrees with the month length falls back to day 1
      of the target month and logs at ERROR; correct clamping never reaches it
"""

import calendar
import logging
from datetime import datetime, timedelta, timezone

from dateutil.relativedelta import relativedelta

from merzah.core.domain_types import RecurrenceDuration, RecurrencePattern

logger = logging.getLogger(__name__)

_FIXED_STEP_DAYS: dict[RecurrencePattern, int] = {
    RecurrencePattern.DAILY: 1,
    RecurrencePattern.WEEKLY: 7,
    RecurrencePattern.BIWEEKLY: 14,
}

_MONTH_STEPS: dict[RecurrencePattern, int] = {
    RecurrencePattern.MONTHLY: 1,
    RecurrencePattern.QUARTERLY: 3,
    RecurrencePattern.YEARLY: 12,
}

# Indexed by datetime.weekday() (Monday=0 .. Sunday=6)
_WEEKDAYS_SKIP = (1, 1, 1, 1, 3, 2, 1)
_WEEKENDS_SKIP = (5, 4, 3, 2, 1, 1, 6)


def is_leap_year(year: int) -> bool:
    return calendar.isleap(year)


def days_in_month(year: int, month: int) -> int:
    """Gregorian month length, February is 29 days in leap years."""
    return calendar.monthrange(year, month)[1]


def next_occurrence(
    current: datetime, pattern: RecurrencePattern,
) -> datetime | None:
    """Advance `current` by one step of `pattern`. Pure, deterministic."""
    if current.tzinfo is None:
        raise ValueError("occurrence dates must carry a UTC offset")

    if pattern in _FIXED_STEP_DAYS:
        return _add_days(current, _FIXED_STEP_DAYS[pattern])
    if pattern is RecurrencePattern.WEEKDAYS:
        return _add_days(current, _WEEKDAYS_SKIP[current.weekday()])
    if pattern is RecurrencePattern.WEEKENDS:
        return _add_days(current, _WEEKENDS_SKIP[current.weekday()])
    return _add_months(current, _MONTH_STEPS[pattern])


def _add_days(current: datetime, days: int) -> datetime | None:
    try:
        return current + timedelta(days=days)
    except OverflowError:
        return None


def _add_months(current: datetime, months: int) -> datetime | None:
    try:
        stepped = current + relativedelta(months=months)
    except (ValueError, OverflowError):
        logger.error(
            f"Cannot step {current.isoformat()} by {months} month(s) past year 9999",
        )
        return None

    expected_day = min(current.day, days_in_month(stepped.year, stepped.month))
    if stepped.day != expected_day:
        logger.error(
            f"Clamped date mismatch for {current.isoformat()} +{months} month(s); "
            f"falling back to day 1 of {stepped.year:04d}-{stepped.month:02d}",
        )
        return stepped.replace(day=1)
    return stepped


def recurrence_end_date(
    start: datetime, duration: RecurrenceDuration,
) -> datetime:
    """Derive a series end date from the duration selected at creation."""
    return start + timedelta(days=duration.days)


def preview_occurrences(
    start: datetime,
    pattern: RecurrencePattern,
    until: datetime | None = None,
    limit: int = 10,
) -> list[datetime]:
    """List up to `limit` occurrences after `start`, stopping past `until`."""
    dates: list[datetime] = []
    current = start
    while len(dates) < limit:
        nxt = next_occurrence(current, pattern)
        if nxt is None or (until is not None and nxt > until):
            break
        dates.append(nxt)
        current = nxt
    return dates


# ─── Offset helpers ─────────────────────────────────────────────

def utc_offset_minutes(value: datetime) -> int:
    offset = value.utcoffset()
    if offset is None:
        raise ValueError("occurrence dates must carry a UTC offset")
    minutes, seconds = divmod(int(offset.total_seconds()), 60)
    if seconds:
        raise ValueError("UTC offsets must be a whole number of minutes")
    return minutes


def at_offset(value: datetime, minutes: int) -> datetime:
    """Re-express `value` at a fixed UTC offset (naive values are read as UTC)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone(timedelta(minutes=minutes)))
