"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - EventId wraps UUID; never use a bare UUID in domain logic
    - All valid recurrence states are encoded as Enums, no raw string matching
    - RecurrenceDuration maps to a fixed day count, independent of calendar months

Design Decisions:
    - str Enums: serialize to JSON and to DB string columns without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

EventId = NewType("EventId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class RecurrencePattern(str, Enum):
    """How an event's occurrence date advances. None on the event = one-off."""
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    WEEKDAYS = "weekdays"
    WEEKENDS = "weekends"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class RecurrenceDuration(str, Enum):
    """Selectable lifetime of a recurring series, chosen at creation."""
    ONE_MONTH = "one_month"
    THREE_MONTHS = "three_months"
    SIX_MONTHS = "six_months"
    ONE_YEAR = "one_year"
    INDEFINITE = "indefinite"

    @property
    def days(self) -> int:
        return _DURATION_DAYS[self]


_DURATION_DAYS: dict[RecurrenceDuration, int] = {
    RecurrenceDuration.ONE_MONTH: 30,
    RecurrenceDuration.THREE_MONTHS: 90,
    RecurrenceDuration.SIX_MONTHS: 180,
    RecurrenceDuration.ONE_YEAR: 365,
    RecurrenceDuration.INDEFINITE: 365 * 100,
}


class EventCategory(str, Enum):
    """Event categories shown to mosque attendees."""
    HALAQAH = "halaqah"
    FUNDRAISER = "fundraiser"
    YOUTH = "youth"
    LECTURE = "lecture"
    COMMUNITY = "community"
    WORKSHOP = "workshop"
    SEMINAR = "seminar"
    CONFERENCE = "conference"
    SPORTS = "sports"
    SOCIAL = "social"
    VOLUNTEER = "volunteer"
    IFTAR = "iftar"
    TARAWEEH = "taraweeh"
    EID = "eid"
