"""Event Schemas - Pydantic models with field-level validation for API boundaries.

Invariants:
    - EventCreate.title: 2-100 chars, description: 10-1000 chars, speaker: 2-100 chars
    - occurrence_date must carry a UTC offset (AwareDatetime) of whole minutes
    - recurrence_duration is only accepted together with recurrence_pattern
    - EventResponse dates are expressed at the organizer's original offset
"""

from datetime import datetime
from uuid import UUID

from pydantic import (
    AwareDatetime, BaseModel, Field, field_validator, model_validator,
)

from merzah.core.domain_types import (
    EventCategory, RecurrenceDuration, RecurrencePattern,
)
from merzah.core.recurrence import utc_offset_minutes
from merzah.models.event import Event


def _whole_minute_offset(v: datetime | None) -> datetime | None:
    if v is not None:
        utc_offset_minutes(v)
    return v


class EventCreate(BaseModel):
    """Event creation; the series end date is derived from recurrence_duration."""
    title: str = Field(min_length=2, max_length=100)
    description: str = Field(min_length=10, max_length=1000)
    category: EventCategory
    occurrence_date: AwareDatetime
    mosque_id: str | None = Field(None, max_length=100)
    speaker: str | None = Field(None, min_length=2, max_length=100)
    recurrence_pattern: RecurrencePattern | None = None
    recurrence_duration: RecurrenceDuration | None = None

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty or whitespace")
        return v

    @field_validator("occurrence_date")
    @classmethod
    def whole_minute_offset(cls, v: datetime) -> datetime:
        return _whole_minute_offset(v)

    @model_validator(mode="after")
    def duration_requires_pattern(self) -> "EventCreate":
        if self.recurrence_duration and not self.recurrence_pattern:
            raise ValueError(
                "recurrence_duration requires a recurrence_pattern",
            )
        return self


class EventUpdate(BaseModel):
    """Partial update; cross-field rules are checked against the stored event."""
    title: str | None = Field(None, min_length=2, max_length=100)
    description: str | None = Field(None, min_length=10, max_length=1000)
    category: EventCategory | None = None
    occurrence_date: AwareDatetime | None = None
    mosque_id: str | None = Field(None, max_length=100)
    speaker: str | None = Field(None, min_length=2, max_length=100)
    recurrence_pattern: RecurrencePattern | None = None
    recurrence_end_date: AwareDatetime | None = None

    @field_validator("occurrence_date", "recurrence_end_date")
    @classmethod
    def whole_minute_offset(cls, v: datetime | None) -> datetime | None:
        return _whole_minute_offset(v)


class EventResponse(BaseModel):
    id: UUID
    title: str
    description: str
    category: EventCategory
    speaker: str | None = None
    mosque_id: str | None = None
    occurrence_date: datetime
    recurrence_pattern: RecurrencePattern | None = None
    recurrence_end_date: datetime | None = None
    created_at: datetime

    @classmethod
    def from_model(cls, event: Event) -> "EventResponse":
        return cls(
            id=event.id,
            title=event.title,
            description=event.description,
            category=EventCategory(event.category),
            speaker=event.speaker,
            mosque_id=event.mosque_id,
            occurrence_date=event.local_occurrence_date,
            recurrence_pattern=(
                RecurrencePattern(event.recurrence_pattern)
                if event.recurrence_pattern else None
            ),
            recurrence_end_date=event.local_recurrence_end_date,
            created_at=event.created_at,
        )


class OccurrencePreview(BaseModel):
    event_id: UUID
    recurrence_pattern: RecurrencePattern | None = None
    occurrences: list[datetime]


class RotationRunResponse(BaseModel):
    """Counts from one manually triggered rotation pass."""
    processed: int
    rotated: int
    series_ended: int
    skipped: int
    skipped_by_reason: dict[str, int] = Field(default_factory=dict)
