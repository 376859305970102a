"""Event ORM - a mosque event, optionally recurring.

Invariants:
    - occurrence_date is the only column the rotation worker mutates
    - recurrence_pattern NULL means a one-off event; recurrence_end_date is then NULL too
    - utc_offset_minutes is the offset the organizer entered; dates are stored in UTC
      and re-expressed at that offset on read

Design Decisions:
    - Pattern and category stored as plain strings (str Enum values), not DB enums
    - mosque_id is an opaque reference; mosque records live outside this service
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Integer, String, Text, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from merzah.core.domain_types import EventId, RecurrencePattern
from merzah.core.recurrence import at_offset
from merzah.core.rotation import RecurringEvent
from merzah.db.base import Base, UTCDateTime


class Event(Base):
    """Event entity."""
    __tablename__ = "events"
    __table_args__ = (
        Index("ix_events_due_recurring", "occurrence_date", "recurrence_pattern"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    speaker: Mapped[str | None] = mapped_column(String(100), nullable=True)
    mosque_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    occurrence_date: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False,
    )
    utc_offset_minutes: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    recurrence_pattern: Mapped[str | None] = mapped_column(
        String(20), nullable=True,
    )
    recurrence_end_date: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    @property
    def local_occurrence_date(self) -> datetime:
        return at_offset(self.occurrence_date, self.utc_offset_minutes)

    @property
    def local_recurrence_end_date(self) -> datetime | None:
        if self.recurrence_end_date is None:
            return None
        return at_offset(self.recurrence_end_date, self.utc_offset_minutes)

    def to_recurring(self) -> RecurringEvent:
        """Snapshot the fields rotation reads, at the organizer's offset."""
        return RecurringEvent(
            id=EventId(self.id),
            occurrence_date=self.local_occurrence_date,
            recurrence_pattern=(
                RecurrencePattern(self.recurrence_pattern)
                if self.recurrence_pattern else None
            ),
            recurrence_end_date=self.local_recurrence_end_date,
        )
