"""Boundary Protocols - contracts between the rotation core and its shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by infrastructure via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, fakes in tests need no base class
    - Async in EventStore: implementations do IO, the pure decisions they feed are sync
"""

from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime
from typing import Protocol

from merzah.core.domain_types import EventId, RecurrencePattern


class RecurringEventLike(Protocol):
    """Structural contract for events handed to the rotation worker."""
    id: EventId
    occurrence_date: datetime
    recurrence_pattern: RecurrencePattern | None
    recurrence_end_date: datetime | None


class EventStore(Protocol):
    """Contract for the event persistence the rotation worker needs."""
    async def fetch_due_recurring_events(
        self, now: datetime,
    ) -> Sequence[RecurringEventLike]: ...

    async def update_occurrence_date(
        self, event_id: EventId, new_date: datetime, expected_date: datetime,
    ) -> bool:
        """Advance the date only if it still equals expected_date.

        Returns False when the stored date moved underneath us (stale write).
        """
        ...

    async def delete_event(
        self, event_id: EventId, expected_date: datetime | None = None,
    ) -> bool: ...


class TickScheduler(Protocol):
    """Periodic trigger that owns no rotation logic of its own."""
    def register(
        self, callback: Callable[[], Awaitable[None]], interval_seconds: int,
    ) -> None: ...

    def start(self) -> None: ...

    def shutdown(self) -> None: ...
