"""SQLAlchemy Event Store - EventStore implementation over the `events` table.

Invariants:
    - fetch_due_recurring_events never returns one-off events (recurrence_pattern IS NULL)
    - Writes are conditional on the occurrence_date the caller last read, so a write
      from an overlapping tick affects zero rows instead of rotating twice
    - Each operation runs in its own session; no cross-event transaction
"""

from datetime import datetime

from sqlalchemy import delete, select, update

from merzah.core.domain_types import EventId
from merzah.core.rotation import RecurringEvent
from merzah.infrastructure.database import DatabaseSessionManager
from merzah.models.event import Event


class SqlAlchemyEventStore:
    """Event persistence used by the rotation worker."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def fetch_due_recurring_events(
        self, now: datetime,
    ) -> list[RecurringEvent]:
        async with self._db.session() as session:
            result = await session.execute(
                select(Event)
                .where(
                    Event.occurrence_date < now,
                    Event.recurrence_pattern.is_not(None),
                )
                .order_by(Event.occurrence_date),
            )
            return [event.to_recurring() for event in result.scalars().all()]

    async def update_occurrence_date(
        self, event_id: EventId, new_date: datetime, expected_date: datetime,
    ) -> bool:
        async with self._db.session() as session:
            result = await session.execute(
                update(Event)
                .where(
                    Event.id == event_id,
                    Event.occurrence_date == expected_date,
                )
                .values(occurrence_date=new_date)
                .execution_options(synchronize_session=False),
            )
            await session.commit()
            return result.rowcount == 1

    async def delete_event(
        self, event_id: EventId, expected_date: datetime | None = None,
    ) -> bool:
        stmt = delete(Event).where(Event.id == event_id)
        if expected_date is not None:
            stmt = stmt.where(Event.occurrence_date == expected_date)
        async with self._db.session() as session:
            result = await session.execute(
                stmt.execution_options(synchronize_session=False),
            )
            await session.commit()
            return result.rowcount == 1
