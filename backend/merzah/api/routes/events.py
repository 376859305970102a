"""Event Routes - CRUD for mosque events and occurrence previews.

Invariants:
    - recurrence_end_date is derived from recurrence_duration at creation, never sent raw
    - A one-off event (no pattern) never carries a recurrence_end_date
    - recurrence_end_date, when set, is >= occurrence_date
    - The organizer's UTC offset is captured from occurrence_date and kept on every update
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from merzah.core.domain_types import RecurrencePattern
from merzah.core.errors import EventValidationError, ResourceNotFoundError
from merzah.core.recurrence import (
    preview_occurrences, recurrence_end_date, utc_offset_minutes,
)
from merzah.infrastructure.database import get_db
from merzah.models.event import Event
from merzah.schemas.event import (
    EventCreate, EventResponse, EventUpdate, OccurrencePreview,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/events", tags=["events"])


async def get_event_or_404(event_id: UUID, db: AsyncSession) -> Event:
    result = await db.execute(select(Event).where(Event.id == event_id))
    event = result.scalar_one_or_none()
    if not event:
        raise ResourceNotFoundError("Event", str(event_id))
    return event


@router.post(
    "", response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_event(body: EventCreate, db: AsyncSession = Depends(get_db)):
    """Create an event, deriving the series end date from the chosen duration."""
    end_date = (
        recurrence_end_date(body.occurrence_date, body.recurrence_duration)
        if body.recurrence_duration else None
    )
    event = Event(
        title=body.title,
        description=body.description,
        category=body.category.value,
        speaker=body.speaker,
        mosque_id=body.mosque_id,
        occurrence_date=body.occurrence_date,
        utc_offset_minutes=utc_offset_minutes(body.occurrence_date),
        recurrence_pattern=(
            body.recurrence_pattern.value if body.recurrence_pattern else None
        ),
        recurrence_end_date=end_date,
    )
    db.add(event)
    await db.commit()
    await db.refresh(event)
    logger.info(
        f"Created event {event.id}",
        extra={"event_id": event.id, "pattern": event.recurrence_pattern},
    )
    return EventResponse.from_model(event)


@router.get("")
async def list_events(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    mosque_id: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List events ordered by next occurrence."""
    query = select(Event).order_by(Event.occurrence_date.asc())
    if mosque_id:
        query = query.where(Event.mosque_id == mosque_id)
    query = query.limit(limit).offset(offset)

    result = await db.execute(query)
    return {
        "events": [
            EventResponse.from_model(e).model_dump(mode="json")
            for e in result.scalars().all()
        ],
        "pagination": {"limit": limit, "offset": offset},
    }


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(event_id: UUID, db: AsyncSession = Depends(get_db)):
    event = await get_event_or_404(event_id, db)
    return EventResponse.from_model(event)


@router.patch("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: UUID, body: EventUpdate, db: AsyncSession = Depends(get_db),
):
    """Partially update an event. Clearing the pattern also clears the end date."""
    event = await get_event_or_404(event_id, db)
    changes = body.model_dump(exclude_unset=True)

    for name in ("title", "description"):
        if changes.get(name) is not None:
            setattr(event, name, changes[name])
    for name in ("speaker", "mosque_id"):
        if name in changes:
            setattr(event, name, changes[name])
    if changes.get("category") is not None:
        event.category = changes["category"].value
    if changes.get("occurrence_date") is not None:
        event.occurrence_date = changes["occurrence_date"]
        event.utc_offset_minutes = utc_offset_minutes(changes["occurrence_date"])
    if "recurrence_pattern" in changes:
        pattern = changes["recurrence_pattern"]
        event.recurrence_pattern = pattern.value if pattern else None
        if pattern is None:
            event.recurrence_end_date = None
    if "recurrence_end_date" in changes:
        event.recurrence_end_date = changes["recurrence_end_date"]

    _check_recurrence_consistency(event)
    await db.commit()
    await db.refresh(event)
    logger.info(f"Updated event {event.id}", extra={"event_id": event.id})
    return EventResponse.from_model(event)


def _check_recurrence_consistency(event: Event) -> None:
    if event.recurrence_end_date is None:
        return
    if event.recurrence_pattern is None:
        raise EventValidationError(
            "recurrence_end_date requires a recurrence_pattern",
            "recurrence_end_date",
        )
    if event.recurrence_end_date < event.occurrence_date:
        raise EventValidationError(
            "recurrence_end_date must not precede occurrence_date",
            "recurrence_end_date",
        )


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(event_id: UUID, db: AsyncSession = Depends(get_db)):
    event = await get_event_or_404(event_id, db)
    await db.delete(event)
    await db.commit()
    logger.info(f"Deleted event {event_id}", extra={"event_id": event_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{event_id}/occurrences", response_model=OccurrencePreview)
async def preview_event_occurrences(
    event_id: UUID,
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Upcoming occurrences after the stored one, bounded by the series end."""
    event = await get_event_or_404(event_id, db)
    if not event.recurrence_pattern:
        return OccurrencePreview(event_id=event.id, occurrences=[])

    pattern = RecurrencePattern(event.recurrence_pattern)
    return OccurrencePreview(
        event_id=event.id,
        recurrence_pattern=pattern,
        occurrences=preview_occurrences(
            event.local_occurrence_date, pattern,
            until=event.local_recurrence_end_date, limit=limit,
        ),
    )
