"""Rotation Worker - applies one rotation pass to every due recurring event.

Invariants:
    - Only a failed batch fetch aborts run(); it raises DatabaseError and touches nothing
    - Per-event storage failures and calculation failures are logged and skipped,
      the event stays due and is retried next tick
    - Returned count == events advanced (deleted and skipped events excluded)
    - Stateless across ticks: every decision is re-derived from the stored occurrence_date
    - One step per tick; an event several periods behind catches up over several ticks

Design Decisions:
    - Pure decisions (core/rotation.py) wrapped by IO here (impureim sandwich)
    - Writes pass the previously read occurrence_date so overlapping ticks cannot double-rotate
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from merzah.core.errors import DatabaseError
from merzah.core.repository_protocols import (
    EventStore, RecurringEventLike, TickScheduler,
)
from merzah.core.rotation import (
    RotationDecision, RotationOutcome, RotationReport, SkipReason,
    decide_rotation,
)

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RotationWorker:
    """Fetch due events, decide, then advance / delete / skip each one."""

    def __init__(
        self, store: EventStore, clock: Callable[[], datetime] = utc_now,
    ):
        self._store = store
        self._clock = clock

    async def run(self) -> int:
        """One rotation pass. Returns the number of events advanced."""
        report = await self.run_report()
        return report.rotated_count

    async def run_report(self) -> RotationReport:
        events = await self._store.fetch_due_recurring_events(self._clock())

        report = RotationReport()
        for event in events:
            report.record(await self.rotate_event(event))

        summary = report.summary()
        logger.info(
            f"Rotated {summary['rotated']} events",
            extra={
                "rotated_count": summary["rotated"],
                "series_ended": summary["series_ended"],
                "skipped": summary["skipped"],
            },
        )
        return report

    async def rotate_event(self, event: RecurringEventLike) -> RotationDecision:
        decision = decide_rotation(event)
        extra = {
            "event_id": event.id,
            "pattern": (
                event.recurrence_pattern.value if event.recurrence_pattern else None
            ),
        }

        if decision.outcome is RotationOutcome.SKIPPED:
            if decision.reason is SkipReason.CALCULATION_FAILED:
                logger.error(
                    f"Failed to calculate next date for event {event.id}",
                    extra={**extra, "reason": decision.reason.value},
                )
            return decision

        try:
            applied = await self._apply(event, decision)
        except DatabaseError as e:
            logger.error(
                f"Failed to rotate event {event.id}: {e.message}",
                extra={**extra, "error_code": e.code,
                       "reason": SkipReason.STORAGE_FAILED.value},
            )
            return decision.as_skipped(SkipReason.STORAGE_FAILED)

        if not applied:
            logger.warning(
                f"Event {event.id} changed since it was read; leaving it for the next tick",
                extra={**extra, "reason": SkipReason.STALE_WRITE.value},
            )
            return decision.as_skipped(SkipReason.STALE_WRITE)

        if decision.outcome is RotationOutcome.SERIES_ENDED:
            logger.info(
                f"Deleted event {event.id} - recurrence series ended",
                extra={**extra, "outcome": decision.outcome.value},
            )
        else:
            logger.info(
                f"Rotated event {event.id} to {decision.next_date.isoformat()}",
                extra={**extra, "outcome": decision.outcome.value,
                       "next_date": decision.next_date},
            )
        return decision

    async def _apply(
        self, event: RecurringEventLike, decision: RotationDecision,
    ) -> bool:
        if decision.outcome is RotationOutcome.SERIES_ENDED:
            return await self._store.delete_event(
                event.id, expected_date=event.occurrence_date,
            )
        return await self._store.update_occurrence_date(
            event.id, decision.next_date, event.occurrence_date,
        )


def schedule_rotation(
    scheduler: TickScheduler, worker: RotationWorker, interval_seconds: int,
):
    """Register the worker's run() on the scheduler. Returns the tick coroutine."""

    async def rotation_tick() -> None:
        try:
            rotated = await worker.run()
        except DatabaseError as e:
            logger.error(
                f"Error rotating events: {e.message}",
                extra={"error_code": e.code},
            )
            return
        logger.info(
            f"Checked and rotated events, {rotated} events rotated",
            extra={"rotated_count": rotated},
        )

    scheduler.register(rotation_tick, interval_seconds)
    return rotation_tick
