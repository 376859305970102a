"""Rotation Decisions - pure per-event verdicts and the batch report they fold into.

Invariants:
    - Every due event yields exactly one RotationDecision per tick
    - Outcomes are advanced, series_ended or skipped; there is no other state
    - A series ends only when the computed next date is strictly after recurrence_end_date
    - rotated_count counts advanced decisions only (never deleted or skipped events)

Design Decisions:
    - Skips are tagged results with a SkipReason, not exceptions
    - decide_rotation has no IO; the worker applies the verdict to the store
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from merzah.core.domain_types import EventId, RecurrencePattern
from merzah.core.recurrence import next_occurrence
from merzah.core.repository_protocols import RecurringEventLike


class RotationOutcome(str, Enum):
    ADVANCED = "advanced"
    SERIES_ENDED = "series_ended"
    SKIPPED = "skipped"


class SkipReason(str, Enum):
    NOT_RECURRING = "not_recurring"
    CALCULATION_FAILED = "calculation_failed"
    STORAGE_FAILED = "storage_failed"
    STALE_WRITE = "stale_write"


@dataclass(frozen=True)
class RecurringEvent:
    """The slice of an event the rotation engine reads."""
    id: EventId
    occurrence_date: datetime
    recurrence_pattern: RecurrencePattern | None = None
    recurrence_end_date: datetime | None = None


@dataclass(frozen=True)
class RotationDecision:
    event_id: EventId
    outcome: RotationOutcome
    next_date: datetime | None = None
    reason: SkipReason | None = None

    def as_skipped(self, reason: SkipReason) -> "RotationDecision":
        return replace(self, outcome=RotationOutcome.SKIPPED, reason=reason)


def decide_rotation(event: RecurringEventLike) -> RotationDecision:
    """Compute what a tick should do with one due event. Pure, no IO."""
    if event.recurrence_pattern is None:
        return RotationDecision(
            event.id, RotationOutcome.SKIPPED, reason=SkipReason.NOT_RECURRING,
        )

    next_date = next_occurrence(event.occurrence_date, event.recurrence_pattern)
    if next_date is None:
        return RotationDecision(
            event.id, RotationOutcome.SKIPPED,
            reason=SkipReason.CALCULATION_FAILED,
        )

    end = event.recurrence_end_date
    if end is not None and next_date > end:
        return RotationDecision(
            event.id, RotationOutcome.SERIES_ENDED, next_date=next_date,
        )
    return RotationDecision(
        event.id, RotationOutcome.ADVANCED, next_date=next_date,
    )


@dataclass
class RotationReport:
    """Fold of one tick's decisions."""
    decisions: list[RotationDecision] = field(default_factory=list)

    def record(self, decision: RotationDecision) -> None:
        self.decisions.append(decision)

    def _with(self, outcome: RotationOutcome) -> list[RotationDecision]:
        return [d for d in self.decisions if d.outcome is outcome]

    @property
    def advanced(self) -> list[RotationDecision]:
        return self._with(RotationOutcome.ADVANCED)

    @property
    def series_ended(self) -> list[RotationDecision]:
        return self._with(RotationOutcome.SERIES_ENDED)

    @property
    def skipped(self) -> list[RotationDecision]:
        return self._with(RotationOutcome.SKIPPED)

    @property
    def rotated_count(self) -> int:
        return len(self.advanced)

    def summary(self) -> dict:
        """Flat counts for logs and the manual trigger response."""
        skipped_by_reason: dict[str, int] = {}
        for d in self.skipped:
            key = d.reason.value if d.reason else "unknown"
            skipped_by_reason[key] = skipped_by_reason.get(key, 0) + 1
        return {
            "processed": len(self.decisions),
            "rotated": self.rotated_count,
            "series_ended": len(self.series_ended),
            "skipped": len(self.skipped),
            "skipped_by_reason": skipped_by_reason,
        }
