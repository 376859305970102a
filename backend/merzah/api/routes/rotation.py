"""Rotation Routes - manual trigger for one rotation pass.

Invariants:
    - Runs the same RotationWorker pass the scheduler runs
    - A failed batch fetch surfaces as DatabaseError (503 via the global handler)
"""

import logging

from fastapi import APIRouter, Depends

from merzah.infrastructure.database import get_db_manager
from merzah.infrastructure.event_store import SqlAlchemyEventStore
from merzah.schemas.event import RotationRunResponse
from merzah.services.rotation_worker import RotationWorker

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/rotation", tags=["rotation"])


def get_rotation_worker() -> RotationWorker:
    return RotationWorker(SqlAlchemyEventStore(get_db_manager()))


@router.post("/run", response_model=RotationRunResponse)
async def run_rotation(worker: RotationWorker = Depends(get_rotation_worker)):
    """Run one rotation pass now and report what happened."""
    report = await worker.run_report()
    logger.info("Manual rotation pass finished", extra={
        "rotated_count": report.rotated_count,
    })
    return RotationRunResponse(**report.summary())
