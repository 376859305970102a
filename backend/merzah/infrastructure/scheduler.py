"""Interval Tick Scheduler - APScheduler-backed periodic trigger.

Invariants:
    - At most one instance of a job runs at a time (max_instances=1); a tick that
      fires while the previous one is still running is skipped, not queued
    - Missed ticks coalesce into a single run
    - start()/shutdown() are idempotent
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler

logger = logging.getLogger(__name__)


class IntervalTickScheduler:
    """TickScheduler over an AsyncIOScheduler (must start inside a running loop)."""

    def __init__(self, scheduler: AsyncIOScheduler | None = None):
        self._scheduler = scheduler or AsyncIOScheduler(timezone=timezone.utc)

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def register(
        self,
        callback: Callable[[], Awaitable[None]],
        interval_seconds: int,
        job_id: str | None = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        job_id = job_id or callback.__name__
        self._scheduler.add_job(
            callback,
            trigger="interval",
            seconds=interval_seconds,
            id=job_id,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        logger.info(f"Registered job {job_id} every {interval_seconds}s")

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info("Scheduler started")

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")
