"""Periodic dashboard refresh.

THE REFRESH CYCLE
------------------
  1. Issue both data-source reads concurrently (credentials, audit log)
  2. Wait for BOTH to resolve; a snapshot is never built from one list
  3. Build a brand-new DashboardSnapshot (services/aggregator.py)
  4. Publish it to the snapshot store, replacing the previous one

If either read raises DataUnavailable the cycle aborts: nothing is
published, the failure is logged and counted, and the dashboard keeps
showing the previous snapshot.  There are no retries; the next tick is
the retry.

SCHEDULING
-----------
The refresher is an explicit handle owned by whoever displays the
snapshots (the FastAPI lifespan, or the standalone worker):

  refresher.start()       first refresh now, then one every interval
  await refresher.stop()  cancel the timer and any in-flight refresh

Each tick launches its refresh as a separate task, so a slow data source
does not delay the schedule, and refreshes may overlap.

OVERLAPPING REFRESHES
----------------------
Every refresh takes a generation number when it starts.  A refresh that
completes after a *newer* one has already published is dropped as
"stale".  The generation check and the store write happen under one
lock, so a slow publish cannot let an older snapshot overwrite a newer
one.  The published snapshot therefore always belongs to the most
recently started refresh that has completed.
"""

from __future__ import annotations

import asyncio
import datetime
import logging
import time
from collections.abc import Callable, Sequence
from enum import StrEnum

from credential_dashboard.core.errors import DataUnavailable
from credential_dashboard.core.metrics import (
    REFRESH_COUNT,
    REFRESH_DURATION,
    SNAPSHOT_VALUE,
)
from credential_dashboard.models.audit_log import AuditLogEvent
from credential_dashboard.models.credential import CredentialRecord
from credential_dashboard.models.snapshot import DashboardSnapshot
from credential_dashboard.repos.dashboard_source import DashboardDataSource
from credential_dashboard.services.aggregator import build_snapshot
from credential_dashboard.services.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime.datetime]


class RefreshResult(StrEnum):
    PUBLISHED = "published"
    FAILED = "failed"
    STALE = "stale"
    ERROR = "error"


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


def _record_snapshot_gauges(snapshot: DashboardSnapshot) -> None:
    for name in (
        "total_credentials",
        "total_issued",
        "revoked_credentials",
        "total_verifications",
        "recent_activity",
        "active_institutions",
    ):
        SNAPSHOT_VALUE.labels(field=name).set(getattr(snapshot, name))


class DashboardRefresher:
    def __init__(
        self,
        source: DashboardDataSource,
        store: SnapshotStore,
        *,
        interval_seconds: float = 30.0,
        audit_log_limit: int = 100,
        tz: datetime.tzinfo = datetime.UTC,
        clock: Clock = _utcnow,
    ) -> None:
        self._source = source
        self._store = store
        self._interval = interval_seconds
        self._audit_log_limit = audit_log_limit
        self._tz = tz
        self._clock = clock

        self._started_generation = 0
        self._published_generation = 0
        self._loop_task: asyncio.Task[None] | None = None
        self._in_flight: set[asyncio.Task[None]] = set()
        # Held across the generation check and the publish, so an older
        # refresh cannot land in the store after a newer one.
        self._publish_lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    # ------------------------------------------------------------------
    # One refresh cycle
    # ------------------------------------------------------------------

    async def refresh(self) -> RefreshResult:
        """Run one refresh cycle and report what happened.

        Raises only for unexpected errors; DataUnavailable is handled
        here and reported as RefreshResult.FAILED.
        """
        self._started_generation += 1
        generation = self._started_generation
        start = time.monotonic()

        try:
            credentials, events = await self._fetch()
        except DataUnavailable as e:
            REFRESH_COUNT.labels(result=RefreshResult.FAILED.value).inc()
            logger.exception(
                "Dashboard refresh %d failed: %s",
                generation,
                e,
                extra={"refresh_id": generation, "result": RefreshResult.FAILED.value},
            )
            return RefreshResult.FAILED

        snapshot = build_snapshot(credentials, events, now=self._clock(), tz=self._tz)
        duration = time.monotonic() - start
        REFRESH_DURATION.observe(duration)

        async with self._publish_lock:
            if generation < self._published_generation:
                REFRESH_COUNT.labels(result=RefreshResult.STALE.value).inc()
                logger.debug(
                    "Dashboard refresh %d superseded by %d; dropping",
                    generation,
                    self._published_generation,
                    extra={
                        "refresh_id": generation,
                        "result": RefreshResult.STALE.value,
                    },
                )
                return RefreshResult.STALE

            await self._store.publish(snapshot)
            self._published_generation = generation

        _record_snapshot_gauges(snapshot)
        REFRESH_COUNT.labels(result=RefreshResult.PUBLISHED.value).inc()

        logger.info(
            "Dashboard refresh %d published: %d credentials, %d events (%.1fms)",
            generation,
            len(credentials),
            len(events),
            duration * 1000,
            extra={
                "refresh_id": generation,
                "result": RefreshResult.PUBLISHED.value,
                "duration_ms": round(duration * 1000, 1),
            },
        )
        return RefreshResult.PUBLISHED

    async def _fetch(
        self,
    ) -> tuple[Sequence[CredentialRecord], Sequence[AuditLogEvent]]:
        # return_exceptions so a failure in one read doesn't leave the
        # other running with nobody awaiting it
        credentials, events = await asyncio.gather(
            self._source.fetch_credentials(),
            self._source.fetch_recent_audit_log(self._audit_log_limit),
            return_exceptions=True,
        )
        for outcome in (credentials, events):
            if isinstance(outcome, BaseException):
                raise outcome
        return credentials, events

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the periodic schedule.  Must be called from a running loop."""
        if self.running:
            return
        self._loop_task = asyncio.create_task(self._run(), name="dashboard-refresher")
        logger.info("Dashboard refresher started (interval=%.1fs)", self._interval)

    async def stop(self) -> None:
        """Cancel the schedule and any refresh still in flight."""
        tasks = list(self._in_flight)
        if self._loop_task is not None:
            tasks.append(self._loop_task)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._loop_task = None
        self._in_flight.clear()
        logger.info("Dashboard refresher stopped")

    async def _run(self) -> None:
        while True:
            task = asyncio.create_task(self._tick())
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)
            await asyncio.sleep(self._interval)

    async def _tick(self) -> None:
        try:
            await self.refresh()
        except Exception:
            # Keep the schedule alive; the next tick tries again.
            REFRESH_COUNT.labels(result=RefreshResult.ERROR.value).inc()
            logger.exception("Unexpected error during dashboard refresh")
