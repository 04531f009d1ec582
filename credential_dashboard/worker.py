"""Standalone refresher process.

RUN:  python -m credential_dashboard.worker

Runs the same DashboardRefresher the API starts in its lifespan, but in
its own process.  Use it when several API instances share one Redis
snapshot store: run a single worker and set
DASHBOARD_REFRESH_ON_STARTUP=false on the API instances, so the data
source is polled once per interval instead of once per instance.

  api:    uvicorn credential_dashboard.main:app --host 0.0.0.0 --port 8000
  worker: python -m credential_dashboard.worker
"""

from __future__ import annotations

import asyncio
import logging
import signal

from credential_dashboard.api.dashboard import refresher
from credential_dashboard.core.config import SETTINGS
from credential_dashboard.core.logging import setup_logging
from credential_dashboard.db.engine import lifespan_db
from credential_dashboard.db.redis import lifespan_redis, redis_pool

logger = logging.getLogger("worker")


async def run_worker(stop_event: asyncio.Event | None = None) -> None:
    """Run the refresher until stop_event is set, then stop it cleanly.

    Without an explicit event, SIGINT/SIGTERM set one.
    """
    if redis_pool is None:
        logger.warning(
            "No REDIS_URL configured; snapshots published by this worker "
            "are not visible to any API process"
        )

    if stop_event is None:
        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, stop_event.set)

    async with lifespan_db():
        async with lifespan_redis():
            refresher.start()
            logger.info(
                "Worker started, refreshing every %.1fs",
                SETTINGS.refresh_interval_seconds,
            )
            try:
                await stop_event.wait()
            finally:
                await refresher.stop()


if __name__ == "__main__":
    setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
    asyncio.run(run_worker())
