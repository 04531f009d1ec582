from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from credential_dashboard.api.dashboard import refresher
from credential_dashboard.api.dashboard import router as dashboard_router
from credential_dashboard.api.health import router as health_router
from credential_dashboard.api.metrics_endpoint import router as metrics_router
from credential_dashboard.core.config import SETTINGS
from credential_dashboard.core.logging import setup_logging
from credential_dashboard.db.engine import lifespan_db
from credential_dashboard.db.redis import lifespan_redis
from credential_dashboard.middleware.metrics import MetricsMiddleware
from credential_dashboard.middleware.request_context import (
    RequestContextMiddleware,
    install_request_context_filter,
)

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
install_request_context_filter()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Backing services come up first and go down last; the refresher
    # needs both while it runs.
    async with lifespan_db():
        async with lifespan_redis():
            if SETTINGS.refresh_on_startup:
                refresher.start()
            try:
                yield
            finally:
                await refresher.stop()


app = FastAPI(
    title="credential-dashboard",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# Last-added runs first: RequestContext → Metrics → CORS → route handler
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(dashboard_router)
app.include_router(health_router)

logger.info(
    "credential-dashboard started  env=%s log_level=%s port=%d refresh=%s/%.0fs",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.refresh_on_startup else "off",
    SETTINGS.refresh_interval_seconds,
)
