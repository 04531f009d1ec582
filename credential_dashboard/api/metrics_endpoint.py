"""Prometheus scrape endpoint.

Serves the default registry in text exposition format: HTTP metrics from
the middleware plus the dashboard_* refresh and snapshot metrics.  The
MetricsMiddleware skips this path so scrapes don't count themselves.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
