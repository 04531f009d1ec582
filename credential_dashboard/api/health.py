"""Health and readiness endpoints.

  /health (liveness + status):
    Always 200 while the process can answer.  The body says how healthy
    the service is: dependency checks, refresher state, and SLO status
    computed from the in-process Prometheus registry.

  /ready (readiness):
    200 once a snapshot has been published, 503 before that.  A fresh
    instance whose first refresh hasn't completed would otherwise serve
    the all-zero placeholder to real users.
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import REGISTRY

from credential_dashboard.api.dashboard import refresher
from credential_dashboard.core.slo import (
    evaluate_availability,
    evaluate_latency,
    evaluate_refresh_success,
)
from credential_dashboard.db.redis import redis_pool
from credential_dashboard.services.refresher import RefreshResult
from credential_dashboard.services.snapshot_store import snapshot_store

router = APIRouter(tags=["health"])


def _sum_counter(metric_name: str, label_filter: dict | None = None) -> float:
    """Sum all sample values for a counter across all label combinations.

    Example: _sum_counter("http_requests_total", {"status_code": "200"})
    sums all 200-status requests regardless of method or endpoint.
    """
    total = 0.0
    for metric in REGISTRY.collect():
        for sample in metric.samples:
            if sample.name != metric_name:
                continue
            if label_filter and not all(
                sample.labels.get(k) == v for k, v in label_filter.items()
            ):
                continue
            total += sample.value
    return total


@router.get("/health")
async def health() -> dict:
    """Liveness probe + dependency status + SLO compliance.

    Returns 200 even when degraded; the status field carries the
    actual health.
    """
    checks: dict[str, str] = {}
    overall = "ok"

    if redis_pool is not None:
        try:
            await redis_pool.ping()  # type: ignore[misc]
            checks["redis"] = "ok"
        except Exception:
            checks["redis"] = "degraded"
            overall = "degraded"
    else:
        checks["redis"] = "not_configured"

    checks["refresher"] = "running" if refresher.running else "stopped"

    # Per-process approximations; Prometheus does the real aggregation.
    total_all = _sum_counter("http_requests_total")
    total_5xx = sum(
        _sum_counter("http_requests_total", {"status_code": str(code)})
        for code in range(500, 512)
    )
    availability_status = evaluate_availability(int(total_all), int(total_5xx))

    # avg * 2 is a crude p95 stand-in; histogram_quantile() in Prometheus
    # is the accurate version.
    duration_sum = 0.0
    duration_count = 0.0
    for metric in REGISTRY.collect():
        for sample in metric.samples:
            if sample.name == "http_request_duration_seconds_sum":
                duration_sum += sample.value
            elif sample.name == "http_request_duration_seconds_count":
                duration_count += sample.value

    if duration_count > 0:
        avg_ms = (duration_sum / duration_count) * 1000
        p95_estimate_ms = avg_ms * 2.0
    else:
        p95_estimate_ms = 0.0
    latency_status = evaluate_latency(p95_estimate_ms)

    published = _sum_counter(
        "dashboard_refreshes_total", {"result": RefreshResult.PUBLISHED.value}
    )
    failed = _sum_counter(
        "dashboard_refreshes_total", {"result": RefreshResult.FAILED.value}
    )
    errored = _sum_counter(
        "dashboard_refreshes_total", {"result": RefreshResult.ERROR.value}
    )
    refresh_status = evaluate_refresh_success(
        total_refreshes=int(published + failed + errored),
        failed_refreshes=int(failed + errored),
    )

    slos = {}
    for s in [availability_status, latency_status, refresh_status]:
        slos[s.slo.name] = {
            "current": s.current,
            "target": s.slo.target,
            "healthy": s.healthy,
        }

    return {
        "status": overall,
        "checks": checks,
        "slos": slos,
    }


@router.get("/ready")
async def ready() -> Response:
    """Readiness probe: has a snapshot been published yet?"""
    if await snapshot_store.latest() is None:
        return Response(status_code=503)
    return Response(status_code=200)
