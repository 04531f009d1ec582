"""Application metrics using the Prometheus client library.

All metrics are defined here, one inventory of everything the service
measures.  Other modules import specific metrics and increment/observe
them at the point of action.

Two groups:

  HTTP metrics: filled in by the MetricsMiddleware for every request
  to the dashboard API.

  Refresh metrics: filled in by the DashboardRefresher once per
  refresh cycle.  REFRESH_COUNT by result is the main alerting signal:
  a dashboard whose refreshes keep failing still *looks* fine (it
  shows the last good snapshot), so the counter is how you notice.

SNAPSHOT_VALUE mirrors the scalar fields of the last published snapshot
as gauges, so Prometheus/Grafana can chart the same numbers the
dashboard shows without scraping the JSON endpoint.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Refresh metrics (populated by the DashboardRefresher)
# ---------------------------------------------------------------------------

REFRESH_COUNT = Counter(
    "dashboard_refreshes_total",
    "Dashboard refresh cycles by result",
    ["result"],  # RefreshResult values
)

REFRESH_DURATION = Histogram(
    "dashboard_refresh_duration_seconds",
    "Time from refresh start (both fetches issued) to snapshot computed",
    # Two DB reads + an O(records) pass; anything past a few seconds
    # means the data source is struggling.
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

SNAPSHOT_VALUE = Gauge(
    "dashboard_snapshot_value",
    "Scalar fields of the most recently published dashboard snapshot",
    ["field"],
)

UNORDERED_AUDIT_LOG = Counter(
    "dashboard_unordered_audit_log_total",
    "Audit-log batches that arrived out of newest-first order and were re-sorted",
)
