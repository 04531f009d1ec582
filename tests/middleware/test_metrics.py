"""Tests for the Prometheus metrics middleware.

The registry is process-global and counters only go up, so every test
asserts on the delta between a reading before and after the request.
"""

from __future__ import annotations

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY


def _get_sample(name: str, labels: dict | None = None) -> float:
    value = REGISTRY.get_sample_value(name, labels=labels or {})
    return value if value is not None else 0.0


def test_request_counter_increments(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/health")
    assert _get_sample("http_requests_total", labels) - before >= 1


def test_request_duration_histogram_observes(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/v1/dashboard/stats"}
    before = _get_sample("http_request_duration_seconds_count", labels)
    client.get("/v1/dashboard/stats")
    assert _get_sample("http_request_duration_seconds_count", labels) - before >= 1


def test_unknown_paths_share_one_label(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "unmatched", "status_code": "404"}
    before = _get_sample("http_requests_total", labels)
    client.get("/no/such/path")
    client.get("/another/missing/path")
    assert _get_sample("http_requests_total", labels) - before == 2
    assert (
        _get_sample(
            "http_requests_total",
            {"method": "GET", "endpoint": "/no/such/path", "status_code": "404"},
        )
        == 0
    )


def test_metrics_endpoint_exposes_dashboard_metrics(client: TestClient) -> None:
    client.post("/v1/dashboard/refresh")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "http_requests_total" in resp.text
    assert "dashboard_refreshes_total" in resp.text
    assert "dashboard_snapshot_value" in resp.text


def test_metrics_endpoint_not_self_instrumented(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/metrics", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/metrics")
    client.get("/metrics")
    assert _get_sample("http_requests_total", labels) == before
