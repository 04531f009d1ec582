"""Every response carries an X-Request-ID, generated or echoed."""

from __future__ import annotations

import logging
import uuid

import pytest
from fastapi.testclient import TestClient

from credential_dashboard.middleware.request_context import (
    _RequestContextFilter,
    request_id_var,
)


def test_request_id_generated_when_not_provided(client: TestClient) -> None:
    resp = client.get("/health")
    req_id = resp.headers.get("x-request-id")
    assert req_id is not None
    uuid.UUID(req_id)


def test_request_id_echoed_when_provided(client: TestClient) -> None:
    custom_id = "dashboard-ui-req-123"
    resp = client.get("/v1/dashboard/stats", headers={"X-Request-ID": custom_id})
    assert resp.headers.get("x-request-id") == custom_id


def test_request_id_present_on_error_responses(client: TestClient) -> None:
    resp = client.get("/v1/dashboard/nope")
    assert resp.status_code == 404
    assert resp.headers.get("x-request-id") is not None


def test_summary_line_logged_per_request(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="credential_dashboard.middleware.request_context"):
        client.get("/health", headers={"X-Request-ID": "trace-me"})

    records = [r for r in caplog.records if getattr(r, "request_id", None) == "trace-me"]
    assert len(records) == 1
    assert records[0].path == "/health"  # type: ignore[attr-defined]
    assert records[0].status_code == 200  # type: ignore[attr-defined]


def _bare_record() -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, "x.py", 1, "msg", (), None)


def test_filter_uses_placeholder_outside_requests() -> None:
    record = _bare_record()
    _RequestContextFilter().filter(record)
    assert record.request_id == "-"  # type: ignore[attr-defined]


def test_filter_copies_current_request_id() -> None:
    token = request_id_var.set("abc")
    try:
        record = _bare_record()
        _RequestContextFilter().filter(record)
    finally:
        request_id_var.reset(token)
    assert record.request_id == "abc"  # type: ignore[attr-defined]
