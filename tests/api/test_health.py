from __future__ import annotations

from fastapi.testclient import TestClient


def test_health_returns_ok(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    # In tests, Redis is not configured and the lifespan never started the refresher
    assert data["checks"]["redis"] == "not_configured"
    assert data["checks"]["refresher"] == "stopped"


def test_health_includes_slo_status(client: TestClient) -> None:
    data = client.get("/health").json()
    for slo_name in ("availability", "latency_p95", "refresh_success"):
        slo = data["slos"][slo_name]
        assert "current" in slo
        assert "target" in slo
        assert "healthy" in slo
    assert data["slos"]["refresh_success"]["target"] == 95.0


def test_ready_waits_for_first_snapshot(client: TestClient) -> None:
    assert client.get("/ready").status_code == 503

    client.post("/v1/dashboard/refresh")

    assert client.get("/ready").status_code == 200
