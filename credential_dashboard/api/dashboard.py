"""Dashboard read endpoints.

- GET  /v1/dashboard/stats    latest published snapshot (+ derived fields)
- POST /v1/dashboard/refresh  run one refresh cycle now

The stats endpoint never computes anything from the data source itself;
it reads whatever the refresher last published.  Before the first
successful refresh it returns the all-zero snapshot with ready=false,
so the presentation layer can show its loading state.
"""

from __future__ import annotations

import datetime

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from credential_dashboard.core.config import SETTINGS
from credential_dashboard.db.engine import async_session_factory
from credential_dashboard.models.snapshot import DashboardSnapshot, Severity
from credential_dashboard.repos.dashboard_source import (
    DashboardDataSource,
    InMemoryDashboardDataSource,
)
from credential_dashboard.repos.pg_dashboard_source import PgDashboardDataSource
from credential_dashboard.services.aggregator import empty_snapshot, success_rate
from credential_dashboard.services.refresher import DashboardRefresher, RefreshResult
from credential_dashboard.services.snapshot_store import snapshot_store
from credential_dashboard.services.time_series import chart_peak

router = APIRouter(prefix="/v1/dashboard", tags=["dashboard"])

# --- Module-level singletons ---
if async_session_factory is not None:
    data_source: DashboardDataSource = PgDashboardDataSource(async_session_factory)
else:
    data_source = InMemoryDashboardDataSource()

refresher = DashboardRefresher(
    data_source,
    snapshot_store,
    interval_seconds=SETTINGS.refresh_interval_seconds,
    audit_log_limit=SETTINGS.audit_log_limit,
    tz=SETTINGS.tzinfo,
)


# --- Pydantic schemas (camelCase on the wire) ---


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DailyActivityOut(_CamelModel):
    date: str
    issued: int
    verified: int


class NotificationOut(_CamelModel):
    id: str
    title: str
    description: str
    timestamp: str
    type: Severity


class DashboardStatsOut(_CamelModel):
    ready: bool
    generated_at: datetime.datetime
    total_credentials: int
    total_issued: int
    revoked_credentials: int
    total_verifications: int
    recent_activity: int
    active_institutions: int
    success_rate: int
    chart_peak: int
    weekly_data: list[DailyActivityOut]
    recent_notifications: list[NotificationOut]


class RefreshOut(_CamelModel):
    status: RefreshResult


def _to_stats_out(snapshot: DashboardSnapshot, *, ready: bool) -> DashboardStatsOut:
    return DashboardStatsOut(
        ready=ready,
        generated_at=snapshot.generated_at,
        total_credentials=snapshot.total_credentials,
        total_issued=snapshot.total_issued,
        revoked_credentials=snapshot.revoked_credentials,
        total_verifications=snapshot.total_verifications,
        recent_activity=snapshot.recent_activity,
        active_institutions=snapshot.active_institutions,
        success_rate=success_rate(snapshot),
        chart_peak=chart_peak(snapshot.weekly_data),
        weekly_data=[
            DailyActivityOut(date=d.label, issued=d.issued, verified=d.verified)
            for d in snapshot.weekly_data
        ],
        recent_notifications=[
            NotificationOut(
                id=n.id,
                title=n.title,
                description=n.description,
                timestamp=n.timestamp,
                type=n.severity,
            )
            for n in snapshot.recent_notifications
        ],
    )


@router.get("/stats", response_model=DashboardStatsOut)
async def get_dashboard_stats() -> DashboardStatsOut:
    snapshot = await snapshot_store.latest()
    if snapshot is None:
        now = datetime.datetime.now(datetime.UTC)
        return _to_stats_out(empty_snapshot(now, tz=SETTINGS.tzinfo), ready=False)
    return _to_stats_out(snapshot, ready=True)


@router.post("/refresh", response_model=RefreshOut)
async def trigger_refresh() -> RefreshOut:
    """Run one refresh cycle immediately.

    A failed data-source read is not an HTTP error: the response says
    "failed" and the previous snapshot stays published.
    """
    result = await refresher.refresh()
    return RefreshOut(status=result)
