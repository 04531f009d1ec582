"""Activity timeline: issued and verified counts per calendar day.

The window is always WINDOW_DAYS consecutive days ending today, oldest
first, so the chart has a fixed shape whether or not anything happened.
Records are bucketed by their calendar date in the dashboard's timezone;
time of day is discarded, so two events at 09:00 and 23:59 on the same
day land in the same bucket.
"""

from __future__ import annotations

import datetime
from collections import Counter
from collections.abc import Iterable

from credential_dashboard.models.audit_log import AuditAction, AuditLogEvent
from credential_dashboard.models.credential import CredentialRecord
from credential_dashboard.models.snapshot import DailyActivity

WINDOW_DAYS = 7


def as_aware(ts: datetime.datetime) -> datetime.datetime:
    """Treat naive timestamps as UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=datetime.UTC)
    return ts


def local_date(ts: datetime.datetime, tz: datetime.tzinfo) -> datetime.date:
    return as_aware(ts).astimezone(tz).date()


def window_days(today: datetime.date, days: int = WINDOW_DAYS) -> list[datetime.date]:
    """The `days` calendar days ending with `today`, oldest first."""
    return [today - datetime.timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def build_weekly_series(
    credentials: Iterable[CredentialRecord],
    events: Iterable[AuditLogEvent],
    *,
    today: datetime.date,
    tz: datetime.tzinfo,
) -> tuple[DailyActivity, ...]:
    """Bucket credential issues and verifications into the 7-day window."""
    issued_per_day = Counter(local_date(c.issued_at, tz) for c in credentials)
    verified_per_day = Counter(
        local_date(e.created_at, tz)
        for e in events
        if e.is_action(AuditAction.VERIFIED)
    )

    return tuple(
        DailyActivity(
            day=day,
            issued=issued_per_day[day],
            verified=verified_per_day[day],
        )
        for day in window_days(today)
    )


def chart_peak(series: Iterable[DailyActivity]) -> int:
    """Largest single-day count in the series, never below 1.

    Bar heights are drawn relative to this value; the floor keeps an
    all-zero week from dividing by zero.
    """
    return max((max(d.issued, d.verified) for d in series), default=0) or 1
