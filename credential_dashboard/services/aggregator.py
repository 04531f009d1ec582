"""Dashboard aggregation: raw records in, one DashboardSnapshot out.

Everything here is pure computation over the two lists the data source
returned.  "now" is passed in explicitly, so the same inputs with the
same now always produce an equal snapshot.

Inputs:
  credentials  every credential record (unbounded)
  events       the most recent audit-log events, newest-first, capped
                 by the data source (DASHBOARD_AUDIT_LOG_LIMIT)

Note that total_verifications counts verified events *within the capped
window*, not across all history.  With the default cap of 100 it is a
"recent verifications" figure.
"""

from __future__ import annotations

import datetime
import logging
import math
from collections.abc import Sequence

from credential_dashboard.core.metrics import UNORDERED_AUDIT_LOG
from credential_dashboard.models.audit_log import AuditAction, AuditLogEvent
from credential_dashboard.models.credential import CredentialRecord
from credential_dashboard.models.snapshot import DashboardSnapshot
from credential_dashboard.services.notifications import rank_notifications
from credential_dashboard.services.time_series import (
    as_aware,
    build_weekly_series,
)

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_WINDOW = datetime.timedelta(days=7)


# ---------------------------------------------------------------------------
# Scalar reductions
# ---------------------------------------------------------------------------


def count_revoked(credentials: Sequence[CredentialRecord]) -> int:
    return sum(1 for c in credentials if c.revoked)


def count_verifications(events: Sequence[AuditLogEvent]) -> int:
    return sum(1 for e in events if e.is_action(AuditAction.VERIFIED))


def count_recent_activity(
    events: Sequence[AuditLogEvent], now: datetime.datetime
) -> int:
    """Events strictly newer than now − 7 days, any action kind."""
    cutoff = as_aware(now) - RECENT_ACTIVITY_WINDOW
    return sum(1 for e in events if as_aware(e.created_at) > cutoff)


def count_active_institutions(credentials: Sequence[CredentialRecord]) -> int:
    return len({c.institution_id for c in credentials if c.institution_id})


def success_rate(snapshot: DashboardSnapshot) -> int:
    """Share of credentials still valid, as a whole percentage.

    0 when there are no credentials.  Halves round up (12.5 -> 13), the
    way the dashboard has always displayed it.
    """
    if snapshot.total_credentials == 0:
        return 0
    return math.floor(100 * snapshot.total_issued / snapshot.total_credentials + 0.5)


# ---------------------------------------------------------------------------
# Ordering guard
# ---------------------------------------------------------------------------


def is_newest_first(events: Sequence[AuditLogEvent]) -> bool:
    return all(
        as_aware(earlier.created_at) >= as_aware(later.created_at)
        for earlier, later in zip(events, events[1:])
    )


def _newest_first(events: Sequence[AuditLogEvent]) -> Sequence[AuditLogEvent]:
    if is_newest_first(events):
        return events
    logger.warning(
        "Audit log batch of %d events is not newest-first; re-sorting", len(events)
    )
    UNORDERED_AUDIT_LOG.inc()
    # sorted() is stable: events with equal timestamps keep source order.
    return sorted(events, key=lambda e: as_aware(e.created_at), reverse=True)


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


def build_snapshot(
    credentials: Sequence[CredentialRecord] | None,
    events: Sequence[AuditLogEvent] | None,
    *,
    now: datetime.datetime,
    tz: datetime.tzinfo = datetime.UTC,
) -> DashboardSnapshot:
    """Compute the full dashboard snapshot.

    Missing inputs (None) are treated as empty lists.  The inputs are
    never mutated.
    """
    credentials = credentials or ()
    events = _newest_first(events or ())
    now = as_aware(now)

    total = len(credentials)
    revoked = count_revoked(credentials)

    return DashboardSnapshot(
        total_credentials=total,
        total_issued=total - revoked,
        revoked_credentials=revoked,
        total_verifications=count_verifications(events),
        recent_activity=count_recent_activity(events, now),
        active_institutions=count_active_institutions(credentials),
        weekly_data=build_weekly_series(
            credentials, events, today=now.astimezone(tz).date(), tz=tz
        ),
        recent_notifications=rank_notifications(events, tz=tz),
        generated_at=now,
    )


def empty_snapshot(
    now: datetime.datetime, *, tz: datetime.tzinfo = datetime.UTC
) -> DashboardSnapshot:
    """The all-zero snapshot shown before the first successful refresh."""
    return build_snapshot((), (), now=now, tz=tz)
