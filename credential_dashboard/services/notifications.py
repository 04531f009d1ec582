"""Notification feed: the latest event of each presentable kind.

PRECONDITION: ``events`` is ordered newest-first (the data source's
contract).  The ranker takes the first match per kind and does not
re-sort, so with unordered input "latest" silently becomes "first in
input order".  build_snapshot() checks the ordering before calling in.

Output order is fixed by kind (issued, verified, shared), not by
recency across kinds.
"""

from __future__ import annotations

import datetime
from collections.abc import Iterable
from dataclasses import dataclass

from credential_dashboard.models.audit_log import AuditAction, AuditLogEvent
from credential_dashboard.models.snapshot import Notification, Severity
from credential_dashboard.services.time_series import local_date

MAX_NOTIFICATIONS = 3
DEFAULT_CREDENTIAL_TITLE = "Academic Credential"


@dataclass(frozen=True, slots=True)
class _Template:
    title: str
    id_suffix: str
    severity: Severity
    description: str


# Priority order of the feed.
_TEMPLATES: dict[AuditAction, _Template] = {
    AuditAction.ISSUED: _Template(
        title="CREDENTIAL ISSUED",
        id_suffix="",
        severity=Severity.SUCCESS,
        description="New credential issued: {credential_title}",
    ),
    AuditAction.VERIFIED: _Template(
        title="CREDENTIAL VERIFIED",
        # Suffixes keep ids unique when events of different kinds share an id.
        id_suffix="_verify",
        severity=Severity.INFO,
        description="A credential was successfully verified by a third party",
    ),
    AuditAction.SHARED: _Template(
        title="CREDENTIAL SHARED",
        id_suffix="_share",
        severity=Severity.INFO,
        description="A student shared their credential with an organization",
    ),
}


def _to_notification(
    action: AuditAction, event: AuditLogEvent, tz: datetime.tzinfo
) -> Notification:
    template = _TEMPLATES[action]
    title = event.metadata.credential_title or DEFAULT_CREDENTIAL_TITLE
    return Notification(
        id=f"{event.id}{template.id_suffix}",
        title=template.title,
        description=template.description.format(credential_title=title),
        timestamp=local_date(event.created_at, tz).isoformat(),
        severity=template.severity,
    )


def rank_notifications(
    events: Iterable[AuditLogEvent], *, tz: datetime.tzinfo = datetime.UTC
) -> tuple[Notification, ...]:
    """Return up to three notifications: latest issued, verified, shared."""
    latest: dict[AuditAction, AuditLogEvent] = {}
    for event in events:
        for action in _TEMPLATES:
            if action not in latest and event.is_action(action):
                latest[action] = event
        if len(latest) == len(_TEMPLATES):
            break

    notifications = [
        _to_notification(action, latest[action], tz)
        for action in _TEMPLATES
        if action in latest
    ]
    return tuple(notifications[:MAX_NOTIFICATIONS])
