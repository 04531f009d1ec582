from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from credential_dashboard.core.errors import DataUnavailable
from credential_dashboard.models.audit_log import AuditLogEvent
from credential_dashboard.models.credential import CredentialRecord
from credential_dashboard.services.time_series import as_aware


@runtime_checkable
class DashboardDataSource(Protocol):
    """Where the dashboard's raw records come from.

    Both reads raise DataUnavailable on any transport/query failure.
    fetch_recent_audit_log returns at most ``limit`` events, newest-first.
    """

    async def fetch_credentials(self) -> Sequence[CredentialRecord]: ...
    async def fetch_recent_audit_log(self, limit: int) -> Sequence[AuditLogEvent]: ...


class InMemoryDashboardDataSource:
    """In-memory data source for dev and tests; no database needed.

    Audit events are stored in insertion order and served newest-first
    by created_at, like the SQL query does.  ``fail_with`` makes the next
    reads raise, to exercise the refresh failure path.
    """

    def __init__(self) -> None:
        self._credentials: list[CredentialRecord] = []
        self._events: list[AuditLogEvent] = []
        self.fail_with: DataUnavailable | None = None

    def add_credential(self, credential: CredentialRecord) -> None:
        self._credentials.append(credential)

    def add_event(self, event: AuditLogEvent) -> None:
        self._events.append(event)

    def clear(self) -> None:
        self._credentials.clear()
        self._events.clear()
        self.fail_with = None

    async def fetch_credentials(self) -> Sequence[CredentialRecord]:
        if self.fail_with is not None:
            raise self.fail_with
        return tuple(self._credentials)

    async def fetch_recent_audit_log(self, limit: int) -> Sequence[AuditLogEvent]:
        if self.fail_with is not None:
            raise self.fail_with
        newest_first = sorted(
            self._events, key=lambda e: as_aware(e.created_at), reverse=True
        )
        return tuple(newest_first[:limit])
