"""PostgreSQL implementation of DashboardDataSource."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from credential_dashboard.core.errors import DataUnavailable
from credential_dashboard.db.tables import AuditLogRow, CredentialRow
from credential_dashboard.models.audit_log import AuditLogEvent, AuditMetadata
from credential_dashboard.models.credential import CredentialRecord


class PgDashboardDataSource:
    """Satisfies the DashboardDataSource Protocol using PostgreSQL via SQLAlchemy.

    Each read opens its own session: the refresher runs both reads
    concurrently, and an AsyncSession must not be shared between
    concurrent tasks.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def fetch_credentials(self) -> Sequence[CredentialRecord]:
        stmt = select(CredentialRow)
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError as e:
            raise DataUnavailable("credentials", type(e).__name__) from e
        return tuple(_row_to_credential(row) for row in rows)

    async def fetch_recent_audit_log(self, limit: int) -> Sequence[AuditLogEvent]:
        stmt = (
            select(AuditLogRow)
            .order_by(AuditLogRow.created_at.desc())
            .limit(limit)
        )
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError as e:
            raise DataUnavailable("audit_log", type(e).__name__) from e
        return tuple(_row_to_event(row) for row in rows)


def _row_to_credential(row: CredentialRow) -> CredentialRecord:
    return CredentialRecord(
        id=str(row.id),
        issued_at=row.issue_date,
        institution_id=row.institution_address or None,
        revoked=bool(row.revoked),
    )


def _row_to_event(row: AuditLogRow) -> AuditLogEvent:
    return AuditLogEvent(
        id=str(row.id),
        action=row.action,
        created_at=row.created_at,
        metadata=AuditMetadata.from_raw(row.metadata_json),
    )
