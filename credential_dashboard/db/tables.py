"""SQLAlchemy table definitions for the tables the dashboard reads.

The dashboard never writes to these tables; they belong to the issuing
side of the credential platform.  The mappings exist so the Postgres
data source can build typed queries.  Rows are converted to the frozen
dataclass models in credential_dashboard/models/ by the data source.
"""

from __future__ import annotations

import datetime
import uuid

from sqlalchemy import Boolean, DateTime, Index, String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from credential_dashboard.db.engine import Base


class CredentialRow(Base):
    __tablename__ = "credentials"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    institution_address: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )  # issuer wallet address
    issue_date: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class AuditLogRow(Base):
    __tablename__ = "audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    action: Mapped[str] = mapped_column(
        String(64), nullable=False
    )  # issued|verified|shared|revoked|...
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    # "metadata" is reserved on declarative classes
    metadata_json: Mapped[dict | None] = mapped_column(
        "metadata", JSONB, nullable=True
    )

    __table_args__ = (Index("ix_audit_logs_created_at", "created_at"),)
