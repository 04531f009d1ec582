from __future__ import annotations

import datetime
import sys
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

# Ensure repo root is on sys.path so `import credential_dashboard` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from credential_dashboard.api.dashboard import data_source  # noqa: E402
from credential_dashboard.main import app  # noqa: E402
from credential_dashboard.models.audit_log import (  # noqa: E402
    AuditLogEvent,
    AuditMetadata,
)
from credential_dashboard.models.credential import CredentialRecord  # noqa: E402
from credential_dashboard.services.snapshot_store import snapshot_store  # noqa: E402

# A fixed "now" for pure-computation tests: Friday 2024-03-15, noon UTC.
NOW = datetime.datetime(2024, 3, 15, 12, 0, tzinfo=datetime.UTC)
TODAY = NOW.date()


@pytest.fixture(autouse=True)
def reset_snapshot_store() -> None:
    """Forget the published snapshot between tests."""
    if hasattr(snapshot_store, "clear"):
        snapshot_store.clear()  # type: ignore[union-attr]


@pytest.fixture(autouse=True)
def reset_data_source() -> None:
    """Empty the in-memory data source between tests."""
    if hasattr(data_source, "clear"):
        data_source.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


# ---------------------------------------------------------------------------
# Record helpers
# ---------------------------------------------------------------------------


def make_credential(
    id: str = "cred-1",
    *,
    issued_at: datetime.datetime = NOW,
    institution_id: str | None = "inst-A",
    revoked: bool = False,
) -> CredentialRecord:
    return CredentialRecord(
        id=id,
        issued_at=issued_at,
        institution_id=institution_id,
        revoked=revoked,
    )


def make_event(
    id: str = "evt-1",
    action: str = "verified",
    *,
    created_at: datetime.datetime = NOW,
    metadata: dict[str, Any] | None = None,
) -> AuditLogEvent:
    return AuditLogEvent(
        id=id,
        action=action,
        created_at=created_at,
        metadata=AuditMetadata.from_raw(metadata),
    )


def days_ago(n: int, *, hours: int = 0, base: datetime.datetime = NOW) -> datetime.datetime:
    return base - datetime.timedelta(days=n, hours=hours)
