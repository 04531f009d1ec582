from __future__ import annotations

import datetime
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any


class AuditAction(StrEnum):
    """Audit-log action kinds the dashboard knows how to present."""

    ISSUED = "issued"
    VERIFIED = "verified"
    SHARED = "shared"


# Keys the issuing side has used for a credential's human-readable name,
# in lookup order.
_TITLE_KEYS = ("degree", "credential_title", "title")


@dataclass(frozen=True, slots=True)
class AuditMetadata:
    """Typed view over an audit event's free-form metadata.

    Only the credential title is interpreted; every other key is kept
    verbatim in ``extra``.
    """

    credential_title: str | None = None
    extra: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @staticmethod
    def from_raw(raw: object) -> AuditMetadata:
        """Parse a metadata payload, tolerating anything that isn't a mapping.

        The first non-blank string among the title keys wins.  Non-string
        title values are ignored rather than stringified.
        """
        if not isinstance(raw, Mapping):
            return AuditMetadata()

        title: str | None = None
        for key in _TITLE_KEYS:
            value = raw.get(key)
            if isinstance(value, str) and value.strip():
                title = value.strip()
                break

        extra = {str(k): v for k, v in raw.items() if k not in _TITLE_KEYS}
        return AuditMetadata(credential_title=title, extra=MappingProxyType(extra))


@dataclass(frozen=True, slots=True)
class AuditLogEvent:
    """One row of the audit log.

    action is the raw action string; unmodeled values (e.g. "revoked")
    are kept so they still count as activity.
    """

    id: str
    action: str
    created_at: datetime.datetime
    metadata: AuditMetadata = field(default_factory=AuditMetadata)

    def is_action(self, action: AuditAction) -> bool:
        return self.action == action.value
