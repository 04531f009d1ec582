from __future__ import annotations

import datetime
from dataclasses import dataclass
from enum import StrEnum


class Severity(StrEnum):
    SUCCESS = "success"
    INFO = "info"
    # Part of the presentation contract; nothing currently produces it.
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class DailyActivity:
    """One calendar-day bucket of the activity timeline."""

    day: datetime.date
    issued: int = 0
    verified: int = 0

    @property
    def label(self) -> str:
        return self.day.isoformat()


@dataclass(frozen=True, slots=True)
class Notification:
    id: str
    title: str
    description: str
    timestamp: str  # ISO calendar date of the source event
    severity: Severity


@dataclass(frozen=True, slots=True)
class DashboardSnapshot:
    """Everything the dashboard displays, computed in one pass.

    Built wholesale on every refresh and never mutated afterwards;
    sequences are tuples so consumers cannot edit them in place.
    """

    total_credentials: int
    total_issued: int
    revoked_credentials: int
    total_verifications: int
    recent_activity: int
    active_institutions: int
    weekly_data: tuple[DailyActivity, ...]
    recent_notifications: tuple[Notification, ...]
    generated_at: datetime.datetime
