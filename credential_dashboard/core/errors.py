"""Failure kinds raised by the dashboard pipeline.

Only one failure is expected from the outside world: the data source
could not answer.  Everything downstream of a successful fetch is pure
computation and degrades to zero/empty values instead of raising.
"""

from __future__ import annotations


class DashboardError(Exception):
    """Base class for dashboard errors."""


class DataUnavailable(DashboardError):
    """A data-source read failed (transport, query, or decoding error).

    source: which read failed ("credentials" or "audit_log")
    reason: short human-readable cause, safe to log
    """

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source} unavailable: {reason}")
        self.source = source
        self.reason = reason
