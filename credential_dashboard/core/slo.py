"""SLO (Service Level Objective) definitions for credential-dashboard.

Three objectives:

  availability     99.5% of API requests return non-5xx
  latency_p95      95% of API requests complete within 500ms
  refresh_success  95% of refresh cycles publish a new snapshot

The third one is specific to this service.  A failed refresh is invisible
to dashboard users (they keep seeing the previous snapshot), so "the API
answers quickly" is not enough: the numbers it answers with must also be
recent.  Stale completions (a newer refresh already published) are not
counted as failures; they are an expected outcome of overlapping timers.

The evaluation functions are pure: numbers in, SLOStatus out.  The health
endpoint reads the inputs from the in-process Prometheus registry.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SLODefinition:
    """A single SLO target.

    name:        Human-readable identifier (e.g., "availability")
    description: What this SLO measures
    target:      The target percentage (e.g., 99.5 means 99.5%)
    window:      Rolling evaluation window (e.g., "30d" = 30 days)
    """

    name: str
    description: str
    target: float
    window: str


@dataclass(frozen=True, slots=True)
class SLOStatus:
    """Current status of an SLO evaluation.

    slo:              The SLO definition being evaluated
    current:          The actual measured value (e.g., 99.8%)
    budget_remaining: Error budget left (positive = healthy, negative = breached)
    healthy:          True if current >= target
    """

    slo: SLODefinition
    current: float
    budget_remaining: float
    healthy: bool


AVAILABILITY_SLO = SLODefinition(
    name="availability",
    description="Percentage of non-5xx responses (successful requests)",
    target=99.5,
    window="30d",
)

LATENCY_SLO = SLODefinition(
    name="latency_p95",
    description="95th percentile response time under 500ms",
    target=95.0,
    window="30d",
)

REFRESH_SUCCESS_SLO = SLODefinition(
    name="refresh_success",
    description="95% of dashboard refresh cycles publish a fresh snapshot",
    target=95.0,
    window="7d",
)

ALL_SLOS = [AVAILABILITY_SLO, LATENCY_SLO, REFRESH_SUCCESS_SLO]


def _ratio_status(slo: SLODefinition, total: int, bad: int) -> SLOStatus:
    if total == 0:
        # No data yet, so nothing has failed
        current = 100.0
    else:
        current = ((total - bad) / total) * 100

    budget_remaining = current - slo.target
    return SLOStatus(
        slo=slo,
        current=round(current, 3),
        budget_remaining=round(budget_remaining, 3),
        healthy=current >= slo.target,
    )


def evaluate_availability(total_requests: int, error_requests: int) -> SLOStatus:
    """Compute current availability SLO status.

    availability = (total - errors) / total × 100
    """
    return _ratio_status(AVAILABILITY_SLO, total_requests, error_requests)


def evaluate_latency(p95_ms: float) -> SLOStatus:
    """Compute current latency SLO status from a p95 estimate in milliseconds.

    p95 under 500ms means at least 95% of requests are fast enough; the
    status expresses that as an approximate "percentage within threshold".
    """
    threshold_ms = 500.0
    if p95_ms <= threshold_ms:
        current = 95.0 + (threshold_ms - p95_ms) / threshold_ms * 5.0
        current = min(current, 100.0)
    else:
        current = max(0.0, 95.0 - (p95_ms - threshold_ms) / threshold_ms * 95.0)

    budget_remaining = current - LATENCY_SLO.target
    return SLOStatus(
        slo=LATENCY_SLO,
        current=round(current, 3),
        budget_remaining=round(budget_remaining, 3),
        healthy=current >= LATENCY_SLO.target,
    )


def evaluate_refresh_success(total_refreshes: int, failed_refreshes: int) -> SLOStatus:
    """Compute current refresh-success SLO status.

    total_refreshes should exclude stale completions; failed_refreshes
    counts both data-source failures and unexpected errors.
    """
    return _ratio_status(REFRESH_SUCCESS_SLO, total_refreshes, failed_refreshes)
