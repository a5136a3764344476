from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

MAX_PLAUSIBLE_DISTANCE_M = 2000
MIN_ELAPSED_SECONDS = 5
FAST_TRAVEL_DISTANCE_M = 800
FAST_TRAVEL_SECONDS = 30

@dataclass(frozen=True)
class FraudVerdict:
    suspected: bool
    reason: Optional[str] = None

CLEAN = FraudVerdict(suspected=False, reason=None)

@dataclass(frozen=True)
class _Report:
    distance_m: Optional[float]
    elapsed_s: Optional[float]

@dataclass(frozen=True)
class Rule:
    name: str
    needs_distance: bool
    needs_elapsed: bool
    predicate: Callable[[_Report], bool]
    reason: str

    def applies(self, r: _Report) -> bool:
        if self.needs_distance and r.distance_m is None:
            return False
        if self.needs_elapsed and r.elapsed_s is None:
            return False
        return self.predicate(r)

# Order matters: first matching rule provides the recorded reason.
RULES: tuple[Rule, ...] = (
    Rule(
        name="implausible_range",
        needs_distance=True,
        needs_elapsed=False,
        predicate=lambda r: r.distance_m > MAX_PLAUSIBLE_DISTANCE_M,
        reason="distance exceeds plausible range for a successful challenge.",
    ),
    Rule(
        name="implausible_speed",
        needs_distance=False,
        needs_elapsed=True,
        predicate=lambda r: r.elapsed_s < MIN_ELAPSED_SECONDS,
        reason="completion reported in under 5 seconds.",
    ),
    Rule(
        name="implausible_velocity",
        needs_distance=True,
        needs_elapsed=True,
        predicate=lambda r: r.distance_m > FAST_TRAVEL_DISTANCE_M and r.elapsed_s < FAST_TRAVEL_SECONDS,
        reason="travel of more than 800 meters in under 30 seconds.",
    ),
)

def evaluate(
    *,
    started_at: datetime,
    completed_at: datetime | None,
    distance_meters: float | None,
    success: bool,
) -> FraudVerdict:
    """
    Score a reported challenge completion.

    Only successful runs are scored. A rule whose input is missing (no
    completion time, no distance) is skipped; the remaining rules still run.
    """
    if not success:
        return CLEAN
    elapsed = (completed_at - started_at).total_seconds() if completed_at is not None else None
    report = _Report(distance_m=distance_meters, elapsed_s=elapsed)
    for rule in RULES:
        if rule.applies(report):
            return FraudVerdict(suspected=True, reason=rule.reason)
    return CLEAN
