"""Adaptive pace recalibration from completed-workout actuals.

Each completed easy/long/tempo/recovery run with a logged pace implies a
reference pace (actual pace minus that type's offset). A recency-weighted
average of those implied references replaces the profile-derived
reference for every workout still on the schedule:
- needs at least 3 qualifying runs, uses the most recent 8
- weight 1 for the oldest sample up to N for the newest
- completed and skipped workouts are never touched
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import logging
from typing import Iterable, Optional

from halftrack.services.pacing import PACE_OFFSETS, implied_reference, paces_from_reference
from halftrack.services.timeutils import is_future, round_half_up
from halftrack.services.workouts import Workout

logger = logging.getLogger(__name__)

RECALC_MIN_POINTS = 3
RECALC_WINDOW = 8


@dataclass(frozen=True)
class PaceTrendPoint:
    week: int
    ref_pace: int


def qualifying_workouts(workouts: Iterable[Workout], today: Optional[date] = None) -> list[Workout]:
    """Completed runs with an actual pace and an offset-model type, oldest first.

    Completions dated after ``today`` (default: the current date) are ignored.
    """
    today = today or date.today()
    rows = [
        w for w in workouts
        if w.completed
        and w.actual_pace
        and w.type in PACE_OFFSETS
        and not is_future(w.date, today)
    ]
    return sorted(rows, key=lambda w: w.date)


def weighted_reference(samples: list[Workout]) -> Optional[float]:
    """Linearly recency-weighted mean of implied reference paces."""
    if not samples:
        return None
    weight_sum = 0
    ref_sum = 0.0
    for i, w in enumerate(samples):
        weight = i + 1
        ref_sum += implied_reference(w.type, w.actual_pace) * weight
        weight_sum += weight
    return ref_sum / weight_sum


def recalc_future_paces(workouts: list[Workout], today: Optional[date] = None) -> bool:
    """Re-derive target paces for pending workouts from recent actuals.

    Returns True when paces were applied, False on the insufficient-data no-op.
    """
    history = qualifying_workouts(workouts, today)
    if len(history) < RECALC_MIN_POINTS:
        logger.debug("recalibration_skipped", extra={"ctx_points": len(history)})
        return False

    new_ref = weighted_reference(history[-RECALC_WINDOW:])
    paces = paces_from_reference(new_ref)

    # Compute every update before assigning any of them.
    updates = [(w, round_half_up(paces.for_type(w.type))) for w in workouts if w.is_pending]
    for w, pace in updates:
        w.estimated_pace = pace

    logger.info(
        "paces_recalibrated",
        extra={"ctx_points": len(history), "ctx_reference": round(new_ref, 1), "ctx_updated": len(updates)},
    )
    return True


def pace_trend(workouts: Iterable[Workout], today: Optional[date] = None) -> list[PaceTrendPoint]:
    """Mean implied reference pace per plan week, ascending by week."""
    by_week: dict[int, list[float]] = {}
    for w in qualifying_workouts(workouts, today):
        by_week.setdefault(w.week, []).append(implied_reference(w.type, w.actual_pace))
    return [
        PaceTrendPoint(week=week, ref_pace=round_half_up(sum(refs) / len(refs)))
        for week, refs in sorted(by_week.items())
    ]
