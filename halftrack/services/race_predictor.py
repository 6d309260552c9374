"""Half-marathon finish-time estimates.

Provides two complementary estimates:
- Personal bests: Riegel power-law extrapolation from 5K / 10K times
- Training: recency-weighted reference pace implied by completed runs
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from halftrack.services.pacing import (
    FIVE_K_MILES,
    HALF_MILES,
    RACE_PACE_MULTIPLIER,
    RIEGEL_EXPONENT,
    TEN_K_MILES,
)
from halftrack.services.recalibration import qualifying_workouts, weighted_reference
from halftrack.services.timeutils import fmt_secs, round_half_up
from halftrack.services.workouts import Workout

# 10K sits closer to the half, so it carries more weight than in the pace model
HALF_FIVE_K_BLEND = 0.4
HALF_TEN_K_BLEND = 0.6

PROJECTION_MIN_POINTS = 5
PROJECTION_WINDOW = 10


@dataclass(frozen=True)
class HalfProjection:
    """Both half-marathon estimates; either may be unknown."""
    from_personal_bests: Optional[float]
    from_training: Optional[int]

    @property
    def personal_best_display(self) -> str:
        return fmt_secs(self.from_personal_bests)

    @property
    def training_display(self) -> str:
        return fmt_secs(self.from_training)


def predict_riegel(
    known_distance: float,
    known_time_seconds: float,
    target_distance: float,
    fatigue_factor: float = RIEGEL_EXPONENT,
) -> float:
    """Predict finish time using Riegel's formula: T2 = T1 * (D2/D1)^fatigue_factor."""
    if known_distance <= 0 or known_time_seconds <= 0 or target_distance <= 0:
        return 0.0
    return known_time_seconds * (target_distance / known_distance) ** fatigue_factor


def estimate_half(five_k_seconds: Optional[float], ten_k_seconds: Optional[float]) -> Optional[float]:
    """Half-marathon time from personal bests, or None when neither is known."""
    if not five_k_seconds and not ten_k_seconds:
        return None
    if five_k_seconds and ten_k_seconds:
        return (
            predict_riegel(FIVE_K_MILES, five_k_seconds, HALF_MILES) * HALF_FIVE_K_BLEND
            + predict_riegel(TEN_K_MILES, ten_k_seconds, HALF_MILES) * HALF_TEN_K_BLEND
        )
    if five_k_seconds:
        return predict_riegel(FIVE_K_MILES, five_k_seconds, HALF_MILES)
    return predict_riegel(TEN_K_MILES, ten_k_seconds, HALF_MILES)


def training_projection(workouts: Iterable[Workout], today: Optional[date] = None) -> Optional[int]:
    """Half finish time implied by recent training, or None with fewer than 5 data points."""
    history = qualifying_workouts(workouts, today)
    if len(history) < PROJECTION_MIN_POINTS:
        return None
    ref_pace = weighted_reference(history[-PROJECTION_WINDOW:])
    return round_half_up(ref_pace * RACE_PACE_MULTIPLIER * HALF_MILES)


def project_half(
    five_k_seconds: Optional[float],
    ten_k_seconds: Optional[float],
    workouts: Iterable[Workout],
    today: Optional[date] = None,
) -> HalfProjection:
    return HalfProjection(
        from_personal_bests=estimate_half(five_k_seconds, ten_k_seconds),
        from_training=training_projection(workouts, today),
    )
