"""Punishment mode: the standard schedule priced off raw race paces.

Instead of offsets from a blended reference, every workout type is a
multiple of the runner's 5K or 10K pace that tightens linearly from week
one (``t = 0``) to race week (``t = 1``). Paces are whole seconds per mile.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional

from halftrack.services.pacing import DEFAULT_REFERENCE_PACE, FIVE_K_MILES, TEN_K_MILES
from halftrack.services.plan_calendar import calc_total_weeks
from halftrack.services.timeutils import round_half_up
from halftrack.services.workouts import RunnerProfile, Workout, WorkoutType

logger = logging.getLogger(__name__)

# (start multiplier, total tightening) applied to 5K pace, or to 10K pace for long runs
PUNISHMENT_RAMPS: dict[WorkoutType, tuple[float, float]] = {
    WorkoutType.EASY: (1.06, 0.06),
    WorkoutType.RECOVERY: (1.10, 0.05),
    WorkoutType.TEMPO: (0.95, 0.05),
    WorkoutType.LONG: (1.00, 0.03),
}
RACE_GOAL_MULTIPLIER = 0.90
TEN_K_FALLBACK_MULTIPLIER = 1.06


@dataclass(frozen=True)
class RacePaces:
    five_k: float
    ten_k: float


def base_paces(five_k_seconds: Optional[float], ten_k_seconds: Optional[float]) -> RacePaces:
    """Raw 5K and 10K paces (s/mi); a missing 10K is taken as 6% slower than 5K pace."""
    five_k = five_k_seconds / FIVE_K_MILES if five_k_seconds else float(DEFAULT_REFERENCE_PACE)
    ten_k = ten_k_seconds / TEN_K_MILES if ten_k_seconds else five_k * TEN_K_FALLBACK_MULTIPLIER
    return RacePaces(five_k=five_k, ten_k=ten_k)


def ramp_progress(wfe: int, max_wfe: int) -> float:
    if max_wfe <= 0:
        return 1.0
    return (max_wfe - wfe) / max_wfe


def punishment_pace(workout_type: WorkoutType, wfe: int, paces: RacePaces, max_wfe: int) -> int:
    if workout_type is WorkoutType.RACE:
        return round_half_up(paces.five_k * RACE_GOAL_MULTIPLIER)
    start, tighten = PUNISHMENT_RAMPS[workout_type]
    base = paces.ten_k if workout_type is WorkoutType.LONG else paces.five_k
    return round_half_up(base * (start - ramp_progress(wfe, max_wfe) * tighten))


def _max_wfe(profile: RunnerProfile) -> int:
    return (profile.total_weeks or calc_total_weeks(profile.start_date, profile.race_date)) - 1


def calc_punishment_pace(profile: RunnerProfile, workout_type: WorkoutType, wfe: int) -> int:
    """Punishment target for one run, e.g. a run added or retyped after generation."""
    paces = base_paces(profile.five_k_seconds, profile.ten_k_seconds)
    return punishment_pace(workout_type, wfe, paces, _max_wfe(profile))


def apply_punishment_paces(profile: RunnerProfile, workouts: list[Workout]) -> None:
    paces = base_paces(profile.five_k_seconds, profile.ten_k_seconds)
    max_wfe = _max_wfe(profile)
    for w in workouts:
        w.estimated_pace = punishment_pace(w.type, w.wfe, paces, max_wfe)
    logger.info(
        "punishment_paces_applied",
        extra={"ctx_runner": profile.name, "ctx_workouts": len(workouts), "ctx_five_k_pace": round(paces.five_k, 1)},
    )
