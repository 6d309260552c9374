"""Reference-pace model: one fitness number, five workout target paces.

All paces are seconds per mile. A single reference pace (roughly 5K
effort) is derived from personal bests; every workout type's target is a
fixed offset from it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from halftrack.services.workouts import WorkoutType

FIVE_K_MILES = 3.1
TEN_K_MILES = 6.2
HALF_MILES = 13.1
RIEGEL_EXPONENT = 1.06
DEFAULT_REFERENCE_PACE = 9 * 60  # 9:00/mi

FIVE_K_BLEND = 0.45
TEN_K_BLEND = 0.55

# Additive offsets (s/mi) from the reference pace. Race pace is multiplicative.
PACE_OFFSETS: dict[WorkoutType, float] = {
    WorkoutType.EASY: 90,
    WorkoutType.LONG: 90,
    WorkoutType.TEMPO: 18,
    WorkoutType.RECOVERY: 120,
}
RACE_PACE_MULTIPLIER = 1.08


@dataclass(frozen=True)
class TargetPaces:
    """Target pace per workout type in seconds per mile."""
    easy: float
    tempo: float
    long: float
    recovery: float
    race: float

    def for_type(self, workout_type: WorkoutType) -> float:
        return {
            WorkoutType.EASY: self.easy,
            WorkoutType.TEMPO: self.tempo,
            WorkoutType.LONG: self.long,
            WorkoutType.RECOVERY: self.recovery,
            WorkoutType.RACE: self.race,
        }[workout_type]

    def as_dict(self) -> dict[str, float]:
        return {t.value: self.for_type(t) for t in WorkoutType}


def ten_k_equivalent_pace(ten_k_seconds: float) -> float:
    """5K-equivalent pace from a 10K time, via the Riegel decay exponent."""
    return (ten_k_seconds * (FIVE_K_MILES / TEN_K_MILES) ** RIEGEL_EXPONENT) / FIVE_K_MILES


def reference_pace(five_k_seconds: Optional[float], ten_k_seconds: Optional[float]) -> float:
    if five_k_seconds and ten_k_seconds:
        five_k_pace = five_k_seconds / FIVE_K_MILES
        return five_k_pace * FIVE_K_BLEND + ten_k_equivalent_pace(ten_k_seconds) * TEN_K_BLEND
    if five_k_seconds:
        return five_k_seconds / FIVE_K_MILES
    if ten_k_seconds:
        return ten_k_equivalent_pace(ten_k_seconds)
    return float(DEFAULT_REFERENCE_PACE)


def paces_from_reference(ref_pace: float) -> TargetPaces:
    return TargetPaces(
        easy=ref_pace + PACE_OFFSETS[WorkoutType.EASY],
        tempo=ref_pace + PACE_OFFSETS[WorkoutType.TEMPO],
        long=ref_pace + PACE_OFFSETS[WorkoutType.LONG],
        recovery=ref_pace + PACE_OFFSETS[WorkoutType.RECOVERY],
        race=ref_pace * RACE_PACE_MULTIPLIER,
    )


def calc_paces(five_k_seconds: Optional[float], ten_k_seconds: Optional[float]) -> TargetPaces:
    """Target paces for every workout type from optional 5K/10K times."""
    return paces_from_reference(reference_pace(five_k_seconds, ten_k_seconds))


def implied_reference(workout_type: WorkoutType, actual_pace: float) -> Optional[float]:
    """Invert the offset model; None for types outside the feedback loop (race)."""
    offset = PACE_OFFSETS.get(workout_type)
    if offset is None:
        return None
    return actual_pace - offset
