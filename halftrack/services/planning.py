from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
import logging
import math
from typing import Optional

from halftrack.services.pacing import HALF_MILES, TargetPaces, calc_paces
from halftrack.services.periodization import week_info
from halftrack.services.plan_calendar import calc_total_weeks
from halftrack.services.punishment import apply_punishment_paces
from halftrack.services.scheduling import assign_other_days, choose_tempo_slot
from halftrack.services.timeutils import date_str, day_index, parse_date, week_sunday
from halftrack.services.workouts import (
    TYPE_LABELS,
    RunnerProfile,
    TrainingPlan,
    Workout,
    WorkoutType,
    new_workout_id,
)

logger = logging.getLogger(__name__)

MIN_DAYS_PER_WEEK = 3
MAX_DAYS_PER_WEEK = 6
MIN_RUN_MILES = 3.0
SHAKEOUT_MILES = 3.0
MAX_SHAKEOUTS = 2

# Long-run miles by days-per-week, indexed by weeks-from-end minus one
# (index 0 = the week before race week). Longer plans repeat the last entry.
LONG_FROM_END: dict[int, list[float]] = {
    3: [5, 7, 9, 7, 10, 11, 9, 7, 5, 6, 5, 4, 4, 4, 4, 4],
    4: [7, 10, 12, 11, 9, 10, 9, 8, 6, 7, 6, 5, 5, 5, 5, 4],
    5: [7, 11, 13, 12, 9, 11, 10, 9, 6, 8, 7, 5, 5, 5, 5, 5],
    6: [8, 12, 13, 13, 10, 12, 11, 10, 7, 9, 8, 6, 6, 6, 5, 5],
}

# Fraction of the week's long run for each supporting workout
TEMPO_FRACTION = 0.38
RECOVERY_FRACTION = 0.28
FIRST_EASY_FRACTION = 0.42
EASY_FRACTION = 0.32


def round_half(miles: float) -> float:
    """Round to the nearest half mile, halves rounding up."""
    return math.floor(miles * 2 + 0.5) / 2


def supporting_distance(long_miles: float, fraction: float) -> float:
    return max(MIN_RUN_MILES, round_half(long_miles * fraction))


def clamp_days_per_week(days_per_week: int) -> int:
    return max(MIN_DAYS_PER_WEEK, min(MAX_DAYS_PER_WEEK, int(days_per_week)))


def long_run_distance(days_per_week: int, wfe: int) -> float:
    table = LONG_FROM_END[clamp_days_per_week(days_per_week)]
    idx = max(0, min(wfe - 1, len(table) - 1))
    return float(table[idx])


@dataclass(frozen=True)
class TempoSegments:
    warmup: float
    tempo: float
    cooldown: float


def tempo_segments(distance: float) -> TempoSegments:
    """Planned warm-up / tempo / cool-down split of a tempo run (about 20/65/15)."""
    warmup = max(1.0, round_half(distance * 0.20))
    cooldown = max(0.5, round_half(distance * 0.15))
    return TempoSegments(warmup=warmup, tempo=round(distance - warmup - cooldown, 1), cooldown=cooldown)


def _workout(
    day: str,
    workout_type: WorkoutType,
    distance: float,
    paces: TargetPaces,
    week: int,
    wfe: int,
    label: Optional[str] = None,
) -> Workout:
    return Workout(
        id=new_workout_id(),
        date=day,
        type=workout_type,
        label=label or TYPE_LABELS[workout_type],
        distance=distance,
        estimated_pace=paces.for_type(workout_type),
        week=week,
        wfe=wfe,
        plan_generated=True,
    )


def generate_workouts(profile: RunnerProfile) -> list[Workout]:
    """Build every workout from the plan start through race day, ordered by date."""
    paces = calc_paces(profile.five_k_seconds, profile.ten_k_seconds)
    days_per_week = clamp_days_per_week(profile.days_per_week)
    long_idx = profile.long_run_day_index
    other_days = assign_other_days(long_idx, days_per_week)
    tempo_idx = choose_tempo_slot(other_days, long_idx)
    total_weeks = profile.total_weeks or calc_total_weeks(profile.start_date, profile.race_date)

    first_sunday = week_sunday(parse_date(profile.start_date))
    runs: list[Workout] = []

    for wk in range(1, total_weeks + 1):
        info = week_info(wk, total_weeks)
        sunday = first_sunday + timedelta(days=(wk - 1) * 7)

        def on_day(idx: int) -> str:
            return date_str(sunday + timedelta(days=idx))

        if info.is_race:
            race_day = profile.race_date or on_day(long_idx)
            race_dow = day_index(parse_date(race_day))
            shakeout_days = [d for d in other_days if d < race_dow][:MAX_SHAKEOUTS]
            for d in shakeout_days:
                runs.append(_workout(on_day(d), WorkoutType.EASY, SHAKEOUT_MILES, paces, wk, 0))
            runs.append(_workout(race_day, WorkoutType.RACE, HALF_MILES, paces, wk, 0, label="RACE DAY!"))
            continue

        long_miles = long_run_distance(days_per_week, info.wfe)
        runs.append(_workout(on_day(long_idx), WorkoutType.LONG, long_miles, paces, wk, info.wfe))

        for i, d in enumerate(other_days):
            if info.is_tempo and i == tempo_idx:
                kind, miles = WorkoutType.TEMPO, supporting_distance(long_miles, TEMPO_FRACTION)
            elif info.is_cutback:
                kind, miles = WorkoutType.RECOVERY, supporting_distance(long_miles, RECOVERY_FRACTION)
            else:
                fraction = FIRST_EASY_FRACTION if i == 0 else EASY_FRACTION
                kind, miles = WorkoutType.EASY, supporting_distance(long_miles, fraction)
            runs.append(_workout(on_day(d), kind, miles, paces, wk, info.wfe))

    runs.sort(key=lambda r: r.date)
    logger.info(
        "plan_generated",
        extra={
            "ctx_runner": profile.name,
            "ctx_total_weeks": total_weeks,
            "ctx_days_per_week": days_per_week,
            "ctx_workouts": len(runs),
        },
    )
    return runs


def generate_plan(profile: RunnerProfile) -> TrainingPlan:
    workouts = generate_workouts(profile)
    if profile.is_punishment:
        apply_punishment_paces(profile, workouts)
    return TrainingPlan(profile=profile, workouts=workouts)
