from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

from halftrack.services.plan_calendar import calc_total_weeks
from halftrack.services.race_predictor import estimate_half, training_projection
from halftrack.services.timeutils import date_str, parse_date
from halftrack.services.workouts import RunnerProfile, TrainingPlan

STREAK_LOOKBACK_DAYS = 365


@dataclass
class WeekVolume:
    planned: float = 0.0
    completed: float = 0.0
    skipped: float = 0.0


@dataclass
class PlanSummary:
    total: int
    completed: int
    skipped: int
    upcoming: int
    miles_completed: float
    miles_planned: float
    streak: int
    weeks: dict[int, WeekVolume] = field(default_factory=dict)
    half_estimate: Optional[float] = None
    training_projection: Optional[int] = None


@dataclass(frozen=True)
class RaceCountdown:
    race_date: str
    days: int
    weeks: int
    days_remainder: int

    @property
    def is_past(self) -> bool:
        return self.days < 0

    @property
    def is_today(self) -> bool:
        return self.days == 0


def plan_total_weeks(plan: TrainingPlan) -> int:
    """Length of the plan as generated; runs added outside it do not stretch it."""
    profile = plan.profile
    return profile.total_weeks or calc_total_weeks(profile.start_date, profile.race_date)


def current_week(plan: TrainingPlan, today: date) -> int:
    """Week of the next pending workout; the final week once everything is behind us."""
    if not plan.workouts:
        return 1
    today_str = date_str(today)
    upcoming = sorted(
        (w for w in plan.workouts if w.is_pending and w.date >= today_str),
        key=lambda w: w.date,
    )
    if upcoming:
        return upcoming[0].week
    return plan.workouts[-1].week


def run_streak(plan: TrainingPlan, today: date) -> int:
    """Consecutive days with a completed run, counting back from today."""
    done = {w.date for w in plan.workouts if w.completed}
    streak = 0
    for offset in range(STREAK_LOOKBACK_DAYS):
        if date_str(today - timedelta(days=offset)) not in done:
            break
        streak += 1
    return streak


def plan_summary(plan: TrainingPlan, today: date) -> PlanSummary:
    workouts = plan.workouts
    weeks: dict[int, WeekVolume] = {}
    for w in workouts:
        vol = weeks.setdefault(w.week, WeekVolume())
        vol.planned += w.distance
        if w.completed:
            vol.completed += w.distance
        if w.skipped:
            vol.skipped += w.distance

    profile = plan.profile
    return PlanSummary(
        total=len(workouts),
        completed=sum(1 for w in workouts if w.completed),
        skipped=sum(1 for w in workouts if w.skipped),
        upcoming=sum(1 for w in workouts if w.is_pending),
        miles_completed=round(sum(w.effective_distance for w in workouts if w.completed), 1),
        miles_planned=round(sum(w.distance for w in workouts), 1),
        streak=run_streak(plan, today),
        weeks=dict(sorted(weeks.items())),
        half_estimate=estimate_half(profile.five_k_seconds, profile.ten_k_seconds),
        training_projection=training_projection(workouts, today),
    )


def race_countdown(profile: RunnerProfile, today: date) -> Optional[RaceCountdown]:
    if not profile.race_date:
        return None
    days = (parse_date(profile.race_date) - today).days
    weeks, rem = divmod(days, 7) if days >= 0 else (0, 0)
    return RaceCountdown(race_date=profile.race_date, days=days, weeks=weeks, days_remainder=rem)
