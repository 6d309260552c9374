from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from halftrack.services.pacing import TargetPaces
from halftrack.services.periodization import WeekInfo
from halftrack.services.planning import tempo_segments
from halftrack.services.progress import PlanSummary, RaceCountdown
from halftrack.services.timeutils import fmt_pace, fmt_secs
from halftrack.services.cross_training import CrossTrainingStats
from halftrack.services.workouts import (
    CrossTraining,
    Injury,
    PlanMode,
    RunnerProfile,
    Severity,
    TransitionResult,
    Workout,
    WorkoutStatus,
    WorkoutType,
)


class TempoSegmentsOut(BaseModel):
    warmup: float
    tempo: float
    cooldown: float


class WorkoutOut(BaseModel):
    id: str
    date: str
    type: WorkoutType
    label: str
    distance: float
    estimated_pace: float
    pace_display: str
    week: int
    wfe: int
    status: WorkoutStatus
    notes: str = ""
    plan_generated: bool = False
    user_added: bool = False
    actual_distance: Optional[float] = None
    actual_pace: Optional[float] = None
    actual_warmup: Optional[float] = None
    actual_tempo: Optional[float] = None
    actual_cooldown: Optional[float] = None
    segments: Optional[TempoSegmentsOut] = None

    @classmethod
    def from_workout(cls, w: Workout) -> "WorkoutOut":
        segments = None
        if w.type is WorkoutType.TEMPO:
            seg = tempo_segments(w.distance)
            segments = TempoSegmentsOut(warmup=seg.warmup, tempo=seg.tempo, cooldown=seg.cooldown)
        return cls(
            id=w.id,
            date=w.date,
            type=w.type,
            label=w.label,
            distance=w.distance,
            estimated_pace=w.estimated_pace,
            pace_display=fmt_pace(w.estimated_pace),
            week=w.week,
            wfe=w.wfe,
            status=w.status,
            notes=w.notes,
            plan_generated=w.plan_generated,
            user_added=w.user_added,
            actual_distance=w.actual_distance,
            actual_pace=w.actual_pace,
            actual_warmup=w.actual_warmup,
            actual_tempo=w.actual_tempo,
            actual_cooldown=w.actual_cooldown,
            segments=segments,
        )


class ProfileOut(BaseModel):
    name: str
    days_per_week: int
    long_run_day: str
    start_date: str
    race_date: Optional[str] = None
    five_k_time: Optional[str] = None
    ten_k_time: Optional[str] = None
    total_weeks: Optional[int] = None
    mode: PlanMode = PlanMode.STANDARD

    @classmethod
    def from_profile(cls, p: RunnerProfile) -> "ProfileOut":
        return cls(**p.to_dict())


class PlanOut(BaseModel):
    key: str
    profile: ProfileOut
    total_weeks: int
    workouts: list[WorkoutOut]


class WeekOut(BaseModel):
    week: int
    wfe: int
    classification: str
    is_race: bool
    is_taper: bool
    is_cutback: bool
    is_tempo: bool
    planned_miles: float
    completed_miles: float
    workouts: list[WorkoutOut]

    @classmethod
    def build(cls, info: WeekInfo, workouts: list[Workout]) -> "WeekOut":
        return cls(
            week=info.week,
            wfe=info.wfe,
            classification=info.classification.value,
            is_race=info.is_race,
            is_taper=info.is_taper,
            is_cutback=info.is_cutback,
            is_tempo=info.is_tempo,
            planned_miles=round(sum(w.distance for w in workouts), 1),
            completed_miles=round(sum(w.effective_distance for w in workouts if w.completed), 1),
            workouts=[WorkoutOut.from_workout(w) for w in workouts],
        )


class PacesOut(BaseModel):
    easy: float
    tempo: float
    long: float
    recovery: float
    race: float
    display: dict[str, str]
    half_estimate: Optional[float] = None
    half_estimate_display: str = "--"

    @classmethod
    def build(cls, paces: TargetPaces, half_estimate: Optional[float]) -> "PacesOut":
        return cls(
            **paces.as_dict(),
            display={k: fmt_pace(v) for k, v in paces.as_dict().items()},
            half_estimate=half_estimate,
            half_estimate_display=fmt_secs(half_estimate),
        )


class ProjectionOut(BaseModel):
    from_personal_bests: Optional[float] = None
    from_personal_bests_display: str = "--"
    from_training: Optional[int] = None
    from_training_display: str = "--"


class PaceTrendPointOut(BaseModel):
    week: int
    ref_pace: int
    display: str


class WeekVolumeOut(BaseModel):
    week: int
    planned: float
    completed: float
    skipped: float


class CountdownOut(BaseModel):
    race_date: str
    days: int
    weeks: int
    days_remainder: int
    is_past: bool
    is_today: bool

    @classmethod
    def from_countdown(cls, c: RaceCountdown) -> "CountdownOut":
        return cls(
            race_date=c.race_date,
            days=c.days,
            weeks=c.weeks,
            days_remainder=c.days_remainder,
            is_past=c.is_past,
            is_today=c.is_today,
        )


class SummaryOut(BaseModel):
    total: int
    completed: int
    skipped: int
    upcoming: int
    miles_completed: float
    miles_planned: float
    streak: int
    current_week: int
    total_weeks: int
    weeks: list[WeekVolumeOut]
    half_estimate: Optional[float] = None
    training_projection: Optional[int] = None
    countdown: Optional[CountdownOut] = None

    @classmethod
    def build(
        cls,
        summary: PlanSummary,
        current_week: int,
        total_weeks: int,
        countdown: Optional[RaceCountdown],
    ) -> "SummaryOut":
        return cls(
            total=summary.total,
            completed=summary.completed,
            skipped=summary.skipped,
            upcoming=summary.upcoming,
            miles_completed=summary.miles_completed,
            miles_planned=summary.miles_planned,
            streak=summary.streak,
            current_week=current_week,
            total_weeks=total_weeks,
            weeks=[
                WeekVolumeOut(week=n, planned=round(v.planned, 1), completed=round(v.completed, 1), skipped=round(v.skipped, 1))
                for n, v in summary.weeks.items()
            ],
            half_estimate=summary.half_estimate,
            training_projection=summary.training_projection,
            countdown=CountdownOut.from_countdown(countdown) if countdown else None,
        )


class TransitionOut(BaseModel):
    accepted: bool
    reason: str = ""
    needs_confirmation: bool = False
    workout: Optional[WorkoutOut] = None

    @classmethod
    def build(cls, result: TransitionResult, workout: Optional[Workout]) -> "TransitionOut":
        return cls(
            accepted=result.accepted,
            reason=result.reason,
            needs_confirmation=result.needs_confirmation,
            workout=WorkoutOut.from_workout(workout) if workout else None,
        )


class InjuryOut(BaseModel):
    id: str
    body_part: str
    severity: Severity
    start_date: str
    notes: str = ""
    resolved: bool = False
    resolved_date: Optional[str] = None

    @classmethod
    def from_injury(cls, i: Injury) -> "InjuryOut":
        return cls(**i.to_dict())


class InjuryWarningsOut(BaseModel):
    active: list[InjuryOut]
    worst_severity: Optional[Severity] = None
    workouts: list[WorkoutOut]


class CrossTrainingOut(BaseModel):
    id: str
    date: str
    activity: str
    duration: int
    notes: str = ""

    @classmethod
    def from_session(cls, c: CrossTraining) -> "CrossTrainingOut":
        return cls(**c.to_dict())


class ActivityTallyOut(BaseModel):
    activity: str
    sessions: int
    minutes: int


class CrossTrainingStatsOut(BaseModel):
    sessions: int
    minutes: int
    by_activity: list[ActivityTallyOut]

    @classmethod
    def build(cls, stats: CrossTrainingStats) -> "CrossTrainingStatsOut":
        return cls(
            sessions=stats.sessions,
            minutes=stats.minutes,
            by_activity=[ActivityTallyOut(activity=t.activity, sessions=t.sessions, minutes=t.minutes) for t in stats.by_activity],
        )


class CalendarOut(BaseModel):
    start_date: str
    race_date: Optional[str] = None
    total_weeks: int
    hint: str = ""
