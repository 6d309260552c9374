"""Workout records, runner profile, side logs, and the per-workout status machine.

A workout moves ``scheduled -> completed`` or ``scheduled -> skipped`` and
back again via undo; no other transitions exist. Guarded transitions
return a :class:`TransitionResult` instead of raising so callers can show
the rejection reason.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from halftrack.services.timeutils import is_future, parse_time_secs, weekday_index


class WorkoutType(str, Enum):
    EASY = "easy"
    TEMPO = "tempo"
    LONG = "long"
    RECOVERY = "recovery"
    RACE = "race"


class WorkoutStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class PlanMode(str, Enum):
    STANDARD = "standard"
    PUNISHMENT = "punishment"


class Severity(str, Enum):
    MILD = "Mild"
    MODERATE = "Moderate"
    SEVERE = "Severe"

    @property
    def rank(self) -> int:
        return SEVERITY_ORDER[self]


TYPE_LABELS: dict[WorkoutType, str] = {
    WorkoutType.EASY: "Easy Run",
    WorkoutType.TEMPO: "Tempo Run",
    WorkoutType.LONG: "Long Run",
    WorkoutType.RECOVERY: "Recovery Run",
    WorkoutType.RACE: "Race Day",
}


SEVERITY_ORDER: dict[Severity, int] = {Severity.MILD: 1, Severity.MODERATE: 2, Severity.SEVERE: 3}


def new_workout_id() -> str:
    return uuid4().hex[:12]


@dataclass(frozen=True)
class RunnerProfile:
    """Inputs for one plan generation."""
    name: str
    days_per_week: int
    long_run_day: str
    start_date: str
    race_date: Optional[str] = None
    five_k_time: Optional[str] = None
    ten_k_time: Optional[str] = None
    total_weeks: Optional[int] = None
    mode: PlanMode = PlanMode.STANDARD

    @property
    def is_punishment(self) -> bool:
        return self.mode is PlanMode.PUNISHMENT

    @property
    def five_k_seconds(self) -> Optional[int]:
        return parse_time_secs(self.five_k_time)

    @property
    def ten_k_seconds(self) -> Optional[int]:
        return parse_time_secs(self.ten_k_time)

    @property
    def long_run_day_index(self) -> int:
        return weekday_index(self.long_run_day)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["mode"] = self.mode.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RunnerProfile":
        return cls(
            name=data.get("name", ""),
            days_per_week=int(data["days_per_week"]),
            long_run_day=data["long_run_day"],
            start_date=data["start_date"],
            race_date=data.get("race_date"),
            five_k_time=data.get("five_k_time"),
            ten_k_time=data.get("ten_k_time"),
            total_weeks=data.get("total_weeks"),
            mode=PlanMode(data.get("mode") or PlanMode.STANDARD.value),
        )


@dataclass
class Workout:
    id: str
    date: str
    type: WorkoutType
    label: str
    distance: float
    estimated_pace: float
    week: int
    wfe: int
    plan_generated: bool = False
    user_added: bool = False
    notes: str = ""

    completed: bool = False
    skipped: bool = False
    actual_distance: Optional[float] = None
    actual_pace: Optional[float] = None
    actual_warmup: Optional[float] = None
    actual_tempo: Optional[float] = None
    actual_cooldown: Optional[float] = None

    @property
    def status(self) -> WorkoutStatus:
        if self.completed:
            return WorkoutStatus.COMPLETED
        if self.skipped:
            return WorkoutStatus.SKIPPED
        return WorkoutStatus.SCHEDULED

    @property
    def is_pending(self) -> bool:
        return not self.completed and not self.skipped

    @property
    def effective_distance(self) -> float:
        return self.actual_distance if self.actual_distance is not None else self.distance

    def clear_actuals(self) -> None:
        self.actual_distance = None
        self.actual_pace = None
        self.actual_warmup = None
        self.actual_tempo = None
        self.actual_cooldown = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Workout":
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        known["type"] = WorkoutType(known["type"])
        return cls(**known)


@dataclass
class Injury:
    id: str
    body_part: str
    severity: Severity
    start_date: str
    notes: str = ""
    resolved: bool = False
    resolved_date: Optional[str] = None

    def active_on(self, day: str) -> bool:
        """True when the injury had started by ``day`` and was not yet resolved before it."""
        if self.start_date > day:
            return False
        if not self.resolved:
            return True
        if not self.resolved_date:
            return False
        return self.resolved_date >= day

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["severity"] = self.severity.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Injury":
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        known["severity"] = Severity(known["severity"])
        return cls(**known)


@dataclass
class CrossTraining:
    """A non-running session; duration is in whole minutes."""
    id: str
    date: str
    activity: str
    duration: int = 0
    notes: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CrossTraining":
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass
class TrainingPlan:
    """Caller-owned plan: the profile it was built from, its workouts in date order, and the side logs."""
    profile: RunnerProfile
    workouts: list[Workout] = field(default_factory=list)
    injuries: list[Injury] = field(default_factory=list)
    cross_training: list[CrossTraining] = field(default_factory=list)

    def find(self, workout_id: str) -> Optional[Workout]:
        return next((w for w in self.workouts if w.id == workout_id), None)

    def find_injury(self, injury_id: str) -> Optional[Injury]:
        return next((i for i in self.injuries if i.id == injury_id), None)

    def find_cross_training(self, session_id: str) -> Optional[CrossTraining]:
        return next((c for c in self.cross_training if c.id == session_id), None)

    def sort(self) -> None:
        self.workouts.sort(key=lambda w: w.date)

    def week(self, week_number: int) -> list[Workout]:
        return [w for w in self.workouts if w.week == week_number]

    def to_dict(self) -> dict[str, Any]:
        return {
            "profile": self.profile.to_dict(),
            "workouts": [w.to_dict() for w in self.workouts],
            "injuries": [i.to_dict() for i in self.injuries],
            "cross_training": [c.to_dict() for c in self.cross_training],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TrainingPlan":
        return cls(
            profile=RunnerProfile.from_dict(data["profile"]),
            workouts=[Workout.from_dict(w) for w in data.get("workouts", [])],
            injuries=[Injury.from_dict(i) for i in data.get("injuries") or []],
            cross_training=[CrossTraining.from_dict(c) for c in data.get("cross_training") or []],
        )



@dataclass(frozen=True)
class TransitionResult:
    accepted: bool
    reason: str = ""
    needs_confirmation: bool = False

    @classmethod
    def ok(cls) -> "TransitionResult":
        return cls(accepted=True)

    @classmethod
    def rejected(cls, reason: str, needs_confirmation: bool = False) -> "TransitionResult":
        return cls(accepted=False, reason=reason, needs_confirmation=needs_confirmation)


def can_complete(workout: Workout, today: date) -> TransitionResult:
    if is_future(workout.date, today):
        return TransitionResult.rejected("Can't log a future run")
    if workout.status is not WorkoutStatus.SCHEDULED:
        return TransitionResult.rejected(f"Workout is {workout.status.value}, not scheduled")
    return TransitionResult.ok()


def mark_completed(workout: Workout, today: date) -> TransitionResult:
    check = can_complete(workout, today)
    if check.accepted:
        workout.completed = True
        workout.skipped = False
    return check


def mark_skipped(workout: Workout) -> TransitionResult:
    if workout.status is not WorkoutStatus.SCHEDULED:
        return TransitionResult.rejected(f"Workout is {workout.status.value}, not scheduled")
    workout.skipped = True
    workout.completed = False
    workout.clear_actuals()
    return TransitionResult.ok()


def undo_completed(workout: Workout) -> TransitionResult:
    if workout.status is not WorkoutStatus.COMPLETED:
        return TransitionResult.rejected("Workout is not completed")
    workout.completed = False
    workout.clear_actuals()
    return TransitionResult.ok()


def undo_skipped(workout: Workout) -> TransitionResult:
    if workout.status is not WorkoutStatus.SKIPPED:
        return TransitionResult.rejected("Workout is not skipped")
    workout.skipped = False
    return TransitionResult.ok()
