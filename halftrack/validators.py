"""Pydantic validation models for all user-facing data entry points."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from halftrack.services.plan_calendar import calc_start_from_race
from halftrack.services.timeutils import DAYS_FULL, parse_time_secs, weekday_index
from halftrack.services.workouts import PlanMode, RunnerProfile, Severity, WorkoutType


def _blank_to_none(v):
    if v is None or (isinstance(v, str) and not v.strip()):
        return None
    return v


def _check_time(v: Optional[str]) -> Optional[str]:
    v = _blank_to_none(v)
    if v is None:
        return None
    if parse_time_secs(v) is None:
        raise ValueError("time must be MM:SS or H:MM:SS")
    return v.strip()


class ProfileInput(BaseModel):
    name: str = Field(default="", max_length=120)
    five_k_time: Optional[str] = None
    ten_k_time: Optional[str] = None
    days_per_week: int = Field(ge=3, le=6)
    long_run_day: str = "Saturday"
    start_date: Optional[dt.date] = None
    race_date: Optional[dt.date] = None
    total_weeks: Optional[int] = Field(default=None, ge=5, le=20)
    mode: PlanMode = PlanMode.STANDARD

    @field_validator("five_k_time", "ten_k_time")
    @classmethod
    def valid_time(cls, v):
        return _check_time(v)

    @field_validator("long_run_day")
    @classmethod
    def valid_long_run_day(cls, v):
        try:
            return DAYS_FULL[weekday_index(v)]
        except ValueError:
            raise ValueError(f"long_run_day must be one of {DAYS_FULL}") from None

    @model_validator(mode="after")
    def _default_start(self):
        if self.start_date is None:
            if self.race_date is None:
                raise ValueError("start_date or race_date is required")
            self.start_date = dt.date.fromisoformat(calc_start_from_race(self.race_date.isoformat()))
        return self

    def to_profile(self) -> RunnerProfile:
        return RunnerProfile(
            name=self.name,
            five_k_time=self.five_k_time,
            ten_k_time=self.ten_k_time,
            days_per_week=self.days_per_week,
            long_run_day=self.long_run_day,
            start_date=self.start_date.isoformat(),
            race_date=self.race_date.isoformat() if self.race_date else None,
            total_weeks=self.total_weeks,
            mode=self.mode,
        )


class ActualsInput(BaseModel):
    actual_distance: Optional[float] = Field(default=None, gt=0)
    actual_pace: Optional[str] = None
    warmup: Optional[float] = Field(default=None, ge=0)
    tempo: Optional[float] = Field(default=None, ge=0)
    cooldown: Optional[float] = Field(default=None, ge=0)

    @field_validator("actual_pace")
    @classmethod
    def valid_pace(cls, v):
        return _check_time(v)

    @property
    def actual_pace_seconds(self) -> Optional[int]:
        return parse_time_secs(self.actual_pace)


class CompletionInput(ActualsInput):
    confirmed: bool = False


class WorkoutEditInput(ActualsInput):
    type: Optional[WorkoutType] = None
    notes: Optional[str] = Field(default=None, max_length=2000)
    date: Optional[dt.date] = None


class NewWorkoutInput(BaseModel):
    date: dt.date
    type: WorkoutType = WorkoutType.EASY
    distance: float = Field(gt=0, le=50)
    notes: str = Field(default="", max_length=2000)


def _check_label(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    if not v:
        raise ValueError("must not be blank")
    return v


class InjuryInput(BaseModel):
    body_part: str = Field(max_length=80)
    severity: Severity
    start_date: Optional[dt.date] = None
    notes: str = Field(default="", max_length=2000)

    @field_validator("body_part")
    @classmethod
    def valid_body_part(cls, v):
        return _check_label(v)


class InjuryEditInput(BaseModel):
    body_part: Optional[str] = Field(default=None, max_length=80)
    severity: Optional[Severity] = None
    start_date: Optional[dt.date] = None
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("body_part")
    @classmethod
    def valid_body_part(cls, v):
        return _check_label(v)


class CrossTrainingInput(BaseModel):
    date: dt.date
    activity: str = Field(max_length=40)
    duration: int = Field(default=0, ge=0, le=1440)
    notes: str = Field(default="", max_length=2000)

    @field_validator("activity")
    @classmethod
    def valid_activity(cls, v):
        return _check_label(v)


class CrossTrainingEditInput(BaseModel):
    date: Optional[dt.date] = None
    activity: Optional[str] = Field(default=None, max_length=40)
    duration: Optional[int] = Field(default=None, ge=0, le=1440)
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("activity")
    @classmethod
    def valid_activity(cls, v):
        return _check_label(v)
