"""Plan-level feedback operations: logging, skipping, undoing and editing runs.

Every operation looks the workout up on the caller's plan, applies the
guarded status transition, and re-runs pace recalibration where actuals
changed. Rejections come back as ``TransitionResult`` values.
"""

from __future__ import annotations

from datetime import date
import logging
from typing import Optional

from halftrack.services.pacing import calc_paces
from halftrack.services.plan_calendar import week_number_for_date
from halftrack.services.progress import plan_total_weeks
from halftrack.services.punishment import calc_punishment_pace
from halftrack.services.recalibration import recalc_future_paces
from halftrack.services.timeutils import days_since, is_future
from halftrack.services.workouts import (
    TYPE_LABELS,
    TrainingPlan,
    TransitionResult,
    Workout,
    WorkoutStatus,
    WorkoutType,
    can_complete,
    mark_completed,
    mark_skipped,
    new_workout_id,
    undo_completed,
    undo_skipped,
)

logger = logging.getLogger(__name__)

STALE_COMPLETION_DAYS = 7
NOT_FOUND = "Workout not found"


def target_pace(plan: TrainingPlan, workout_type: WorkoutType, wfe: int) -> float:
    """Fresh target for a run of this type, in the plan's pacing mode."""
    profile = plan.profile
    if profile.is_punishment:
        return calc_punishment_pace(profile, workout_type, wfe)
    return calc_paces(profile.five_k_seconds, profile.ten_k_seconds).for_type(workout_type)


def _recalibrate(plan: TrainingPlan, today: date) -> None:
    # punishment paces follow a fixed ramp
    if not plan.profile.is_punishment:
        recalc_future_paces(plan.workouts, today)


def _record_actuals(
    workout: Workout,
    actual_distance: Optional[float],
    actual_pace: Optional[float],
    warmup: Optional[float],
    tempo: Optional[float],
    cooldown: Optional[float],
) -> None:
    distance = actual_distance or workout.distance
    if workout.type is WorkoutType.TEMPO:
        workout.actual_warmup = warmup
        workout.actual_tempo = tempo
        workout.actual_cooldown = cooldown
        if warmup is not None and tempo is not None and cooldown is not None:
            distance = round(warmup + tempo + cooldown, 1)
    # None means "as planned"
    workout.actual_distance = distance if distance != workout.distance else None
    workout.actual_pace = actual_pace if actual_pace and actual_pace != workout.estimated_pace else None


def complete_workout(
    plan: TrainingPlan,
    workout_id: str,
    today: date,
    actual_distance: Optional[float] = None,
    actual_pace: Optional[float] = None,
    warmup: Optional[float] = None,
    tempo: Optional[float] = None,
    cooldown: Optional[float] = None,
    confirmed: bool = False,
    stale_after_days: int = STALE_COMPLETION_DAYS,
) -> TransitionResult:
    workout = plan.find(workout_id)
    if workout is None:
        return TransitionResult.rejected(NOT_FOUND)

    check = can_complete(workout, today)
    if not check.accepted:
        logger.info("workout_completion_rejected", extra={"ctx_workout_id": workout_id, "ctx_reason": check.reason})
        return check

    age = days_since(workout.date, today)
    if not confirmed and age > stale_after_days:
        return TransitionResult.rejected(f"Run was {age} days ago - confirm to log it", needs_confirmation=True)

    _record_actuals(workout, actual_distance, actual_pace, warmup, tempo, cooldown)
    mark_completed(workout, today)
    _recalibrate(plan, today)
    logger.info("workout_completed", extra={"ctx_workout_id": workout_id, "ctx_type": workout.type.value})
    return TransitionResult.ok()


def update_actuals(
    plan: TrainingPlan,
    workout_id: str,
    today: date,
    actual_distance: Optional[float] = None,
    actual_pace: Optional[float] = None,
    warmup: Optional[float] = None,
    tempo: Optional[float] = None,
    cooldown: Optional[float] = None,
) -> TransitionResult:
    """Correct the logged actuals of an already completed workout."""
    workout = plan.find(workout_id)
    if workout is None:
        return TransitionResult.rejected(NOT_FOUND)
    if workout.status is not WorkoutStatus.COMPLETED:
        return TransitionResult.rejected("Only completed workouts have actuals")
    _record_actuals(workout, actual_distance, actual_pace, warmup, tempo, cooldown)
    _recalibrate(plan, today)
    return TransitionResult.ok()


def skip_workout(plan: TrainingPlan, workout_id: str) -> TransitionResult:
    workout = plan.find(workout_id)
    if workout is None:
        return TransitionResult.rejected(NOT_FOUND)
    return mark_skipped(workout)


def undo_complete(plan: TrainingPlan, workout_id: str) -> TransitionResult:
    workout = plan.find(workout_id)
    if workout is None:
        return TransitionResult.rejected(NOT_FOUND)
    return undo_completed(workout)


def undo_skip(plan: TrainingPlan, workout_id: str) -> TransitionResult:
    workout = plan.find(workout_id)
    if workout is None:
        return TransitionResult.rejected(NOT_FOUND)
    return undo_skipped(workout)


def change_type(plan: TrainingPlan, workout_id: str, new_type: WorkoutType) -> TransitionResult:
    """Relabel a workout and reset its target to the plan's pace for the new type."""
    workout = plan.find(workout_id)
    if workout is None:
        return TransitionResult.rejected(NOT_FOUND)
    if workout.type is new_type:
        return TransitionResult.ok()
    workout.type = new_type
    workout.label = TYPE_LABELS[new_type]
    workout.estimated_pace = target_pace(plan, new_type, workout.wfe)
    return TransitionResult.ok()


def set_notes(plan: TrainingPlan, workout_id: str, notes: str) -> TransitionResult:
    workout = plan.find(workout_id)
    if workout is None:
        return TransitionResult.rejected(NOT_FOUND)
    workout.notes = notes
    return TransitionResult.ok()


def move_workout(plan: TrainingPlan, workout_id: str, new_date: str, today: date) -> TransitionResult:
    workout = plan.find(workout_id)
    if workout is None:
        return TransitionResult.rejected(NOT_FOUND)
    if workout.completed and is_future(new_date, today):
        return TransitionResult.rejected("Can't move a completed run into the future")
    if new_date != workout.date:
        workout.date = new_date
        plan.sort()
    return TransitionResult.ok()



def delete_workout(plan: TrainingPlan, workout_id: str) -> TransitionResult:
    workout = plan.find(workout_id)
    if workout is None:
        return TransitionResult.rejected(NOT_FOUND)
    plan.workouts.remove(workout)
    return TransitionResult.ok()


def add_workout(
    plan: TrainingPlan,
    day: str,
    workout_type: WorkoutType,
    distance: float,
    notes: str = "",
) -> Workout:
    """Insert a user-added run into its plan week, priced the way the plan's mode prices it."""
    week = week_number_for_date(plan.profile.start_date, day)
    wfe = max(0, plan_total_weeks(plan) - week)
    workout = Workout(
        id=new_workout_id(),
        date=day,
        type=workout_type,
        label=TYPE_LABELS[workout_type],
        distance=round(distance, 1),
        estimated_pace=target_pace(plan, workout_type, wfe),
        week=week,
        wfe=wfe,
        user_added=True,
        notes=notes,
    )
    plan.workouts.append(workout)
    plan.sort()
    return workout
