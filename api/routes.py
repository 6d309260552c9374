from __future__ import annotations

import logging
from datetime import date
from typing import Annotated, Callable, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from api.deps import get_today
from api.schemas import (
    CalendarOut,
    CrossTrainingOut,
    CrossTrainingStatsOut,
    InjuryOut,
    InjuryWarningsOut,
    PaceTrendPointOut,
    PacesOut,
    PlanOut,
    ProfileOut,
    ProjectionOut,
    SummaryOut,
    TransitionOut,
    WeekOut,
    WorkoutOut,
)
from halftrack.config import get_settings
from halftrack.db import session_scope
from halftrack.services import cross_training, injuries, plan_actions
from halftrack.services.pacing import calc_paces
from halftrack.services.periodization import week_info
from halftrack.services.plan_calendar import calc_start_from_race, calc_total_weeks, weeks_hint
from halftrack.services.plan_store import delete_plan, load_plan, save_plan
from halftrack.services.planning import generate_plan
from halftrack.services.progress import current_week, plan_summary, plan_total_weeks, race_countdown
from halftrack.services.race_predictor import estimate_half, project_half
from halftrack.services.recalibration import pace_trend
from halftrack.services.timeutils import fmt_pace, parse_time_secs
from halftrack.services.workouts import TrainingPlan, TransitionResult
from halftrack.validators import (
    CompletionInput,
    CrossTrainingEditInput,
    CrossTrainingInput,
    InjuryEditInput,
    InjuryInput,
    NewWorkoutInput,
    ProfileInput,
    WorkoutEditInput,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1")

Today = Annotated[date, Depends(get_today)]


def _plan_or_404(session, key: str) -> TrainingPlan:
    plan = load_plan(session, key)
    if plan is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Plan not found")
    return plan


def _require_workout(plan: TrainingPlan, workout_id: str) -> None:
    if plan.find(workout_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=plan_actions.NOT_FOUND)


def _reject(result: TransitionResult) -> None:
    if not result.accepted:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"reason": result.reason, "needs_confirmation": result.needs_confirmation},
        )


def _plan_out(key: str, plan: TrainingPlan) -> PlanOut:
    return PlanOut(
        key=key,
        profile=ProfileOut.from_profile(plan.profile),
        total_weeks=plan_total_weeks(plan),
        workouts=[WorkoutOut.from_workout(w) for w in plan.workouts],
    )


def _transition(key: str, workout_id: str, action: Callable[[TrainingPlan], TransitionResult]) -> TransitionOut:
    with session_scope() as s:
        plan = _plan_or_404(s, key)
        _require_workout(plan, workout_id)
        result = action(plan)
        _reject(result)
        save_plan(s, key, plan)
        return TransitionOut.build(result, plan.find(workout_id))


@router.get("/health", tags=["meta"])
def health():
    return {"status": "ok", "state_key": get_settings().state_key}


@router.get("/paces", response_model=PacesOut, tags=["paces"])
def paces(five_k: Optional[str] = Query(None), ten_k: Optional[str] = Query(None)):
    five_k_secs = parse_time_secs(five_k)
    ten_k_secs = parse_time_secs(ten_k)
    return PacesOut.build(calc_paces(five_k_secs, ten_k_secs), estimate_half(five_k_secs, ten_k_secs))


@router.get("/calendar", response_model=CalendarOut, tags=["paces"])
def calendar(start_date: Optional[date] = Query(None), race_date: Optional[date] = Query(None)):
    if start_date is None and race_date is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="start_date or race_date is required")
    race = race_date.isoformat() if race_date else None
    start = start_date.isoformat() if start_date else calc_start_from_race(race)
    return CalendarOut(start_date=start, race_date=race, total_weeks=calc_total_weeks(start, race), hint=weeks_hint(start, race))


@router.post("/plans/{key}", response_model=PlanOut, status_code=status.HTTP_201_CREATED, tags=["plans"])
def create_plan(key: str, payload: ProfileInput):
    plan = generate_plan(payload.to_profile())
    with session_scope() as s:
        save_plan(s, key, plan)
    logger.info("plan_created", extra={"ctx_key": key, "ctx_workouts": len(plan.workouts)})
    return _plan_out(key, plan)


@router.get("/plans/{key}", response_model=PlanOut, tags=["plans"])
def get_plan(key: str):
    with session_scope() as s:
        return _plan_out(key, _plan_or_404(s, key))


@router.delete("/plans/{key}", status_code=status.HTTP_204_NO_CONTENT, tags=["plans"])
def remove_plan(key: str):
    with session_scope() as s:
        if not delete_plan(s, key):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Plan not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/plans/{key}/weeks/{week}", response_model=WeekOut, tags=["plans"])
def get_week(key: str, week: int):
    with session_scope() as s:
        plan = _plan_or_404(s, key)
    total = plan_total_weeks(plan)
    if week < 1 or week > total:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Week out of range")
    return WeekOut.build(week_info(week, total), plan.week(week))


@router.post("/plans/{key}/workouts", response_model=WorkoutOut, status_code=status.HTTP_201_CREATED, tags=["workouts"])
def create_workout(key: str, payload: NewWorkoutInput):
    with session_scope() as s:
        plan = _plan_or_404(s, key)
        workout = plan_actions.add_workout(plan, payload.date.isoformat(), payload.type, payload.distance, payload.notes)
        save_plan(s, key, plan)
        return WorkoutOut.from_workout(workout)


@router.patch("/plans/{key}/workouts/{workout_id}", response_model=WorkoutOut, tags=["workouts"])
def edit_workout(key: str, workout_id: str, payload: WorkoutEditInput, today: Today):
    fields = payload.model_fields_set
    with session_scope() as s:
        plan = _plan_or_404(s, key)
        _require_workout(plan, workout_id)
        if payload.type is not None:
            _reject(plan_actions.change_type(plan, workout_id, payload.type))
        if payload.notes is not None:
            _reject(plan_actions.set_notes(plan, workout_id, payload.notes))
        if payload.date is not None:
            _reject(plan_actions.move_workout(plan, workout_id, payload.date.isoformat(), today))
        if fields & {"actual_distance", "actual_pace", "warmup", "tempo", "cooldown"}:
            current = plan.find(workout_id)
            _reject(
                plan_actions.update_actuals(
                    plan,
                    workout_id,
                    today,
                    actual_distance=payload.actual_distance if "actual_distance" in fields else current.actual_distance,
                    actual_pace=payload.actual_pace_seconds if "actual_pace" in fields else current.actual_pace,
                    warmup=payload.warmup if "warmup" in fields else current.actual_warmup,
                    tempo=payload.tempo if "tempo" in fields else current.actual_tempo,
                    cooldown=payload.cooldown if "cooldown" in fields else current.actual_cooldown,
                )
            )
        save_plan(s, key, plan)
        return WorkoutOut.from_workout(plan.find(workout_id))


@router.delete("/plans/{key}/workouts/{workout_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["workouts"])
def remove_workout(key: str, workout_id: str):
    with session_scope() as s:
        plan = _plan_or_404(s, key)
        _require_workout(plan, workout_id)
        plan_actions.delete_workout(plan, workout_id)
        save_plan(s, key, plan)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/plans/{key}/workouts/{workout_id}/complete", response_model=TransitionOut, tags=["workouts"])
def complete(key: str, workout_id: str, payload: CompletionInput, today: Today):
    stale_days = get_settings().stale_completion_days
    return _transition(
        key,
        workout_id,
        lambda plan: plan_actions.complete_workout(
            plan,
            workout_id,
            today,
            actual_distance=payload.actual_distance,
            actual_pace=payload.actual_pace_seconds,
            warmup=payload.warmup,
            tempo=payload.tempo,
            cooldown=payload.cooldown,
            confirmed=payload.confirmed,
            stale_after_days=stale_days,
        ),
    )


@router.post("/plans/{key}/workouts/{workout_id}/skip", response_model=TransitionOut, tags=["workouts"])
def skip(key: str, workout_id: str):
    return _transition(key, workout_id, lambda plan: plan_actions.skip_workout(plan, workout_id))


@router.post("/plans/{key}/workouts/{workout_id}/undo-complete", response_model=TransitionOut, tags=["workouts"])
def undo_complete(key: str, workout_id: str):
    return _transition(key, workout_id, lambda plan: plan_actions.undo_complete(plan, workout_id))


@router.post("/plans/{key}/workouts/{workout_id}/undo-skip", response_model=TransitionOut, tags=["workouts"])
def undo_skip(key: str, workout_id: str):
    return _transition(key, workout_id, lambda plan: plan_actions.undo_skip(plan, workout_id))


@router.get("/plans/{key}/projection", response_model=ProjectionOut, tags=["progress"])
def projection(key: str, today: Today):
    with session_scope() as s:
        plan = _plan_or_404(s, key)
    proj = project_half(plan.profile.five_k_seconds, plan.profile.ten_k_seconds, plan.workouts, today)
    return ProjectionOut(
        from_personal_bests=proj.from_personal_bests,
        from_personal_bests_display=proj.personal_best_display,
        from_training=proj.from_training,
        from_training_display=proj.training_display,
    )


@router.get("/plans/{key}/pace-trend", response_model=list[PaceTrendPointOut], tags=["progress"])
def get_pace_trend(key: str, today: Today):
    with session_scope() as s:
        plan = _plan_or_404(s, key)
    return [PaceTrendPointOut(week=p.week, ref_pace=p.ref_pace, display=fmt_pace(p.ref_pace)) for p in pace_trend(plan.workouts, today)]


@router.get("/plans/{key}/summary", response_model=SummaryOut, tags=["progress"])
def summary(key: str, today: Today):
    with session_scope() as s:
        plan = _plan_or_404(s, key)
    return SummaryOut.build(
        plan_summary(plan, today),
        current_week(plan, today),
        plan_total_weeks(plan),
        race_countdown(plan.profile, today),
    )


def _injury_or_404(plan: TrainingPlan, injury_id: str):
    injury = plan.find_injury(injury_id)
    if injury is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Injury not found")
    return injury


@router.get("/plans/{key}/injuries", response_model=list[InjuryOut], tags=["injuries"])
def list_injuries(key: str):
    with session_scope() as s:
        plan = _plan_or_404(s, key)
    return [InjuryOut.from_injury(i) for i in sorted(plan.injuries, key=lambda i: i.start_date)]


@router.post("/plans/{key}/injuries", response_model=InjuryOut, status_code=status.HTTP_201_CREATED, tags=["injuries"])
def create_injury(key: str, payload: InjuryInput, today: Today):
    with session_scope() as s:
        plan = _plan_or_404(s, key)
        try:
            injury = injuries.add_injury(
                plan,
                payload.body_part,
                payload.severity,
                (payload.start_date or today).isoformat(),
                payload.notes,
            )
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
        save_plan(s, key, plan)
        return InjuryOut.from_injury(injury)


@router.patch("/plans/{key}/injuries/{injury_id}", response_model=InjuryOut, tags=["injuries"])
def edit_injury(key: str, injury_id: str, payload: InjuryEditInput):
    with session_scope() as s:
        plan = _plan_or_404(s, key)
        _injury_or_404(plan, injury_id)
        try:
            injury = injuries.update_injury(
                plan,
                injury_id,
                body_part=payload.body_part,
                severity=payload.severity,
                start_date=payload.start_date.isoformat() if payload.start_date else None,
                notes=payload.notes,
            )
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
        save_plan(s, key, plan)
        return InjuryOut.from_injury(injury)


@router.post("/plans/{key}/injuries/{injury_id}/resolve", response_model=InjuryOut, tags=["injuries"])
def resolve_injury(key: str, injury_id: str, today: Today):
    with session_scope() as s:
        plan = _plan_or_404(s, key)
        _injury_or_404(plan, injury_id)
        injury = injuries.resolve_injury(plan, injury_id, today)
        save_plan(s, key, plan)
        return InjuryOut.from_injury(injury)


@router.delete("/plans/{key}/injuries/{injury_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["injuries"])
def remove_injury(key: str, injury_id: str):
    with session_scope() as s:
        plan = _plan_or_404(s, key)
        _injury_or_404(plan, injury_id)
        injuries.delete_injury(plan, injury_id)
        save_plan(s, key, plan)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/plans/{key}/injury-warnings", response_model=InjuryWarningsOut, tags=["injuries"])
def injury_warnings(key: str, today: Today):
    with session_scope() as s:
        plan = _plan_or_404(s, key)
    active = injuries.active_injuries(plan)
    return InjuryWarningsOut(
        active=[InjuryOut.from_injury(i) for i in active],
        worst_severity=injuries.worst_severity(active),
        workouts=[WorkoutOut.from_workout(w) for w in injuries.injury_warnings(plan, today)],
    )


def _session_or_404(plan: TrainingPlan, session_id: str):
    entry = plan.find_cross_training(session_id)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Cross-training session not found")
    return entry


@router.get("/plans/{key}/cross-training", response_model=list[CrossTrainingOut], tags=["cross-training"])
def list_cross_training(key: str, start: Optional[date] = Query(None), end: Optional[date] = Query(None)):
    with session_scope() as s:
        plan = _plan_or_404(s, key)
    first = (start or date.min).isoformat()
    last = (end or date.max).isoformat()
    return [CrossTrainingOut.from_session(c) for c in cross_training.sessions_between(plan, first, last)]


@router.post(
    "/plans/{key}/cross-training",
    response_model=CrossTrainingOut,
    status_code=status.HTTP_201_CREATED,
    tags=["cross-training"],
)
def create_cross_training(key: str, payload: CrossTrainingInput):
    with session_scope() as s:
        plan = _plan_or_404(s, key)
        entry = cross_training.add_session(plan, payload.date.isoformat(), payload.activity, payload.duration, payload.notes)
        save_plan(s, key, plan)
        return CrossTrainingOut.from_session(entry)


@router.patch("/plans/{key}/cross-training/{session_id}", response_model=CrossTrainingOut, tags=["cross-training"])
def edit_cross_training(key: str, session_id: str, payload: CrossTrainingEditInput):
    with session_scope() as s:
        plan = _plan_or_404(s, key)
        _session_or_404(plan, session_id)
        entry = cross_training.update_session(
            plan,
            session_id,
            activity=payload.activity,
            duration=payload.duration,
            notes=payload.notes,
            day=payload.date.isoformat() if payload.date else None,
        )
        save_plan(s, key, plan)
        return CrossTrainingOut.from_session(entry)


@router.delete("/plans/{key}/cross-training/{session_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["cross-training"])
def remove_cross_training(key: str, session_id: str):
    with session_scope() as s:
        plan = _plan_or_404(s, key)
        _session_or_404(plan, session_id)
        cross_training.delete_session(plan, session_id)
        save_plan(s, key, plan)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/plans/{key}/cross-training/stats", response_model=CrossTrainingStatsOut, tags=["cross-training"])
def cross_training_stats(key: str):
    with session_scope() as s:
        plan = _plan_or_404(s, key)
    return CrossTrainingStatsOut.build(cross_training.cross_training_stats(plan))


@router.get("/plans/{key}/cross-training/activities", response_model=list[str], tags=["cross-training"])
def cross_training_activities(key: str):
    with session_scope() as s:
        plan = _plan_or_404(s, key)
    return cross_training.activity_choices(plan)
