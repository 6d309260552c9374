"""Injury log kept alongside a plan.

A body part carries at most one unresolved injury at a time. While any
injury is active, the next few hard sessions are surfaced as warnings so
the runner can ease off.
"""

from __future__ import annotations

from datetime import date
import logging
from typing import Iterable, Optional

from halftrack.services.timeutils import date_str
from halftrack.services.workouts import Injury, Severity, TrainingPlan, Workout, WorkoutType, new_workout_id

logger = logging.getLogger(__name__)

HARD_TYPES = frozenset({WorkoutType.TEMPO, WorkoutType.LONG, WorkoutType.RACE})
WARNING_LIMIT = 3


def _same_part(a: str, b: str) -> bool:
    return a.strip().casefold() == b.strip().casefold()


def _active_for_part(plan: TrainingPlan, body_part: str) -> Optional[Injury]:
    return next((i for i in plan.injuries if not i.resolved and _same_part(i.body_part, body_part)), None)


def active_injuries(plan: TrainingPlan) -> list[Injury]:
    return [i for i in plan.injuries if not i.resolved]


def injuries_on(plan: TrainingPlan, day: str) -> list[Injury]:
    return [i for i in plan.injuries if i.active_on(day)]


def worst_severity(injuries: Iterable[Injury]) -> Optional[Severity]:
    return max((i.severity for i in injuries), key=lambda s: s.rank, default=None)


def add_injury(
    plan: TrainingPlan,
    body_part: str,
    severity: Severity,
    start_date: str,
    notes: str = "",
) -> Injury:
    """Log a new injury; raises ValueError if that body part already has an active one."""
    body_part = body_part.strip()
    if _active_for_part(plan, body_part) is not None:
        raise ValueError(f"Active injury already logged for {body_part}")
    injury = Injury(id=new_workout_id(), body_part=body_part, severity=severity, start_date=start_date, notes=notes)
    plan.injuries.append(injury)
    logger.info("injury_logged", extra={"ctx_body_part": body_part, "ctx_severity": severity.value})
    return injury


def update_injury(
    plan: TrainingPlan,
    injury_id: str,
    body_part: Optional[str] = None,
    severity: Optional[Severity] = None,
    start_date: Optional[str] = None,
    notes: Optional[str] = None,
) -> Optional[Injury]:
    injury = plan.find_injury(injury_id)
    if injury is None:
        return None
    if body_part is not None:
        body_part = body_part.strip()
        clash = _active_for_part(plan, body_part)
        if not injury.resolved and clash is not None and clash is not injury:
            raise ValueError(f"Active injury already logged for {body_part}")
        injury.body_part = body_part
    if severity is not None:
        injury.severity = severity
    if start_date is not None:
        injury.start_date = start_date
    if notes is not None:
        injury.notes = notes
    return injury


def resolve_injury(plan: TrainingPlan, injury_id: str, today: date) -> Optional[Injury]:
    injury = plan.find_injury(injury_id)
    if injury is None:
        return None
    if not injury.resolved:
        injury.resolved = True
        injury.resolved_date = date_str(today)
        logger.info("injury_resolved", extra={"ctx_body_part": injury.body_part})
    return injury


def delete_injury(plan: TrainingPlan, injury_id: str) -> bool:
    injury = plan.find_injury(injury_id)
    if injury is None:
        return False
    plan.injuries.remove(injury)
    return True


def injury_warnings(plan: TrainingPlan, today: date, limit: int = WARNING_LIMIT) -> list[Workout]:
    """Upcoming pending tempo, long and race runs while any injury is active."""
    if not active_injuries(plan):
        return []
    today_str = date_str(today)
    upcoming = sorted(
        (w for w in plan.workouts if w.is_pending and w.date >= today_str and w.type in HARD_TYPES),
        key=lambda w: w.date,
    )
    return upcoming[:limit]
