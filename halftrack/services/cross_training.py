"""Cross-training sessions logged next to the running plan."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Optional

from halftrack.services.workouts import CrossTraining, TrainingPlan, new_workout_id

logger = logging.getLogger(__name__)

ACTIVITY_SUGGESTIONS = ["Cycling", "Elliptical", "Hiking", "Rowing", "Strength", "Swimming", "Walking", "Yoga"]


@dataclass(frozen=True)
class ActivityTally:
    activity: str
    sessions: int
    minutes: int


@dataclass(frozen=True)
class CrossTrainingStats:
    sessions: int = 0
    minutes: int = 0
    by_activity: list[ActivityTally] = field(default_factory=list)


def add_session(plan: TrainingPlan, day: str, activity: str, duration: int = 0, notes: str = "") -> CrossTraining:
    session = CrossTraining(id=new_workout_id(), date=day, activity=activity.strip(), duration=max(0, int(duration)), notes=notes)
    plan.cross_training.append(session)
    logger.info("cross_training_logged", extra={"ctx_activity": session.activity, "ctx_minutes": session.duration})
    return session


def update_session(
    plan: TrainingPlan,
    session_id: str,
    activity: Optional[str] = None,
    duration: Optional[int] = None,
    notes: Optional[str] = None,
    day: Optional[str] = None,
) -> Optional[CrossTraining]:
    session = plan.find_cross_training(session_id)
    if session is None:
        return None
    if activity:
        session.activity = activity.strip()
    if duration is not None:
        session.duration = max(0, int(duration))
    if notes is not None:
        session.notes = notes
    if day is not None:
        session.date = day
    return session


def delete_session(plan: TrainingPlan, session_id: str) -> bool:
    session = plan.find_cross_training(session_id)
    if session is None:
        return False
    plan.cross_training.remove(session)
    return True


def sessions_between(plan: TrainingPlan, first: str, last: str) -> list[CrossTraining]:
    """Sessions dated within ``[first, last]``, in date order."""
    return sorted((c for c in plan.cross_training if first <= c.date <= last), key=lambda c: c.date)


def cross_training_stats(plan: TrainingPlan) -> CrossTrainingStats:
    """Totals plus a per-activity breakdown, most-logged activity first."""
    counts: dict[str, list[int]] = {}
    for c in plan.cross_training:
        tally = counts.setdefault(c.activity, [0, 0])
        tally[0] += 1
        tally[1] += c.duration or 0
    by_activity = [
        ActivityTally(activity=name, sessions=n, minutes=mins)
        for name, (n, mins) in sorted(counts.items(), key=lambda kv: (-kv[1][0], kv[0]))
    ]
    return CrossTrainingStats(
        sessions=len(plan.cross_training),
        minutes=sum(c.duration or 0 for c in plan.cross_training),
        by_activity=by_activity,
    )


def activity_choices(plan: TrainingPlan) -> list[str]:
    """Known and previously logged activities, most-logged first, then alphabetical."""
    counts: dict[str, int] = {name: 0 for name in ACTIVITY_SUGGESTIONS}
    for c in plan.cross_training:
        counts[c.activity] = counts.get(c.activity, 0) + 1
    return sorted(counts, key=lambda name: (-counts[name], name))
