"""Key-value persistence of a runner profile, its workout list and side logs as JSON blobs."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from halftrack.models import PlanStateRow
from halftrack.services.workouts import TrainingPlan

logger = logging.getLogger(__name__)


def save_plan(session: Session, key: str, plan: TrainingPlan) -> PlanStateRow:
    data = plan.to_dict()
    row = session.get(PlanStateRow, key)
    if row is None:
        row = PlanStateRow(key=key)
        session.add(row)
    row.profile_json = data["profile"]
    row.plan_json = data["workouts"]
    row.injuries_json = data["injuries"]
    row.cross_training_json = data["cross_training"]
    session.flush()
    logger.debug("plan_saved", extra={"ctx_key": key, "ctx_workouts": len(plan.workouts)})
    return row


def load_plan(session: Session, key: str) -> Optional[TrainingPlan]:
    row = session.get(PlanStateRow, key)
    if row is None:
        return None
    return TrainingPlan.from_dict(
        {
            "profile": row.profile_json,
            "workouts": row.plan_json or [],
            "injuries": row.injuries_json or [],
            "cross_training": row.cross_training_json or [],
        }
    )


def delete_plan(session: Session, key: str) -> bool:
    row = session.get(PlanStateRow, key)
    if row is None:
        return False
    session.delete(row)
    return True
