from __future__ import annotations

import datetime as dt
from typing import Any

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class PlanStateRow(Base):
    """One stored plan: the runner profile, its workout list and side logs as JSON blobs."""

    __tablename__ = "plan_states"
    key: Mapped[str] = mapped_column(String(80), primary_key=True)
    profile_json: Mapped[dict[str, Any]] = mapped_column(JSON)
    plan_json: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    injuries_json: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    cross_training_json: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, default=dt.datetime.utcnow, onupdate=dt.datetime.utcnow)
