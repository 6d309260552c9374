"""Tests for plan progress, streaks and race countdown."""

from __future__ import annotations

from datetime import date

from halftrack.services import plan_actions
from halftrack.services.periodization import week_info
from halftrack.services.planning import generate_plan
from halftrack.services.progress import (
    current_week,
    plan_summary,
    plan_total_weeks,
    race_countdown,
    run_streak,
)
from halftrack.services.workouts import RunnerProfile, TrainingPlan, WorkoutType

PROFILE = RunnerProfile(
    name="Sam",
    days_per_week=4,
    long_run_day="Saturday",
    start_date="2025-01-06",
    race_date="2025-04-06",
    five_k_time="20:00",
)


def _on(plan: TrainingPlan, day: str):
    return next(w for w in plan.workouts if w.date == day)


def test_plan_total_weeks():
    assert plan_total_weeks(generate_plan(PROFILE)) == 14
    assert plan_total_weeks(TrainingPlan(profile=PROFILE)) == 14
    no_race = RunnerProfile(name="Sam", days_per_week=4, long_run_day="Saturday", start_date="2025-01-06")
    assert plan_total_weeks(TrainingPlan(profile=no_race)) == 13


def test_plan_total_weeks_ignores_runs_added_after_race_week():
    plan = generate_plan(PROFILE)
    extra = plan_actions.add_workout(plan, "2025-04-15", WorkoutType.RECOVERY, 3.0)
    assert extra.week == 15
    assert extra.wfe == 0
    assert plan_total_weeks(plan) == 14
    assert week_info(14, plan_total_weeks(plan)).is_race
    later = plan_actions.add_workout(plan, "2025-03-11", WorkoutType.EASY, 4.0)
    assert later.week == 10
    assert later.wfe == 4


def test_current_week_follows_next_pending_run():
    plan = generate_plan(PROFILE)
    assert current_week(plan, date(2025, 1, 6)) == 1
    assert current_week(plan, date(2025, 1, 12)) == 2
    _on(plan, "2025-01-12").completed = True
    _on(plan, "2025-01-14").skipped = True
    assert current_week(plan, date(2025, 1, 12)) == 2  # Jan 16 still pending
    assert current_week(plan, date(2025, 5, 1)) == 14


def test_run_streak_counts_back_from_today():
    plan = generate_plan(PROFILE)
    _on(plan, "2025-01-11").completed = True
    _on(plan, "2025-01-12").completed = True
    assert run_streak(plan, date(2025, 1, 12)) == 2
    assert run_streak(plan, date(2025, 1, 13)) == 0


def test_plan_summary_counts_and_miles():
    plan = generate_plan(PROFILE)
    long_run = _on(plan, "2025-01-11")
    long_run.completed = True
    long_run.actual_distance = 6.0
    _on(plan, "2025-01-07").skipped = True

    summary = plan_summary(plan, date(2025, 1, 12))
    assert summary.total == 53
    assert summary.completed == 1
    assert summary.skipped == 1
    assert summary.upcoming == 51
    assert summary.miles_completed == 6.0
    assert summary.weeks[1].planned == 14.0
    assert summary.weeks[1].completed == 5.0
    assert summary.weeks[1].skipped == 3.0
    assert list(summary.weeks) == list(range(1, 15))
    assert summary.half_estimate is not None
    assert summary.training_projection is None


def test_race_countdown():
    countdown = race_countdown(PROFILE, date(2025, 3, 26))
    assert (countdown.days, countdown.weeks, countdown.days_remainder) == (11, 1, 4)
    assert not countdown.is_past

    assert race_countdown(PROFILE, date(2025, 4, 6)).is_today
    past = race_countdown(PROFILE, date(2025, 4, 10))
    assert past.is_past
    assert past.weeks == 0


def test_race_countdown_without_race_date():
    profile = RunnerProfile(name="", days_per_week=3, long_run_day="Sunday", start_date="2025-01-06")
    assert race_countdown(profile, date(2025, 1, 6)) is None
