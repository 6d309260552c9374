"""Plan-length arithmetic over Sunday-aligned, timezone-naive weeks."""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

from halftrack.services.timeutils import date_str, parse_date, week_sunday

DEFAULT_TOTAL_WEEKS = 13
MIN_TOTAL_WEEKS = 5
MAX_TOTAL_WEEKS = 20
DEFAULT_PLAN_DAYS = 84  # 12 weeks before race week


def clamp_total_weeks(weeks: int) -> int:
    return max(MIN_TOTAL_WEEKS, min(MAX_TOTAL_WEEKS, weeks))


def calc_total_weeks(start: Optional[str], race: Optional[str]) -> int:
    """Weeks from the start's Sunday-week to the race's Sunday-week, inclusive, clamped to [5, 20]."""
    if not race or not start:
        return DEFAULT_TOTAL_WEEKS
    start_sunday = week_sunday(parse_date(start))
    race_sunday = week_sunday(parse_date(race))
    diff = round((race_sunday - start_sunday).days / 7)
    return clamp_total_weeks(diff + 1)


def calc_start_from_race(race: str) -> str:
    """Default start: the Sunday twelve weeks before race week's Sunday."""
    return date_str(week_sunday(parse_date(race)) - timedelta(days=DEFAULT_PLAN_DAYS))


def week_number_for_date(start: str, target: str) -> int:
    """1-indexed plan week that ``target`` falls into (never below 1)."""
    delta = (week_sunday(parse_date(target)) - week_sunday(parse_date(start))).days
    return max(1, round(delta / 7) + 1)


def weeks_hint(start: Optional[str], race: Optional[str]) -> str:
    """Describe the training block the dates ask for, before any clamping."""
    if not start or not race:
        return ""
    span = round((week_sunday(parse_date(race)) - week_sunday(parse_date(start))).days / 7)
    if span < 4:
        return f"Only {span} training weeks - consider an earlier start or a later race."
    if span > 16:
        return f"{span} weeks is very long - consider starting closer to race day."
    return f"{span} training weeks + race week"
