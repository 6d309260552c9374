"""Weekday assignment around the long run. Day indices: 0 = Sunday ... 6 = Saturday."""

from __future__ import annotations

import math

TEMPO_GAP_TARGET = 3
TEMPO_GAP_MIN = 2


def days_before(day: int, long_run_day: int) -> int:
    """Days from ``day`` forward to the next long run, wrapping the week."""
    return (long_run_day - day + 7) % 7


def assign_other_days(long_run_day: int, days_per_week: int) -> list[int]:
    """Pick the ``days_per_week - 1`` non-long-run weekdays, sorted ascending.

    The day before the long run is only used when the rest of the week is
    full. Otherwise picks are spread evenly across the preferred pool.
    """
    day_before = (long_run_day + 6) % 7
    preferred: list[int] = []
    fallback: list[int] = []
    for day in range(7):
        if day == long_run_day:
            continue
        (fallback if day == day_before else preferred).append(day)

    needed = days_per_week - 1
    if needed <= 0:
        return []
    if needed <= len(preferred):
        step = len(preferred) / needed
        picks = [preferred[min(math.floor(i * step + step / 2), len(preferred) - 1)] for i in range(needed)]
        return sorted(picks)
    return sorted(preferred + fallback[: needed - len(preferred)])


def choose_tempo_slot(other_days: list[int], long_run_day: int) -> int:
    """Index into ``other_days`` of the tempo day: gap to long run nearest 3, at least 2."""
    best, best_score = 0, math.inf
    for i, day in enumerate(other_days):
        gap = days_before(day, long_run_day)
        score = abs(gap - TEMPO_GAP_TARGET)
        if gap >= TEMPO_GAP_MIN and score < best_score:
            best, best_score = i, score
    return best
