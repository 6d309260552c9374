"""Time-string parsing, pace display, and timezone-naive calendar helpers.

Dates travel through the engine as ISO ``YYYY-MM-DD`` strings so that
ordering is a plain string comparison; arithmetic goes through
``datetime.date`` and back. Weekday indices are Sunday-based (0 = Sunday).
"""

from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Optional

DAYS_FULL = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
DAYS_SHORT = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def parse_time_secs(text: Optional[str]) -> Optional[int]:
    """Parse 'MM:SS' or 'H:MM:SS' into total seconds.

    Returns None for blank, non-numeric, or wrongly shaped input.
    """
    if text is None or not str(text).strip():
        return None
    parts = str(text).strip().split(":")
    try:
        nums = [int(p) for p in parts]
    except ValueError:
        return None
    if len(nums) == 2:
        return nums[0] * 60 + nums[1]
    if len(nums) == 3:
        return nums[0] * 3600 + nums[1] * 60 + nums[2]
    return None


def fmt_secs(seconds: Optional[float]) -> str:
    """Format seconds as H:MM:SS or M:SS ('--' when unknown)."""
    if seconds is None:
        return "--"
    total = int(round(seconds))
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    if h:
        return f"{h}:{m:02d}:{s:02d}"
    return f"{m}:{s:02d}"


def fmt_pace(sec_per_mile: Optional[float]) -> str:
    """Format seconds-per-mile as 'M:SS/mi'."""
    if not sec_per_mile:
        return "--"
    total = int(round(sec_per_mile))
    return f"{total // 60}:{total % 60:02d}/mi"


def parse_date(text: str) -> date:
    return date.fromisoformat(text)


def date_str(d: date) -> str:
    return d.isoformat()


def day_index(d: date) -> int:
    """Sunday-based weekday index (0 = Sunday ... 6 = Saturday)."""
    return (d.weekday() + 1) % 7


def week_sunday(d: date) -> date:
    """Sunday that opens the week containing ``d``."""
    return d - timedelta(days=day_index(d))


def weekday_index(name: str) -> int:
    """Map a weekday name ('Saturday', 'sat') to its Sunday-based index."""
    key = str(name or "").strip().lower()
    for idx, (full, short) in enumerate(zip(DAYS_FULL, DAYS_SHORT)):
        if key in (full.lower(), short.lower()):
            return idx
    raise ValueError(f"Unknown weekday: {name!r}")



def is_future(date_text: str, today: date) -> bool:
    return date_text > date_str(today)


def days_since(date_text: str, today: date) -> int:
    return (today - parse_date(date_text)).days


def round_half_up(value: float) -> int:
    """Nearest integer with halves rounded up (2.5 -> 3), unlike round()."""
    return math.floor(value + 0.5)
