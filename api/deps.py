from __future__ import annotations

from datetime import date


def get_today() -> date:
    """Calendar date used for status guards; overridden in tests."""
    return date.today()
