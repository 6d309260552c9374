from __future__ import annotations

import pytest

from halftrack.config import get_settings
from halftrack.db import reset_engine


@pytest.fixture(autouse=True)
def _fresh_runtime(monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'halftrack-test.db'}")
    get_settings.cache_clear()
    reset_engine()
    yield
    get_settings.cache_clear()
    reset_engine()
