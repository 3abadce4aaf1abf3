from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import pytest

from core.config import get_settings
from core.db import get_session_factory, init_db, reset_engine
from core.models import Activity
from core.repositories import ActivityStore
from core.services.plan_lifecycle import save_settings
from core.validators import SettingsInput

# A Sunday, so race day is the week-12 long run. Week 1 starts on 2025-12-28.
RACE_DATE = date(2026, 3, 15)


@pytest.fixture(autouse=True)
def tracker_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.setenv("TRACKER_TIMEZONE", "UTC")
    for key in ("ANTHROPIC_API_KEY", "WEBHOOK_TOKEN", "LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    reset_engine()
    yield
    get_settings.cache_clear()
    reset_engine()


@pytest.fixture
def session():
    init_db()
    s = get_session_factory()()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def planned(session):
    """Race settings plus the full twelve-week plan for RACE_DATE."""
    row, _ = save_settings(session, SettingsInput(race_date=RACE_DATE, race_name="City Half"))
    session.commit()
    return row


@pytest.fixture
def make_activity(session):
    counter = {"n": 0}

    def _make(
        when: datetime,
        distance: float = 5000.0,
        duration: int = 1800,
        avg_hr: Optional[int] = None,
        type: str = "Run",
    ) -> Activity:
        counter["n"] += 1
        return ActivityStore(session).create(
            {
                "strava_id": f"test-{counter['n']}",
                "type": type,
                "name": f"Run {counter['n']}",
                "distance": distance,
                "duration": duration,
                "avg_heart_rate": avg_hr,
                "date": when,
            }
        )

    return _make


@pytest.fixture
def set_timezone(monkeypatch):
    def _set(name: str) -> None:
        monkeypatch.setenv("TRACKER_TIMEZONE", name)
        get_settings.cache_clear()

    return _set
