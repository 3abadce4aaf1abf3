"""Tests for Pydantic input validation models."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from core.errors import ValidationError
from core.validators import (
    AnalysisContent,
    ManualActivityInput,
    PlanActionInput,
    RescheduleInput,
    SettingsInput,
    WebhookPayload,
    parse_input,
)


# --- SettingsInput ---

def test_settings_aliases():
    data = parse_input(SettingsInput, {"raceDate": "2026-03-15", "raceName": "City Half", "weeklyGoal": 5})
    assert data.race_date == date(2026, 3, 15)
    assert data.race_name == "City Half"
    assert data.weekly_goal == 5


def test_settings_defaults():
    data = parse_input(SettingsInput, {"raceDate": "2026-03-15", "raceName": "", "weeklyGoal": None})
    assert data.race_name is None
    assert data.weekly_goal == 4


def test_settings_field_names_accepted():
    data = SettingsInput(race_date=date(2026, 3, 15))
    assert data.weekly_goal == 4


def test_settings_race_date_from_timestamp():
    data = parse_input(SettingsInput, {"raceDate": "2026-03-15T09:00:00Z"})
    assert data.race_date == date(2026, 3, 15)


@pytest.mark.parametrize("body", [{}, {"raceDate": ""}, {"raceDate": "2026-03-15", "weeklyGoal": 9}])
def test_settings_invalid(body):
    with pytest.raises(ValidationError) as excinfo:
        parse_input(SettingsInput, body)
    assert excinfo.value.status_code == 400


def test_parse_input_reports_fields():
    with pytest.raises(ValidationError) as excinfo:
        parse_input(SettingsInput, {"raceDate": "2026-03-15", "weeklyGoal": 0.5})
    errors = excinfo.value.details["errors"]
    assert errors[0]["field"] == "weeklyGoal"


# --- RescheduleInput ---

def test_reschedule_input():
    assert parse_input(RescheduleInput, {"newDate": "2026-01-07"}).new_date == date(2026, 1, 7)


def test_reschedule_input_required():
    with pytest.raises(ValidationError):
        parse_input(RescheduleInput, {})


# --- PlanActionInput ---

def test_plan_action_requires_action():
    with pytest.raises(ValidationError):
        parse_input(PlanActionInput, {"action": None})


# --- WebhookPayload ---

def test_webhook_coerces_strings():
    p = WebhookPayload.model_validate(
        {
            "activity_id": 123,
            "type": "Run",
            "distance": "5000.5",
            "moving_time": "1800.0",
            "average_heartrate": "151.5",
            "max_heartrate": "",
            "start_date": "2026-01-05T07:00:00Z",
        }
    )
    assert p.activity_id == "123"
    assert p.distance == 5000.5
    assert p.moving_time == 1800
    assert p.average_heartrate == 152
    assert p.max_heartrate is None
    assert p.start_date == datetime(2026, 1, 5, 7, 0, tzinfo=timezone.utc)


def test_webhook_ignores_unknown_fields():
    p = WebhookPayload.model_validate({"activity_id": "1", "type": "Run", "distance": 1000, "athlete": {"id": 9}})
    assert not hasattr(p, "athlete")


def test_webhook_rejects_negative_time():
    with pytest.raises(ValidationError):
        parse_input(WebhookPayload, {"activity_id": "1", "type": "Run", "distance": 1000, "moving_time": -5})


# --- ManualActivityInput ---

def test_manual_activity_aliases():
    a = ManualActivityInput.model_validate(
        {"distance": 5000, "duration": 1500, "date": "2026-01-05T07:00:00", "maxHeartRate": 170, "avgPace": 5.0}
    )
    assert a.max_heart_rate == 170
    assert a.avg_pace == 5.0
    assert a.name == "Untitled Activity"


def test_manual_activity_effort_range():
    with pytest.raises(ValidationError):
        parse_input(
            ManualActivityInput,
            {"distance": 5000, "duration": 1500, "date": "2026-01-05T07:00:00", "perceivedEffort": 11},
        )


# --- AnalysisContent ---

def test_analysis_content_aliases():
    c = AnalysisContent.model_validate({"summary": "s", "insights": "i", "paceAnalysis": "p", "hrAnalysis": "h"})
    assert (c.pace_analysis, c.hr_analysis) == ("p", "h")
    assert c.model_dump()["pace_analysis"] == "p"
