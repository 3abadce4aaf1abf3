"""Tests for race-anchored calendar arithmetic."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from core.errors import ValidationError
from core.services.plan_calendar import (
    current_week_number,
    day_of_week,
    sunday_of,
    to_local_date,
    to_local_datetime,
    week_number_for_date,
    week_start_date,
    weeks_until_race,
    workout_date,
)

RACE = date(2026, 3, 15)  # Sunday


def test_day_of_week_is_sunday_based():
    assert day_of_week(date(2026, 3, 15)) == 0
    assert day_of_week(date(2026, 3, 16)) == 1
    assert day_of_week(date(2026, 3, 21)) == 6


def test_sunday_of():
    assert sunday_of(date(2026, 3, 18)) == date(2026, 3, 15)
    assert sunday_of(date(2026, 3, 15)) == date(2026, 3, 15)
    assert sunday_of(date(2026, 3, 21)) == date(2026, 3, 15)


def test_weeks_until_race():
    assert weeks_until_race(RACE, today=date(2025, 12, 30)) == 11
    assert weeks_until_race(RACE, today=date(2026, 3, 21)) == 0
    assert weeks_until_race(RACE, today=date(2026, 3, 22)) == -1


def test_week_one_starts_eleven_weeks_before_race_sunday():
    assert week_start_date(RACE, 1, 12) == date(2025, 12, 28)
    assert week_start_date(RACE, 12, 12) == date(2026, 3, 15)


def test_workout_date_race_day_is_week_twelve_sunday():
    assert workout_date(RACE, 12, 0, 12) == RACE
    assert workout_date(RACE, 1, 1, 12) == date(2025, 12, 29)


def test_saturday_race_keeps_race_week_sunday():
    saturday_race = date(2026, 3, 21)
    assert workout_date(saturday_race, 12, 6, 12) == saturday_race
    assert workout_date(saturday_race, 12, 0, 12) == date(2026, 3, 15)


def test_current_week_number_clamped():
    assert current_week_number(RACE, 12, today=date(2025, 12, 30)) == 1
    assert current_week_number(RACE, 12, today=date(2026, 2, 11)) == 7
    assert current_week_number(RACE, 12, today=date(2025, 6, 1)) == 1
    assert current_week_number(RACE, 12, today=date(2026, 5, 1)) == 12


def test_current_week_number_never_decreases_toward_race():
    day = date(2025, 9, 1)
    previous = 1
    while day <= date(2026, 4, 30):
        week = current_week_number(RACE, 12, today=day)
        assert 1 <= week <= 12, day
        assert week >= previous, day
        previous = week
        day += timedelta(days=1)
    assert previous == 12


def test_week_number_for_date():
    assert week_number_for_date(RACE, date(2025, 12, 28), 12) == 1
    assert week_number_for_date(RACE, date(2026, 3, 21), 12) == 12
    assert week_number_for_date(RACE, date(2025, 12, 27), 12) is None
    assert week_number_for_date(RACE, date(2026, 3, 22), 12) is None


class TestToLocalDate:
    def test_date_only_string_taken_as_is(self):
        assert to_local_date("2026-03-15") == date(2026, 3, 15)

    def test_date_passthrough(self):
        assert to_local_date(date(2026, 3, 15)) == date(2026, 3, 15)

    def test_naive_datetime_is_local(self):
        assert to_local_date(datetime(2026, 3, 15, 23, 59)) == date(2026, 3, 15)

    def test_aware_string_converted_to_configured_zone(self):
        # conftest pins the tracker zone to UTC
        assert to_local_date("2026-03-15T23:30:00-05:00") == date(2026, 3, 16)

    def test_explicit_zone_wins(self):
        assert to_local_date("2026-03-16T02:00:00Z", tz="America/New_York") == date(2026, 3, 15)

    def test_configured_zone(self, set_timezone):
        set_timezone("America/Los_Angeles")
        assert to_local_date(datetime(2025, 12, 29, 3, 0, tzinfo=timezone.utc)) == date(2025, 12, 28)

    def test_invalid_string(self):
        with pytest.raises(ValidationError):
            to_local_date("not-a-date")

    def test_empty_string(self):
        with pytest.raises(ValidationError):
            to_local_date("  ")

    def test_unsupported_type(self):
        with pytest.raises(ValidationError):
            to_local_date(12345)

    def test_unknown_zone(self):
        with pytest.raises(ValidationError):
            to_local_date(datetime(2026, 3, 15, tzinfo=timezone.utc), tz="Mars/Olympus_Mons")


def test_to_local_datetime_drops_zone():
    aware = datetime(2026, 3, 16, 2, 0, tzinfo=timezone.utc)
    assert to_local_datetime(aware, tz="America/New_York") == datetime(2026, 3, 15, 22, 0)
    naive = datetime(2026, 3, 15, 7, 0)
    assert to_local_datetime(naive) is naive
