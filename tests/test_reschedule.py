"""Tests for moving planned workouts between days."""

from __future__ import annotations

from datetime import date

import pytest

from core.errors import (
    AlreadyCompletedError,
    NotFoundError,
    OutOfRangeError,
    SettingsMissingError,
    SlotConflictError,
    ValidationError,
)
from core.repositories import SettingsStore, WorkoutStore
from core.services.reschedule import MOVED_REST_DESCRIPTION, reschedule


def _slot(workouts, week, dow):
    return workouts.at_slot(week, dow)


def _monday_week1(workouts):
    (workout,) = _slot(workouts, 1, 1)
    return workout


def _assert_one_per_slot(workouts):
    slots = [(w.week_number, w.day_of_week) for w in workouts.list()]
    assert len(slots) == len(set(slots))


def test_move_onto_rest_day(session, planned):
    workouts, settings = WorkoutStore(session), SettingsStore(session)
    monday = _monday_week1(workouts)

    moved = reschedule(workouts, settings, monday.id, "2025-12-30")

    assert moved.id == monday.id
    assert (moved.week_number, moved.day_of_week) == (1, 2)
    assert [w.id for w in _slot(workouts, 1, 2)] == [monday.id]
    (placeholder,) = _slot(workouts, 1, 1)
    assert placeholder.type == "rest"
    assert placeholder.description == MOVED_REST_DESCRIPTION
    assert placeholder.completed is False
    assert workouts.count() == 84
    _assert_one_per_slot(workouts)


def test_move_across_weeks(session, planned):
    workouts, settings = WorkoutStore(session), SettingsStore(session)
    monday = _monday_week1(workouts)

    moved = reschedule(workouts, settings, monday.id, date(2026, 1, 10))  # week 2 Saturday

    assert (moved.week_number, moved.day_of_week) == (2, 6)
    _assert_one_per_slot(workouts)


def test_move_to_same_day_changes_nothing(session, planned):
    workouts, settings = WorkoutStore(session), SettingsStore(session)
    monday = _monday_week1(workouts)

    reschedule(workouts, settings, monday.id, "2025-12-29")

    assert workouts.count() == 84
    assert [w.id for w in _slot(workouts, 1, 1)] == [monday.id]


def test_conflict_leaves_plan_untouched(session, planned):
    workouts, settings = WorkoutStore(session), SettingsStore(session)
    monday = _monday_week1(workouts)
    (wednesday,) = _slot(workouts, 1, 3)

    with pytest.raises(SlotConflictError) as excinfo:
        reschedule(workouts, settings, monday.id, "2025-12-31")

    assert excinfo.value.details["occupant_id"] == wednesday.id
    assert excinfo.value.status_code == 409
    assert (monday.week_number, monday.day_of_week) == (1, 1)
    assert workouts.count() == 84


@pytest.mark.parametrize("target", ["2025-12-27", "2026-03-22"])
def test_out_of_range(session, planned, target):
    workouts, settings = WorkoutStore(session), SettingsStore(session)
    monday = _monday_week1(workouts)
    with pytest.raises(OutOfRangeError):
        reschedule(workouts, settings, monday.id, target)


def test_completed_workout_cannot_move(session, planned):
    workouts, settings = WorkoutStore(session), SettingsStore(session)
    monday = _monday_week1(workouts)
    workouts.update(monday.id, completed=True)
    with pytest.raises(AlreadyCompletedError):
        reschedule(workouts, settings, monday.id, "2025-12-30")


def test_unknown_workout(session, planned):
    with pytest.raises(NotFoundError):
        reschedule(WorkoutStore(session), SettingsStore(session), 99999, "2025-12-30")


def test_missing_settings(session):
    workouts = WorkoutStore(session)
    row = workouts.create({"week_number": 1, "day_of_week": 1, "type": "easy", "distance": 4, "description": "Easy"})
    with pytest.raises(SettingsMissingError):
        reschedule(workouts, SettingsStore(session), row.id, "2025-12-30")


def test_invalid_date(session, planned):
    workouts = WorkoutStore(session)
    with pytest.raises(ValidationError):
        reschedule(workouts, SettingsStore(session), _monday_week1(workouts).id, "30/12/2025")
