"""Race setup through ingestion, adaptation and rescheduling in one session."""

from __future__ import annotations

from datetime import date

from core.repositories import ActivityStore, SettingsStore, WorkoutStore
from core.services.ingestion import ingest_webhook
from core.services.plan_lifecycle import plan_overview, run_plan_action, save_settings
from core.services.reschedule import reschedule
from core.validators import SettingsInput


def _run(strava_id, start, distance=5000, seconds=1800):
    return {
        "activity_id": strava_id,
        "type": "Run",
        "distance": distance,
        "moving_time": seconds,
        "start_date": start,
    }


def test_full_training_flow(session):
    _, created = save_settings(session, SettingsInput(race_date=date(2026, 3, 15), race_name="City Half"))
    assert created is True

    overview = plan_overview(session, today=date(2025, 12, 29))
    assert len(overview.workouts) == 84
    assert overview.current_week == 1
    race_day = [w for w in overview.workouts if w["week_number"] == 12 and w["day_of_week"] == 0][0]
    assert race_day["date"] == date(2026, 3, 15)
    assert race_day["distance"] == 21.1

    # Skip the Sunday long run, hit Monday and Wednesday
    ingest_webhook(session, _run("a1", "2025-12-29T07:00:00Z", distance=4000))
    result = ingest_webhook(session, _run("a2", "2025-12-31T07:00:00Z"))
    assert result.linked_workout_id is not None
    # 2 of 4 is not below 50%, so the partial cut applies
    assert result.adaptation.volume_multiplier == 0.9

    workouts = WorkoutStore(session)
    (week2_monday,) = workouts.at_slot(2, 1)
    # First ingest cut 20%, second cut 10% on top: 5 -> 4.0 -> 3.6
    assert week2_monday.distance == 3.6

    moved = reschedule(workouts, SettingsStore(session), week2_monday.id, "2026-01-06")
    assert (moved.week_number, moved.day_of_week) == (2, 2)
    assert workouts.count() == 84

    ingest_webhook(session, _run("a3", "2026-01-06T07:00:00Z", distance=3600))
    assert workouts.get(moved.id).completed is True

    # Race day run links to the half marathon
    final = ingest_webhook(session, _run("race", "2026-03-15T08:00:00Z", distance=21100, seconds=7200))
    race_workout = workouts.get(final.linked_workout_id)
    assert (race_workout.week_number, race_workout.day_of_week, race_workout.type) == (12, 0, "long")

    run_plan_action(session, "clearAll")
    assert ActivityStore(session).count() == 0
    assert workouts.count() == 84
    assert workouts.list(completed=True) == []
