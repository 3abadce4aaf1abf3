"""Link ingested activities to the planned workout scheduled on the same day."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Union

from core.models import PlannedWorkout
from core.repositories import SettingsStore, WorkoutStore
from core.services.plan_calendar import to_local_date, workout_date

logger = logging.getLogger(__name__)


def find_matching_workout(
    candidates: list[PlannedWorkout],
    race_date: date,
    total_weeks: int,
    activity_day: date,
) -> Optional[PlannedWorkout]:
    """First uncompleted, non-rest candidate whose calendar day equals ``activity_day``."""
    for workout in candidates:
        if workout.completed or workout.is_rest:
            continue
        if workout_date(race_date, workout.week_number, workout.day_of_week, total_weeks) == activity_day:
            return workout
    return None


def link_activity(
    workouts: WorkoutStore,
    settings: SettingsStore,
    activity_id: int,
    activity_date: Union[date, datetime, str],
) -> Optional[PlannedWorkout]:
    """Mark the matching planned workout completed and point it at the activity.

    Returns the linked workout, or ``None`` when there is nothing to link (no
    settings, a run on a rest day, or the day's workout is already done).
    Calling it again with the same arguments is a no-op.
    """
    race = settings.get()
    if race is None:
        logger.info("Skipping link for activity %s: no settings", activity_id)
        return None

    activity_day = to_local_date(activity_date)
    total_weeks = workouts.max_week_number()
    candidates = workouts.list(completed=False, exclude_rest=True)
    match = find_matching_workout(candidates, race.race_date, total_weeks, activity_day)
    if match is None:
        logger.info("No planned workout on %s for activity %s", activity_day.isoformat(), activity_id)
        return None

    workouts.update(match.id, completed=True, activity_id=activity_id)
    logger.info(
        "Linked activity %s to workout %s (week %s, day %s)",
        activity_id,
        match.id,
        match.week_number,
        match.day_of_week,
    )
    return match
