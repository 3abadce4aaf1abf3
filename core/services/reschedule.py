"""Move a planned workout to another day of the plan.

Every (week, day) slot that held a workout keeps exactly one entry: a rest
placeholder at the target yields to the moved workout, and the vacated slot
gets a fresh rest placeholder.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Union

from core.errors import AlreadyCompletedError, NotFoundError, OutOfRangeError, SettingsMissingError, SlotConflictError
from core.models import PlannedWorkout
from core.repositories import SettingsStore, WorkoutStore
from core.services.plan_calendar import day_of_week, to_local_date, week_number_for_date

logger = logging.getLogger(__name__)

MOVED_REST_DESCRIPTION = "Rest day (workout moved)"


def resolve_target_slot(race_date: date, target: date, total_weeks: int) -> tuple[int, int]:
    week = week_number_for_date(race_date, target, total_weeks)
    if week is None:
        raise OutOfRangeError(target)
    return week, day_of_week(target)


def reschedule(
    workouts: WorkoutStore,
    settings: SettingsStore,
    workout_id: int,
    new_date: Union[date, datetime, str],
) -> PlannedWorkout:
    """Move ``workout_id`` to ``new_date``.

    All checks run before the first write, and the writes share the caller's
    session, so a failure leaves every slot as it was once the session rolls
    back.
    """
    workout = workouts.get(workout_id)
    if workout is None:
        raise NotFoundError("Workout not found", resource="workout", resource_id=workout_id)
    if workout.completed:
        raise AlreadyCompletedError(workout_id)

    race = settings.get()
    if race is None:
        raise SettingsMissingError()

    target_day = to_local_date(new_date)
    total_weeks = workouts.max_week_number()
    new_week, new_dow = resolve_target_slot(race.race_date, target_day, total_weeks)

    for occupant in workouts.at_slot(new_week, new_dow):
        if occupant.id != workout.id and not occupant.is_rest:
            raise SlotConflictError(new_week, new_dow, occupant.id)

    from_week, from_dow = workout.week_number, workout.day_of_week

    removed = workouts.delete_many(week_number=new_week, day_of_week=new_dow, type="rest", exclude_id=workout.id)
    moved = workouts.update(workout.id, week_number=new_week, day_of_week=new_dow)

    if (from_week, from_dow) != (new_week, new_dow):
        workouts.create(
            {
                "week_number": from_week,
                "day_of_week": from_dow,
                "type": "rest",
                "description": MOVED_REST_DESCRIPTION,
                "completed": False,
            }
        )

    logger.info(
        "Rescheduled workout %s from week %s day %s to week %s day %s (replaced %s rest day(s))",
        workout_id,
        from_week,
        from_dow,
        new_week,
        new_dow,
        removed,
    )
    return moved
