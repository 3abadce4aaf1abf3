"""Settings upsert, plan (re)creation and the plan overview."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from sqlalchemy.orm import Session

from core.errors import SettingsMissingError, ValidationError
from core.models import PlannedWorkout, RaceSettings
from core.repositories import ActivityStore, SettingsStore, WorkoutStore
from core.services.adaptation import AdaptationResult, regenerate_plan
from core.services.plan_calendar import current_week_number, workout_date
from core.services.planning import generate_plan
from core.validators import SettingsInput

logger = logging.getLogger(__name__)

PLAN_ACTIONS = ("regenerate", "reset", "clearAll")


@dataclass
class PlanOverview:
    race_date: date
    race_name: Optional[str]
    current_week: int
    total_weeks: int
    workouts: list[dict[str, Any]] = field(default_factory=list)


def write_full_plan(workouts: WorkoutStore, race_date: date) -> int:
    """Replace every planned workout with a fresh twelve-week plan."""
    workouts.delete_many()
    plan = generate_plan(race_date, force_full_plan=True)
    created = workouts.create_many(w.to_dict() for w in plan)
    logger.info("Generated %s planned workouts for race on %s", created, race_date.isoformat())
    return created


def save_settings(session: Session, data: SettingsInput) -> tuple[RaceSettings, bool]:
    """Create or update the race settings. Returns ``(settings, created)``.

    The plan is generated on first setup and rebuilt whenever the race date
    changes.
    """
    settings_store = SettingsStore(session)
    row, previous_race_date = settings_store.upsert(
        race_date=data.race_date,
        race_name=data.race_name,
        weekly_goal=data.weekly_goal,
    )
    created = previous_race_date is None
    if created or previous_race_date != data.race_date:
        write_full_plan(WorkoutStore(session), data.race_date)
    return row, created


def ensure_plan(session: Session) -> RaceSettings:
    race = SettingsStore(session).get()
    if race is None:
        raise SettingsMissingError()
    workouts = WorkoutStore(session)
    if workouts.count() == 0:
        write_full_plan(workouts, race.race_date)
    return race


def serialize_workout(workout: PlannedWorkout, race_date: date, total_weeks: int) -> dict[str, Any]:
    return {
        "id": workout.id,
        "week_number": workout.week_number,
        "day_of_week": workout.day_of_week,
        "type": workout.type,
        "distance": workout.distance,
        "duration": workout.duration,
        "description": workout.description,
        "completed": workout.completed,
        "activity_id": workout.activity_id,
        "date": workout_date(race_date, workout.week_number, workout.day_of_week, total_weeks),
    }


def plan_overview(session: Session, week: Optional[int] = None, today: Optional[date] = None) -> PlanOverview:
    race = ensure_plan(session)
    workouts = WorkoutStore(session)
    rows = workouts.list_ordered()
    total_weeks = max(w.week_number for w in rows)
    if week is not None:
        rows = [w for w in rows if w.week_number == week]
    return PlanOverview(
        race_date=race.race_date,
        race_name=race.race_name,
        current_week=current_week_number(race.race_date, total_weeks, today),
        total_weeks=total_weeks,
        workouts=[serialize_workout(w, race.race_date, total_weeks) for w in rows],
    )


def reset_plan(session: Session) -> int:
    race = SettingsStore(session).get()
    workouts = WorkoutStore(session)
    if race is None:
        return workouts.delete_many()
    return write_full_plan(workouts, race.race_date)


def clear_all(session: Session) -> int:
    """Drop every activity and workout, then rebuild the plan if a race is set."""
    workouts = WorkoutStore(session)
    workouts.delete_many()
    removed = ActivityStore(session).delete_all()
    logger.info("Cleared %s activities", removed)
    race = SettingsStore(session).get()
    if race is not None:
        return write_full_plan(workouts, race.race_date)
    return 0


def run_plan_action(session: Session, action: str) -> Optional[AdaptationResult]:
    if action == "regenerate":
        return regenerate_plan(WorkoutStore(session), ActivityStore(session), SettingsStore(session))
    if action == "reset":
        reset_plan(session)
        return None
    if action == "clearAll":
        clear_all(session)
        return None
    raise ValidationError(f"Invalid action: {action!r}", field="action", details={"allowed": list(PLAN_ACTIONS)})
