"""SQLAlchemy-backed stores for settings, planned workouts, activities and analyses.

Each store wraps a caller-owned ``Session``; committing or rolling back is
left to the caller (normally ``core.db.session_scope``), so a service can run
several store operations as one unit of work.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Iterable, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from core.errors import ValidationError
from core.models import Activity, PlannedWorkout, RaceSettings, RunAnalysis

_MUTABLE_WORKOUT_FIELDS = {
    "week_number",
    "day_of_week",
    "type",
    "distance",
    "duration",
    "description",
    "completed",
    "activity_id",
}


class SettingsStore:
    def __init__(self, session: Session):
        self.session = session

    def get(self) -> Optional[RaceSettings]:
        return self.session.execute(select(RaceSettings).order_by(RaceSettings.id).limit(1)).scalar_one_or_none()

    def upsert(self, race_date: dt.date, race_name: Optional[str] = None, weekly_goal: int = 4) -> tuple[RaceSettings, Optional[dt.date]]:
        """Create or update the singleton row.

        Returns the row and the race date it held before (``None`` on create).
        """
        existing = self.get()
        if existing is None:
            row = RaceSettings(race_date=race_date, race_name=race_name, weekly_goal=weekly_goal)
            self.session.add(row)
            self.session.flush()
            return row, None
        previous = existing.race_date
        existing.race_date = race_date
        existing.race_name = race_name
        existing.weekly_goal = weekly_goal
        self.session.flush()
        return existing, previous


class WorkoutStore:
    def __init__(self, session: Session):
        self.session = session

    def list(
        self,
        week_number: Optional[int] = None,
        completed: Optional[bool] = None,
        exclude_rest: bool = False,
    ) -> list[PlannedWorkout]:
        q = select(PlannedWorkout)
        if week_number is not None:
            q = q.where(PlannedWorkout.week_number == week_number)
        if completed is not None:
            q = q.where(PlannedWorkout.completed == completed)
        if exclude_rest:
            q = q.where(PlannedWorkout.type != "rest")
        return list(self.session.execute(q.order_by(PlannedWorkout.id)).scalars().all())

    def list_ordered(self) -> list[PlannedWorkout]:
        q = select(PlannedWorkout).order_by(PlannedWorkout.week_number, PlannedWorkout.day_of_week, PlannedWorkout.id)
        return list(self.session.execute(q).scalars().all())

    def at_slot(self, week_number: int, day_of_week: int) -> list[PlannedWorkout]:
        q = (
            select(PlannedWorkout)
            .where(PlannedWorkout.week_number == week_number, PlannedWorkout.day_of_week == day_of_week)
            .order_by(PlannedWorkout.id)
        )
        return list(self.session.execute(q).scalars().all())

    def get(self, workout_id: int) -> Optional[PlannedWorkout]:
        return self.session.get(PlannedWorkout, workout_id)

    def count(self) -> int:
        return int(self.session.execute(select(func.count()).select_from(PlannedWorkout)).scalar_one())

    def max_week_number(self) -> int:
        value = self.session.execute(select(func.max(PlannedWorkout.week_number))).scalar_one_or_none()
        return int(value or 0)

    def create(self, data: dict[str, Any]) -> PlannedWorkout:
        row = PlannedWorkout(**data)
        self.session.add(row)
        self.session.flush()
        return row

    def create_many(self, rows: Iterable[dict[str, Any]]) -> int:
        created = [PlannedWorkout(**data) for data in rows]
        self.session.add_all(created)
        self.session.flush()
        return len(created)

    def update(self, workout_id: int, **patch: Any) -> Optional[PlannedWorkout]:
        unknown = set(patch) - _MUTABLE_WORKOUT_FIELDS
        if unknown:
            raise ValidationError(f"Unknown workout fields: {sorted(unknown)}")
        row = self.get(workout_id)
        if row is None:
            return None
        for key, value in patch.items():
            setattr(row, key, value)
        self.session.flush()
        return row

    def delete_many(
        self,
        week_number: Optional[int] = None,
        day_of_week: Optional[int] = None,
        type: Optional[str] = None,
        exclude_id: Optional[int] = None,
    ) -> int:
        stmt = delete(PlannedWorkout)
        if week_number is not None:
            stmt = stmt.where(PlannedWorkout.week_number == week_number)
        if day_of_week is not None:
            stmt = stmt.where(PlannedWorkout.day_of_week == day_of_week)
        if type is not None:
            stmt = stmt.where(PlannedWorkout.type == type)
        if exclude_id is not None:
            stmt = stmt.where(PlannedWorkout.id != exclude_id)
        result = self.session.execute(stmt.execution_options(synchronize_session="fetch"))
        self.session.flush()
        return int(result.rowcount or 0)

    def linked_to(self, activity_id: int) -> Optional[PlannedWorkout]:
        q = select(PlannedWorkout).where(PlannedWorkout.activity_id == activity_id).order_by(PlannedWorkout.id).limit(1)
        return self.session.execute(q).scalar_one_or_none()


class ActivityStore:
    def __init__(self, session: Session):
        self.session = session

    def list(self, limit: int = 50, offset: int = 0) -> list[Activity]:
        q = select(Activity).order_by(Activity.date.desc(), Activity.id.desc()).offset(offset).limit(limit)
        return list(self.session.execute(q).scalars().all())

    def count(self) -> int:
        return int(self.session.execute(select(func.count()).select_from(Activity)).scalar_one())

    def get(self, activity_id: int) -> Optional[Activity]:
        return self.session.get(Activity, activity_id)

    def get_many(self, activity_ids: Iterable[int]) -> list[Activity]:
        ids = [i for i in activity_ids if i is not None]
        if not ids:
            return []
        q = select(Activity).where(Activity.id.in_(ids)).order_by(Activity.id)
        return list(self.session.execute(q).scalars().all())

    def find_by_external_id(self, strava_id: str) -> Optional[Activity]:
        return self.session.execute(select(Activity).where(Activity.strava_id == strava_id)).scalar_one_or_none()

    def create(self, data: dict[str, Any]) -> Activity:
        row = Activity(**data)
        self.session.add(row)
        self.session.flush()
        return row

    def recent_runs(self, before: dt.datetime, exclude_id: Optional[int] = None, limit: int = 10) -> list[Activity]:
        q = select(Activity).where(Activity.type == "Run", Activity.date < before)
        if exclude_id is not None:
            q = q.where(Activity.id != exclude_id)
        q = q.order_by(Activity.date.desc()).limit(limit)
        return list(self.session.execute(q).scalars().all())

    def delete_all(self) -> int:
        self.session.execute(delete(RunAnalysis))
        result = self.session.execute(delete(Activity))
        self.session.flush()
        return int(result.rowcount or 0)


class AnalysisStore:
    def __init__(self, session: Session):
        self.session = session

    def get(self, activity_id: int) -> Optional[RunAnalysis]:
        return self.session.execute(select(RunAnalysis).where(RunAnalysis.activity_id == activity_id)).scalar_one_or_none()

    def upsert(self, activity_id: int, data: dict[str, Any]) -> RunAnalysis:
        row = self.get(activity_id)
        if row is None:
            row = RunAnalysis(activity_id=activity_id, **data)
            self.session.add(row)
        else:
            for key, value in data.items():
                setattr(row, key, value)
        self.session.flush()
        return row
