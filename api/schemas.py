from __future__ import annotations

from datetime import date as dt_date
from datetime import datetime as dt_datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class MessageOut(BaseModel):
    message: str
    id: Optional[int] = None
    details: dict[str, Any] = Field(default_factory=dict)


class SettingsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    race_date: dt_date
    race_name: Optional[str] = None
    weekly_goal: int


class SettingsEnvelope(BaseModel):
    settings: Optional[SettingsOut] = None


class WorkoutOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    week_number: int
    day_of_week: int
    type: str
    distance: Optional[float] = None
    duration: Optional[int] = None
    description: str
    completed: bool
    activity_id: Optional[int] = None


class DatedWorkoutOut(WorkoutOut):
    date: dt_date


class WorkoutEnvelope(BaseModel):
    workout: WorkoutOut


class PlanOut(BaseModel):
    workouts: list[DatedWorkoutOut]
    current_week: int
    total_weeks: int
    race_date: dt_date
    race_name: Optional[str] = None


class AdaptationOut(BaseModel):
    adjustments: list[str] = Field(default_factory=list)
    volume_multiplier: float = 1.0
    add_recovery_day: bool = False


class ActivityOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    strava_id: str
    type: str
    name: str
    distance: float
    duration: int
    avg_heart_rate: Optional[int] = None
    max_heart_rate: Optional[int] = None
    avg_pace: Optional[float] = None
    calories: Optional[int] = None
    perceived_effort: Optional[int] = None
    date: dt_datetime


class ActivityPage(BaseModel):
    activities: list[ActivityOut]
    total: int
    limit: int
    offset: int


class AnalysisOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    activity_id: int
    summary: str
    insights: str
    pace_analysis: Optional[str] = None
    hr_analysis: Optional[str] = None
    comparison: Optional[str] = None
    suggestions: Optional[str] = None
    updated_at: Optional[dt_datetime] = None


class IngestionOut(BaseModel):
    message: str
    id: int
    linked_workout_id: Optional[int] = None
    adaptation: Optional[AdaptationOut] = None
