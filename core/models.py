from __future__ import annotations

import datetime as dt

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

WORKOUT_TYPES = ("easy", "tempo", "long", "interval", "rest", "recovery")


class Base(DeclarativeBase):
    pass


class RaceSettings(Base):
    """Singleton row holding the goal race."""

    __tablename__ = "settings"
    id: Mapped[int] = mapped_column(primary_key=True)
    race_date: Mapped[dt.date] = mapped_column(Date)
    race_name: Mapped[str | None] = mapped_column(String(200))
    weekly_goal: Mapped[int] = mapped_column(Integer, default=4)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=dt.datetime.utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, default=dt.datetime.utcnow, onupdate=dt.datetime.utcnow)
    __table_args__ = (CheckConstraint("weekly_goal between 1 and 7", name="ck_settings_weekly_goal"),)


class Activity(Base):
    __tablename__ = "activities"
    id: Mapped[int] = mapped_column(primary_key=True)
    strava_id: Mapped[str] = mapped_column(String(80), unique=True)
    type: Mapped[str] = mapped_column(String(40), default="Run")
    name: Mapped[str] = mapped_column(String(200), default="Untitled Activity")
    distance: Mapped[float] = mapped_column(Float)  # meters
    duration: Mapped[int] = mapped_column(Integer)  # seconds
    avg_heart_rate: Mapped[int | None] = mapped_column(Integer)
    max_heart_rate: Mapped[int | None] = mapped_column(Integer)
    avg_pace: Mapped[float | None] = mapped_column(Float)  # min/km
    calories: Mapped[int | None] = mapped_column(Integer)
    perceived_effort: Mapped[int | None] = mapped_column(Integer)
    date: Mapped[dt.datetime] = mapped_column(DateTime, index=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=dt.datetime.utcnow)

    @property
    def distance_km(self) -> float:
        return (self.distance or 0.0) / 1000


class PlannedWorkout(Base):
    __tablename__ = "planned_workouts"
    id: Mapped[int] = mapped_column(primary_key=True)
    week_number: Mapped[int] = mapped_column(Integer)
    day_of_week: Mapped[int] = mapped_column(Integer)  # 0=Sunday
    type: Mapped[str] = mapped_column(String(20))
    distance: Mapped[float | None] = mapped_column(Float)  # km
    duration: Mapped[int | None] = mapped_column(Integer)  # minutes
    description: Mapped[str] = mapped_column(Text, default="")
    completed: Mapped[bool] = mapped_column(Boolean, default=False)
    activity_id: Mapped[int | None] = mapped_column(ForeignKey("activities.id", ondelete="SET NULL"))
    __table_args__ = (
        Index("ix_planned_workouts_slot", "week_number", "day_of_week"),
        CheckConstraint("day_of_week between 0 and 6", name="ck_planned_workouts_day"),
        CheckConstraint("week_number >= 1", name="ck_planned_workouts_week"),
    )

    @property
    def is_rest(self) -> bool:
        return self.type == "rest"


class RunAnalysis(Base):
    __tablename__ = "run_analyses"
    id: Mapped[int] = mapped_column(primary_key=True)
    activity_id: Mapped[int] = mapped_column(ForeignKey("activities.id", ondelete="CASCADE"), unique=True)
    summary: Mapped[str] = mapped_column(Text)
    insights: Mapped[str] = mapped_column(Text)
    pace_analysis: Mapped[str | None] = mapped_column(Text)
    hr_analysis: Mapped[str | None] = mapped_column(Text)
    comparison: Mapped[str | None] = mapped_column(Text)
    suggestions: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=dt.datetime.utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, default=dt.datetime.utcnow, onupdate=dt.datetime.utcnow)
