"""Pydantic validation models for all data entry points."""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from core.errors import ValidationError
from core.services.plan_calendar import to_local_date

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_input(model: Type[ModelT], payload: Any) -> ModelT:
    """Validate ``payload`` against ``model``, raising the tracker's ValidationError."""
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        first = errors[0]["field"] if errors else None
        raise ValidationError(f"Invalid {model.__name__}", field=first, details={"errors": errors}) from exc


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _finite(value: Any) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError("must be a finite number")
    return number


class SettingsInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    race_date: date = Field(alias="raceDate")
    race_name: Optional[str] = Field(default=None, alias="raceName", max_length=200)
    weekly_goal: int = Field(default=4, alias="weeklyGoal", ge=1, le=7)

    @field_validator("race_date", mode="before")
    @classmethod
    def local_race_day(cls, v):
        if v is None or v == "":
            raise ValueError("Race date is required")
        return to_local_date(v)

    @field_validator("race_name", mode="before")
    @classmethod
    def empty_name_is_none(cls, v):
        return _blank_to_none(v)

    @field_validator("weekly_goal", mode="before")
    @classmethod
    def default_goal(cls, v):
        return 4 if v in (None, "", 0) else v


class RescheduleInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_date: date = Field(alias="newDate")

    @field_validator("new_date", mode="before")
    @classmethod
    def local_target_day(cls, v):
        if v is None or v == "":
            raise ValueError("newDate is required")
        return to_local_date(v)


class PlanActionInput(BaseModel):
    action: str


class WebhookPayload(BaseModel):
    """Activity payload as relayed by the fitness-platform webhook.

    Numeric fields may arrive as numbers or strings.
    """

    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    activity_id: str = Field(min_length=1)
    type: str = Field(min_length=1)
    name: Optional[str] = None
    distance: float = Field(gt=0)
    moving_time: Optional[int] = Field(default=None, ge=0)
    elapsed_time: Optional[int] = Field(default=None, ge=0)
    start_date: Optional[datetime] = None
    average_heartrate: Optional[int] = None
    max_heartrate: Optional[int] = None
    calories: Optional[int] = None

    @field_validator("activity_id", mode="before")
    @classmethod
    def id_as_text(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(int(_finite(v)))
        return v

    @field_validator("name", "start_date", mode="before")
    @classmethod
    def blank_optional(cls, v):
        return _blank_to_none(v)

    @field_validator("moving_time", "elapsed_time", "calories", mode="before")
    @classmethod
    def whole_number(cls, v):
        v = _blank_to_none(v)
        if v is None:
            return None
        return int(_finite(v))

    @field_validator("average_heartrate", "max_heartrate", mode="before")
    @classmethod
    def rounded_bpm(cls, v):
        v = _blank_to_none(v)
        if v is None:
            return None
        return int(round(_finite(v)))


class ManualActivityInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    strava_id: Optional[str] = Field(default=None, alias="stravaId")
    type: str = "Run"
    name: str = Field(default="Untitled Activity", max_length=200)
    distance: float = Field(ge=0)  # meters
    duration: int = Field(ge=0)  # seconds
    avg_heart_rate: Optional[int] = Field(default=None, alias="avgHeartRate", ge=30, le=250)
    max_heart_rate: Optional[int] = Field(default=None, alias="maxHeartRate", ge=30, le=250)
    avg_pace: Optional[float] = Field(default=None, alias="avgPace", ge=0)
    calories: Optional[int] = Field(default=None, ge=0)
    perceived_effort: Optional[int] = Field(default=None, alias="perceivedEffort", ge=1, le=10)
    date: datetime

    @field_validator("max_heart_rate")
    @classmethod
    def max_hr_gte_avg(cls, v, info):
        avg = info.data.get("avg_heart_rate")
        if v is not None and avg is not None and v < avg:
            raise ValueError("maxHeartRate must be >= avgHeartRate")
        return v


class AnalysisContent(BaseModel):
    """Narrative fields returned by the analysis generator."""

    model_config = ConfigDict(populate_by_name=True)

    summary: str
    insights: str
    pace_analysis: Optional[str] = Field(default=None, alias="paceAnalysis")
    hr_analysis: Optional[str] = Field(default=None, alias="hrAnalysis")
    comparison: Optional[str] = None
    suggestions: Optional[str] = None
