"""Narrative run analysis.

The generator is an opaque collaborator: nothing else in the tracker reads the
text it returns, and a missing API key or a failed call produces a placeholder
instead of an error.
"""

from __future__ import annotations

import json
import logging
from typing import Optional, Protocol

import anthropic
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from core.config import Settings, get_settings
from core.errors import DependencyError, NotFoundError
from core.models import Activity, PlannedWorkout, RunAnalysis
from core.repositories import ActivityStore, AnalysisStore, WorkoutStore
from core.validators import AnalysisContent

logger = logging.getLogger(__name__)

NOT_CONFIGURED = AnalysisContent(
    summary="AI analysis is not available. Please configure ANTHROPIC_API_KEY.",
    insights="To enable AI-powered run analysis, add your Anthropic API key to the environment variables.",
)
UNAVAILABLE = AnalysisContent(
    summary="Unable to generate AI analysis at this time.",
    insights="An error occurred while analyzing this run. Please try regenerating the analysis later.",
)

PROMPT_GUIDELINES = """Based on this data, provide analysis in the following JSON format:
{
  "summary": "A brief 1-2 sentence summary of the run and overall assessment",
  "insights": "Detailed analysis of the run performance (2-4 sentences). Include observations about effort, execution, and notable patterns.",
  "paceAnalysis": "Analysis of pacing strategy if pace data is available, or null if no pace data",
  "hrAnalysis": "Heart rate zone analysis if HR data is available, or null if no HR data",
  "comparison": "Comparison to the planned workout if one was linked, or null if no planned workout",
  "suggestions": "1-2 specific, actionable suggestions for improvement or things to focus on next time"
}

Guidelines:
- Be encouraging but honest
- Focus on actionable insights
- Keep responses concise
- Use metric units (km, min/km)
- If data is missing, work with what's available
- Reference recent activities to identify trends when relevant

Respond with only valid JSON, no markdown code blocks or additional text."""


def format_pace(pace_min_per_km: float) -> str:
    minutes = int(pace_min_per_km)
    seconds = int(round((pace_min_per_km - minutes) * 60))
    if seconds == 60:
        minutes, seconds = minutes + 1, 0
    return f"{minutes}:{seconds:02d}"


def format_duration(total_seconds: int) -> str:
    hours, rem = divmod(int(total_seconds), 3600)
    minutes, secs = divmod(rem, 60)
    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    return f"{minutes}m {secs}s"


def _or_na(value, suffix: str = "") -> str:
    return f"{value}{suffix}" if value is not None else "N/A"


def build_activity_context(activity: Activity) -> str:
    pace = format_pace(activity.avg_pace) if activity.avg_pace else "N/A"
    lines = [
        f"Activity: {activity.name}",
        f"Date: {activity.date.date().isoformat()}",
        f"Type: {activity.type}",
        f"Distance: {activity.distance_km:.2f} km",
        f"Duration: {format_duration(activity.duration)}",
        f"Average Pace: {pace} /km",
        f"Average Heart Rate: {_or_na(activity.avg_heart_rate, ' bpm')}",
        f"Max Heart Rate: {_or_na(activity.max_heart_rate, ' bpm')}",
        f"Calories: {_or_na(activity.calories)}",
        f"Perceived Effort: {_or_na(activity.perceived_effort, '/10')}",
    ]
    return "\n".join(lines)


def build_planned_workout_context(workout: Optional[PlannedWorkout]) -> str:
    if workout is None:
        return "No planned workout was linked to this activity."
    distance = f"{workout.distance} km" if workout.distance else "N/A"
    duration = format_duration(workout.duration * 60) if workout.duration else "N/A"
    return "\n".join(
        [
            "Planned Workout:",
            f"- Type: {workout.type}",
            f"- Description: {workout.description}",
            f"- Target Distance: {distance}",
            f"- Target Duration: {duration}",
            f"- Week Number: {workout.week_number}",
        ]
    )


def build_recent_activities_context(activities: list[Activity]) -> str:
    if not activities:
        return "No recent activities to compare with."
    rows = []
    for a in activities:
        pace = format_pace(a.avg_pace) if a.avg_pace else "N/A"
        rows.append(
            f"- {a.date.date().isoformat()}: {a.name} - {a.distance_km:.2f}km at {pace}/km, "
            f"HR: {_or_na(a.avg_heart_rate)} bpm"
        )
    return f"Recent Activities (last {len(activities)}):\n" + "\n".join(rows)


def build_prompt(activity: Activity, planned: Optional[PlannedWorkout], recent: list[Activity]) -> str:
    return "\n\n".join(
        [
            "You are an experienced running coach analyzing a completed run. "
            "Provide helpful, encouraging, and actionable feedback.",
            build_activity_context(activity),
            build_planned_workout_context(planned),
            build_recent_activities_context(recent),
            PROMPT_GUIDELINES,
        ]
    )


class AnalysisGenerator(Protocol):
    def generate(
        self,
        activity: Activity,
        planned: Optional[PlannedWorkout],
        recent: list[Activity],
    ) -> AnalysisContent:
        """Return narrative fields, or raise DependencyError."""


class AnthropicAnalysisGenerator:
    """Generator backed by the Anthropic Messages API."""

    SERVICE_NAME = "anthropic"

    def __init__(self, api_key: str, model: str, max_tokens: int = 1024, client: Optional[anthropic.Anthropic] = None):
        self.model = model
        self.max_tokens = max_tokens
        self.client = client or anthropic.Anthropic(api_key=api_key)

    def generate(self, activity, planned, recent) -> AnalysisContent:
        prompt = build_prompt(activity, planned, recent)
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as exc:
            raise DependencyError(f"Analysis request failed: {exc}", service=self.SERVICE_NAME) from exc

        text = next((block.text for block in response.content if getattr(block, "type", None) == "text"), None)
        if not text:
            raise DependencyError("No text response from analysis model", service=self.SERVICE_NAME)
        return parse_analysis_text(text)


def parse_analysis_text(text: str) -> AnalysisContent:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`")
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]
    try:
        return AnalysisContent.model_validate(json.loads(cleaned))
    except (json.JSONDecodeError, PydanticValidationError) as exc:
        raise DependencyError("Analysis response was not valid JSON", service="anthropic") from exc


def default_generator(settings: Optional[Settings] = None) -> Optional[AnalysisGenerator]:
    settings = settings or get_settings()
    if not settings.analysis_enabled:
        return None
    return AnthropicAnalysisGenerator(
        api_key=settings.anthropic_api_key,
        model=settings.analysis_model,
        max_tokens=settings.analysis_max_tokens,
    )


def generate_run_analysis(
    activity: Activity,
    planned: Optional[PlannedWorkout],
    recent: list[Activity],
    generator: Optional[AnalysisGenerator],
) -> AnalysisContent:
    if generator is None:
        logger.warning("Analysis generator not configured; returning placeholder for activity %s", activity.id)
        return NOT_CONFIGURED
    try:
        return generator.generate(activity, planned, recent)
    except DependencyError as exc:
        logger.warning("Analysis failed for activity %s: %s", activity.id, exc.message)
        return UNAVAILABLE


def generate_and_store_analysis(
    session: Session,
    activity_id: int,
    generator: Optional[AnalysisGenerator] = None,
    recent_limit: Optional[int] = None,
) -> RunAnalysis:
    activities = ActivityStore(session)
    activity = activities.get(activity_id)
    if activity is None:
        raise NotFoundError("Activity not found", resource="activity", resource_id=activity_id)

    limit = recent_limit if recent_limit is not None else get_settings().analysis_recent_limit
    planned = WorkoutStore(session).linked_to(activity_id)
    recent = activities.recent_runs(before=activity.date, exclude_id=activity_id, limit=limit)

    content = generate_run_analysis(activity, planned, recent, generator)
    return AnalysisStore(session).upsert(activity_id, content.model_dump())


def get_analysis(session: Session, activity_id: int) -> RunAnalysis:
    row = AnalysisStore(session).get(activity_id)
    if row is None:
        raise NotFoundError("Analysis not found for this activity", resource="analysis", resource_id=activity_id)
    return row
