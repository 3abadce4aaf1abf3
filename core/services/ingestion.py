"""Webhook ingestion of completed activities.

Normalizes the relayed Strava payload, deduplicates on the external activity
id, stores the activity and, for runs, links it to the plan and adapts the
weeks ahead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.models import Activity, PlannedWorkout
from core.repositories import ActivityStore, SettingsStore, WorkoutStore
from core.services.adaptation import AdaptationResult, regenerate_plan
from core.services.linking import link_activity
from core.services.plan_calendar import to_local_datetime
from core.validators import ManualActivityInput, WebhookPayload, parse_input

logger = logging.getLogger(__name__)

RUN_TYPE = "Run"


@dataclass
class IngestionResult:
    activity_id: int
    created: bool
    linked_workout_id: Optional[int] = None
    adaptation: Optional[AdaptationResult] = None


def average_pace(distance_m: float, duration_sec: float) -> Optional[float]:
    """Minutes per kilometre, or None without distance."""
    distance_km = distance_m / 1000
    if distance_km <= 0:
        return None
    return (duration_sec / 60) / distance_km


def normalize_payload(payload: WebhookPayload, now: Optional[datetime] = None) -> dict[str, Any]:
    """Convert a validated webhook payload into Activity column values."""
    moving_time = payload.moving_time
    if moving_time is None:
        moving_time = payload.elapsed_time or 0
    start = payload.start_date or now or datetime.now().astimezone()
    return {
        "strava_id": payload.activity_id,
        "type": payload.type,
        "name": payload.name or "Untitled Activity",
        "distance": payload.distance,
        "duration": moving_time,
        "avg_heart_rate": payload.average_heartrate,
        "max_heart_rate": payload.max_heartrate,
        "avg_pace": average_pace(payload.distance, moving_time),
        "calories": payload.calories,
        "date": start,
    }


def _after_run(session: Session, activity: Activity, result: IngestionResult) -> None:
    workouts = WorkoutStore(session)
    settings = SettingsStore(session)
    linked: Optional[PlannedWorkout] = link_activity(workouts, settings, activity.id, activity.date)
    result.linked_workout_id = linked.id if linked else None
    result.adaptation = regenerate_plan(workouts, ActivityStore(session), settings)


def ingest_webhook(session: Session, raw: dict[str, Any], now: Optional[datetime] = None) -> IngestionResult:
    payload = parse_input(WebhookPayload, raw)
    activities = ActivityStore(session)

    existing = activities.find_by_external_id(payload.activity_id)
    if existing is not None:
        logger.info("Activity %s already ingested as %s", payload.activity_id, existing.id)
        return IngestionResult(activity_id=existing.id, created=False)

    values = normalize_payload(payload, now)
    values["date"] = to_local_datetime(values["date"])
    try:
        activity = activities.create(values)
    except IntegrityError:
        # Lost a race with a concurrent delivery of the same event; nothing else
        # has been written in this unit of work yet.
        session.rollback()
        existing = activities.find_by_external_id(payload.activity_id)
        if existing is None:
            raise
        logger.info("Activity %s inserted concurrently as %s", payload.activity_id, existing.id)
        return IngestionResult(activity_id=existing.id, created=False)

    logger.info("Ingested activity %s (%s, %.0f m)", activity.id, activity.type, activity.distance)
    result = IngestionResult(activity_id=activity.id, created=True)
    if activity.type == RUN_TYPE:
        _after_run(session, activity, result)
    return result


def create_manual_activity(session: Session, raw: dict[str, Any], now: Optional[datetime] = None) -> Activity:
    data = parse_input(ManualActivityInput, raw)
    stamp = now or datetime.now()
    values = data.model_dump()
    values["strava_id"] = data.strava_id or f"manual-{int(stamp.timestamp() * 1000)}"
    values["date"] = to_local_datetime(data.date)
    if values["avg_pace"] is None:
        values["avg_pace"] = average_pace(data.distance, data.duration)
    activity = ActivityStore(session).create(values)
    logger.info("Created manual activity %s", activity.id)
    return activity
