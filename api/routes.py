from __future__ import annotations

import hmac
import logging
from dataclasses import asdict
from typing import Any, Optional

from fastapi import APIRouter, Body, Header, Query
from fastapi.responses import JSONResponse

from api.schemas import (
    ActivityOut,
    ActivityPage,
    AdaptationOut,
    AnalysisOut,
    IngestionOut,
    MessageOut,
    PlanOut,
    SettingsEnvelope,
    SettingsOut,
    WorkoutEnvelope,
    WorkoutOut,
)
from core.config import get_settings
from core.db import session_scope
from core.errors import AuthenticationError
from core.repositories import ActivityStore, SettingsStore, WorkoutStore
from core.services.analysis import default_generator, generate_and_store_analysis, get_analysis
from core.services.ingestion import create_manual_activity, ingest_webhook
from core.services.plan_lifecycle import plan_overview, run_plan_action, save_settings
from core.services.reschedule import reschedule
from core.validators import PlanActionInput, RescheduleInput, SettingsInput, parse_input

logger = logging.getLogger(__name__)
settings = get_settings()
router = APIRouter(prefix="/api")

_PLAN_ACTION_MESSAGES = {
    "regenerate": "Plan regenerated successfully",
    "reset": "Plan reset successfully",
    "clearAll": "All data cleared successfully",
}


@router.get("/settings", response_model=SettingsEnvelope, tags=["settings"])
def get_race_settings():
    with session_scope() as s:
        row = SettingsStore(s).get()
        return SettingsEnvelope(settings=SettingsOut.model_validate(row) if row else None)


@router.post("/settings", response_model=SettingsEnvelope, tags=["settings"])
def upsert_race_settings(body: dict[str, Any] = Body(...)):
    data = parse_input(SettingsInput, body)
    with session_scope() as s:
        row, created = save_settings(s, data)
        payload = SettingsEnvelope(settings=SettingsOut.model_validate(row))
    return JSONResponse(status_code=201 if created else 200, content=payload.model_dump(mode="json"))


@router.get("/plan", response_model=PlanOut, tags=["plan"])
def get_plan(week: Optional[int] = Query(None, ge=1)):
    with session_scope() as s:
        overview = plan_overview(s, week=week)
        return PlanOut(**asdict(overview))


@router.post("/plan", response_model=MessageOut, tags=["plan"])
def update_plan(body: dict[str, Any] = Body(...)):
    data = parse_input(PlanActionInput, body)
    with session_scope() as s:
        adaptation = run_plan_action(s, data.action)
    details = asdict(adaptation) if adaptation else {}
    return MessageOut(message=_PLAN_ACTION_MESSAGES[data.action], details=details)


@router.patch("/plan/{workout_id}", response_model=WorkoutEnvelope, tags=["plan"])
def reschedule_workout(workout_id: int, body: dict[str, Any] = Body(...)):
    data = parse_input(RescheduleInput, body)
    with session_scope() as s:
        moved = reschedule(WorkoutStore(s), SettingsStore(s), workout_id, data.new_date)
        return WorkoutEnvelope(workout=WorkoutOut.model_validate(moved))


@router.get("/activities", response_model=ActivityPage, tags=["activities"])
def list_activities(
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
):
    with session_scope() as s:
        store = ActivityStore(s)
        rows = store.list(limit=limit, offset=offset)
        return ActivityPage(
            activities=[ActivityOut.model_validate(r) for r in rows],
            total=store.count(),
            limit=limit,
            offset=offset,
        )


@router.post("/activities", response_model=ActivityOut, status_code=201, tags=["activities"])
def create_activity(body: dict[str, Any] = Body(...)):
    with session_scope() as s:
        activity = create_manual_activity(s, body)
        return ActivityOut.model_validate(activity)


@router.get("/activities/{activity_id}/analysis", response_model=AnalysisOut, tags=["analysis"])
def read_analysis(activity_id: int):
    with session_scope() as s:
        return AnalysisOut.model_validate(get_analysis(s, activity_id))


@router.post("/activities/{activity_id}/analysis", response_model=AnalysisOut, status_code=201, tags=["analysis"])
def create_analysis(activity_id: int):
    with session_scope() as s:
        row = generate_and_store_analysis(s, activity_id, generator=default_generator())
        return AnalysisOut.model_validate(row)


def _check_webhook_token(supplied: Optional[str]) -> None:
    expected = get_settings().webhook_token
    if not expected:
        return
    if not supplied or not hmac.compare_digest(supplied, expected):
        logger.warning("Rejected webhook call with missing or invalid token")
        raise AuthenticationError()


@router.get("/webhook", tags=["webhook"])
def webhook_status():
    return {"status": "Webhook endpoint active"}


@router.post("/webhook", response_model=IngestionOut, tags=["webhook"])
def receive_webhook(
    body: dict[str, Any] = Body(...),
    x_webhook_token: Optional[str] = Header(None),
):
    _check_webhook_token(x_webhook_token)
    with session_scope() as s:
        result = ingest_webhook(s, body)
    if not result.created:
        out = IngestionOut(message="Activity already exists", id=result.activity_id)
        return JSONResponse(status_code=200, content=out.model_dump(mode="json"))
    out = IngestionOut(
        message="Activity created successfully",
        id=result.activity_id,
        linked_workout_id=result.linked_workout_id,
        adaptation=AdaptationOut(**asdict(result.adaptation)) if result.adaptation else None,
    )
    return JSONResponse(status_code=201, content=out.model_dump(mode="json"))
