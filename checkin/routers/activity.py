"""
Activity Router
===============
POST /api/v1/activity/session/start          — start tracking for an email
POST /api/v1/activity/session/end            — end the session, flush and wait
POST /api/v1/activity/lifecycle/background   — app backgrounded, flush and wait
POST /api/v1/activity/lifecycle/foreground   — app foregrounded
POST /api/v1/activity/events                 — record one behaviour event
GET  /api/v1/activity/status                 — tracker counters

Recording is a no-op outside a session; the response says whether the
event was kept.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from checkin.dependencies import AppServices, get_services
from checkin.models.activity import (
    RecordEventRequest,
    SessionStartRequest,
    TrackerStatusResponse,
)
from checkin.services.activity_tracker import ActivityTracker

router = APIRouter(prefix="/api/v1/activity", tags=["activity"])


def _status(tracker: ActivityTracker) -> TrackerStatusResponse:
    return TrackerStatusResponse(
        is_tracking=tracker.is_tracking,
        email=tracker.email,
        current_tab=tracker.current_tab,
        current_screen=tracker.current_screen,
        buffered_events=tracker.buffered_events,
        flushes_dispatched=tracker.flushes_dispatched,
        events_dispatched=tracker.events_dispatched,
    )


@router.post("/session/start", response_model=TrackerStatusResponse)
async def start_session(
    body: SessionStartRequest,
    services: AppServices = Depends(get_services),
) -> TrackerStatusResponse:
    services.activity.start_session(email=body.email)
    return _status(services.activity)


@router.post("/session/end", response_model=TrackerStatusResponse)
async def end_session(services: AppServices = Depends(get_services)) -> TrackerStatusResponse:
    await services.activity.end_session()
    return _status(services.activity)


@router.post("/lifecycle/background", response_model=TrackerStatusResponse)
async def app_backgrounded(services: AppServices = Depends(get_services)) -> TrackerStatusResponse:
    await services.activity.app_did_enter_background()
    return _status(services.activity)


@router.post("/lifecycle/foreground", response_model=TrackerStatusResponse)
async def app_foregrounded(services: AppServices = Depends(get_services)) -> TrackerStatusResponse:
    services.activity.app_will_enter_foreground()
    return _status(services.activity)


@router.post("/events")
async def record_event(
    body: RecordEventRequest,
    services: AppServices = Depends(get_services),
) -> dict:
    event = services.activity.track_custom_event(
        body.action,
        data=body.data,
        tab=body.tab,
        coordinates=body.coordinates,
        duration_seconds=body.duration_seconds,
    )
    return {
        "recorded": event is not None,
        "buffered_events": services.activity.buffered_events,
    }


@router.get("/status", response_model=TrackerStatusResponse)
async def tracker_status(services: AppServices = Depends(get_services)) -> TrackerStatusResponse:
    return _status(services.activity)
