"""
Contacts Router
===============
POST /api/v1/contacts/analyze                   — run one analysis batch
GET  /api/v1/contacts/emotions                  — last published batch
GET  /api/v1/contacts/emotions/{phone}/profile  — profile text for one contact

Analysis runs in the request and returns the published batch. A second
analyze while one is still running gets 409 instead of queueing.
Contacts the backend does not know come back as "not_a_user" entries,
never as errors.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from checkin.dependencies import AppServices, get_services
from checkin.models.emotion import (
    AnalyzeContactsRequest,
    ContactEmotionsResponse,
    ContactProfileText,
)
from checkin.services.contact_analysis import render_profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/contacts", tags=["contacts"])


def _snapshot(services: AppServices) -> ContactEmotionsResponse:
    analysis = services.contacts
    return ContactEmotionsResponse(
        is_analyzing=analysis.is_analyzing,
        currently_analyzing=analysis.currently_analyzing,
        last_analyzed_at=analysis.last_analyzed_at,
        profiles=analysis.profiles(),
    )


@router.post("/analyze", response_model=ContactEmotionsResponse)
async def analyze_contacts(
    body: AnalyzeContactsRequest,
    services: AppServices = Depends(get_services),
) -> ContactEmotionsResponse:
    result = await services.contacts.analyze(body.contacts)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": "Contact analysis already running", "code": "analysis_in_progress"},
        )
    return _snapshot(services)


@router.get("/emotions", response_model=ContactEmotionsResponse)
async def list_contact_emotions(
    services: AppServices = Depends(get_services),
) -> ContactEmotionsResponse:
    return _snapshot(services)


@router.get("/emotions/{phone_number}/profile", response_model=ContactProfileText)
async def get_contact_profile(
    phone_number: str,
    services: AppServices = Depends(get_services),
) -> ContactProfileText:
    profile = services.contacts.profile_for(phone_number)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "No analysed contact with that number", "code": "contact_not_found"},
        )
    return ContactProfileText(phone_number=profile.phone_number, profile=render_profile(profile))
