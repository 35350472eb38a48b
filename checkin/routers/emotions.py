"""
Emotions Router
===============
GET  /api/v1/emotions/codes/{code_id}  — glyph and name for an emotion id
GET  /api/v1/emotions/lookup?name=     — emotion id for a name
POST /api/v1/emotions/user             — AI snapshot for the signed-in user

Code lookups never fail: unknown ids and names resolve to the neutral
entry (46). The user snapshot is served from cache when fresh.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from checkin.dependencies import AppServices, get_services
from checkin.models.emotion import EmotionCodeResponse, UserEmotionRequest, UserEmotionSnapshot
from checkin.services.emotion_codes import code_for, id_for

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/emotions", tags=["emotions"])


@router.get("/codes/{code_id}", response_model=EmotionCodeResponse)
async def get_emotion_code(code_id: int) -> EmotionCodeResponse:
    code = code_for(code_id)
    return EmotionCodeResponse(id=code.id, name=code.name, glyph=code.glyph)


@router.get("/lookup", response_model=EmotionCodeResponse)
async def lookup_emotion(name: str = Query(default="")) -> EmotionCodeResponse:
    code = code_for(id_for(name))
    return EmotionCodeResponse(id=code.id, name=code.name, glyph=code.glyph)


@router.post("/user", response_model=UserEmotionSnapshot)
async def get_user_emotion(
    body: UserEmotionRequest,
    services: AppServices = Depends(get_services),
) -> UserEmotionSnapshot:
    service = services.user_emotion
    snapshot = await service.get_snapshot(body.username, force_refresh=body.force_refresh)
    if snapshot is None:
        if not body.username:
            raise HTTPException(
                status_code=422,
                detail={"message": service.error_message, "code": "username_required"},
            )
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"message": service.error_message, "code": "analysis_unavailable"},
        )
    return snapshot
