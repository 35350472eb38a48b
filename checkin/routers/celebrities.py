"""
Celebrities Router
==================
GET  /api/v1/celebrities               — current feed, optional search / category filter
POST /api/v1/celebrities/refresh       — fetch the live feed
GET  /api/v1/celebrities/{username}    — one entry

The feed is whatever was last fetched or cached. A failed refresh still
answers 200 with the previous entries and an ``error`` message.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from checkin.dependencies import AppServices, get_services
from checkin.models.celebrity import Celebrity, CelebrityCategory, CelebrityListResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/celebrities", tags=["celebrities"])


@router.get("", response_model=CelebrityListResponse)
async def list_celebrities(
    search: str = Query(default=""),
    category: Optional[CelebrityCategory] = Query(default=None),
    services: AppServices = Depends(get_services),
) -> CelebrityListResponse:
    feed = services.celebrities
    return CelebrityListResponse(
        celebrities=feed.search(search, category),
        is_loading=feed.is_loading,
        error=feed.error_message,
    )


@router.post("/refresh", response_model=CelebrityListResponse)
async def refresh_celebrities(
    services: AppServices = Depends(get_services),
) -> CelebrityListResponse:
    feed = services.celebrities
    celebrities = await feed.refresh()
    return CelebrityListResponse(
        celebrities=celebrities,
        is_loading=feed.is_loading,
        error=feed.error_message,
    )


@router.get("/{username}", response_model=Celebrity)
async def get_celebrity(
    username: str,
    services: AppServices = Depends(get_services),
) -> Celebrity:
    celebrity = services.celebrities.get(username)
    if celebrity is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "No celebrity with that username", "code": "celebrity_not_found"},
        )
    return celebrity
