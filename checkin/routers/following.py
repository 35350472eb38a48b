"""
Following Router
================
GET    /api/v1/following/pinned        — local following set
POST   /api/v1/following/pin           — pin a contact and push the follow
DELETE /api/v1/following/pin/{phone}   — unpin, push the unfollow, drop cached profile
POST   /api/v1/following/sync          — reconcile with the backend
GET    /api/v1/following/status        — sync status

Sync is gated on the cooldown unless ``force`` is set; a gated request
returns ``ran: false`` with the current status. A sync already in
progress answers 409.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from checkin.dependencies import AppServices, get_services
from checkin.models.following import (
    PinContactRequest,
    PinContactResponse,
    PinnedContact,
    SyncRequest,
    SyncResponse,
    SyncStatusResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/following", tags=["following"])


@router.get("/pinned", response_model=list[PinnedContact])
async def list_pinned(services: AppServices = Depends(get_services)) -> list[PinnedContact]:
    return services.pinned.contacts()


@router.post("/pin", response_model=PinContactResponse)
async def pin_contact(
    body: PinContactRequest,
    services: AppServices = Depends(get_services),
) -> PinContactResponse:
    pinned_store = services.pinned
    if pinned_store.get(body.phone_number) is None and pinned_store.is_full:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": f"Cannot pin more than {pinned_store.capacity} contacts",
                "code": "pinned_contacts_full",
            },
        )

    contact = PinnedContact(
        name=body.name,
        location=body.location,
        phone_number=body.phone_number,
    )
    pinned, remote_synced = await services.following.follow(body.username, contact)
    return PinContactResponse(
        pinned=pinned,
        remote_synced=remote_synced,
        contacts=pinned_store.contacts(),
    )


@router.delete("/pin/{phone_number}", response_model=PinContactResponse)
async def unpin_contact(
    phone_number: str,
    username: str = Query(default=""),
    services: AppServices = Depends(get_services),
) -> PinContactResponse:
    removed, remote_synced = await services.following.unfollow(username, phone_number)
    if not removed:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "Contact is not pinned", "code": "contact_not_pinned"},
        )
    return PinContactResponse(
        pinned=False,
        remote_synced=remote_synced,
        contacts=services.pinned.contacts(),
    )


@router.post("/sync", response_model=SyncResponse)
async def sync_following(
    body: SyncRequest,
    services: AppServices = Depends(get_services),
) -> SyncResponse:
    following = services.following
    if following.is_syncing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": "Following sync already in progress", "code": "sync_in_progress"},
        )

    if not body.force and not following.should_sync():
        logger.info("Skipping following sync for %s, cooldown not elapsed", body.username)
        return SyncResponse(ran=False, status=following.status, error=following.sync_error)

    result = await following.sync(body.username)
    return SyncResponse(
        ran=result is not None,
        result=result,
        status=following.status,
        error=following.sync_error,
    )


@router.get("/status", response_model=SyncStatusResponse)
async def sync_status(services: AppServices = Depends(get_services)) -> SyncStatusResponse:
    following = services.following
    return SyncStatusResponse(
        status=following.status,
        is_syncing=following.is_syncing,
        last_sync_at=following.last_sync_at,
        error=following.sync_error,
    )
