"""
Following Schemas
=================
Pydantic models for the local pinned-contacts set and the backend
followers API.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

SYNCED_CONTACT_NAME = "Synced Contact"


# ---------------------------------------------------------------------------
# Local following set
# ---------------------------------------------------------------------------

class PinnedContact(BaseModel):
    """One member of the device-local following set, keyed by phone number."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    location: str = "Unknown"
    mood: str = "neutral-face"
    mood_text: str = "Neutral"
    phone_number: str

    @classmethod
    def synced_placeholder(cls, phone_number: str) -> PinnedContact:
        """Entry created for a number that only the backend knew about."""
        return cls(name=SYNCED_CONTACT_NAME, phone_number=phone_number)


# ---------------------------------------------------------------------------
# Remote wire format: /api/followers/*
# ---------------------------------------------------------------------------

class GetFollowingRequest(BaseModel):
    user: str


class GetFollowingResponse(BaseModel):
    user: str = ""
    following: list[str] = Field(default_factory=list)


class FollowRequest(BaseModel):
    user: str = Field(..., description="Phone number being followed")
    follower: str = Field(..., description="Username of the signed-in user")


class FollowResponse(BaseModel):
    message: str = ""


# ---------------------------------------------------------------------------
# Reconciliation outcome
# ---------------------------------------------------------------------------

class SyncResult(BaseModel):
    mode: Literal["reconcile", "upload_only"]
    added_locally: list[str] = Field(default_factory=list)
    dropped_over_capacity: list[str] = Field(default_factory=list)
    pushed: list[str] = Field(default_factory=list)
    push_failures: list[str] = Field(default_factory=list)

    @property
    def mutation_count(self) -> int:
        """Remote follow requests issued, successful or not."""
        return len(self.pushed) + len(self.push_failures)


# ---------------------------------------------------------------------------
# Router request/response bodies
# ---------------------------------------------------------------------------

class PinContactRequest(BaseModel):
    username: str = ""
    name: str = Field(..., min_length=1)
    phone_number: str = Field(..., min_length=1)
    location: str = "Unknown"


class PinContactResponse(BaseModel):
    pinned: bool
    remote_synced: bool
    contacts: list[PinnedContact]


class SyncRequest(BaseModel):
    username: str
    force: bool = False


class SyncResponse(BaseModel):
    ran: bool
    result: Optional[SyncResult] = None
    status: str
    error: Optional[str] = None


class SyncStatusResponse(BaseModel):
    status: str
    is_syncing: bool
    last_sync_at: Optional[datetime] = None
    error: Optional[str] = None
