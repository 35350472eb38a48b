"""
Behaviour Event Schemas
=======================
Pydantic models for tracked UI and lifecycle events and the backend
``log-activity`` endpoint.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """UTC ISO-8601 with second precision and a trailing Z."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    screen_width: float = Field(..., gt=0)
    screen_height: float = Field(..., gt=0)

    @computed_field
    @property
    def relative_x(self) -> float:
        return self.x / self.screen_width

    @computed_field
    @property
    def relative_y(self) -> float:
        return self.y / self.screen_height


class BehaviorEvent(BaseModel):
    """A single tracked interaction. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    action: str = Field(..., min_length=1)
    tab: str = ""
    coordinates: Optional[Coordinates] = None
    duration_seconds: Optional[float] = Field(default=None, ge=0)
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: str = Field(default_factory=iso_timestamp)

    @property
    def api_action(self) -> str:
        return f"{self.action}_{self.tab or 'unknown'}"


# ---------------------------------------------------------------------------
# Remote wire format: POST /api/logger/log-activity/
# ---------------------------------------------------------------------------

class ActivityData(BaseModel):
    action: str
    time: str


class LogActivityRequest(BaseModel):
    email: str
    activity: ActivityData


class LogActivityResponse(BaseModel):
    message: str = ""


# ---------------------------------------------------------------------------
# Router request/response bodies
# ---------------------------------------------------------------------------

class SessionStartRequest(BaseModel):
    email: str = ""


class RecordEventRequest(BaseModel):
    action: str = Field(..., min_length=1)
    tab: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    duration_seconds: Optional[float] = Field(default=None, ge=0)
    data: dict[str, Any] = Field(default_factory=dict)


class TrackerStatusResponse(BaseModel):
    is_tracking: bool
    email: str
    current_tab: str
    current_screen: Optional[str] = None
    buffered_events: int
    flushes_dispatched: int
    events_dispatched: int
