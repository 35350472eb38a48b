"""
Celebrity Schemas
=================
Pydantic models for the celebrity mood feed.

The backend returns one row per celebrity with the AI analysis packed
into a JSON *string* under ``emotion``. ``CelebrityAPIResponse`` keeps
that string as-is; ``parsed_emotion()`` decodes it on demand and yields
None when the string is not valid analysis JSON, so one malformed row
never fails the whole feed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, computed_field

from checkin.services.emotion_codes import glyph_for

logger = logging.getLogger(__name__)

CelebrityCategory = Literal[
    "Music", "Sports", "Acting", "Social Media", "Business", "Comedy", "Politics"
]


# ---------------------------------------------------------------------------
# Remote wire format: GET /user_emotions/celebs
# ---------------------------------------------------------------------------

class CelebrityEmotionData(BaseModel):
    points: Optional[list[str]] = None
    context: Optional[str] = None
    emotion: int
    references: list[str]


class CelebrityAPIResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    created_at: str
    hype: int
    id: int
    image: Optional[str] = None
    username: str
    emotion_string: str = Field(..., alias="emotion")

    def parsed_emotion(self) -> Optional[CelebrityEmotionData]:
        try:
            return CelebrityEmotionData.model_validate_json(self.emotion_string)
        except ValidationError as exc:
            logger.warning("Unreadable emotion data for %s: %s", self.username, exc)
            return None


# ---------------------------------------------------------------------------
# Feed entry
# ---------------------------------------------------------------------------

class Celebrity(BaseModel):
    """One entry of the celebrity feed, as served and cached."""

    model_config = ConfigDict(frozen=True)

    api_id: int
    username: str
    name: str
    profession: str
    category: CelebrityCategory
    bio: str
    emotion_code_id: int
    mood_text: str
    hype: int = 0
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    emotion_points: list[str] = Field(default_factory=list)
    emotion_references: list[str] = Field(default_factory=list)
    context: str = ""
    health_factors: str = ""
    behavior_factors: str = ""
    emotional_profile: str = ""
    instagram_handle: Optional[str] = None
    twitter_handle: Optional[str] = None

    @computed_field
    @property
    def emotion_glyph(self) -> str:
        return glyph_for(self.emotion_code_id)

    @computed_field
    @property
    def last_update(self) -> str:
        return format_last_update(self.created_at)


def format_last_update(created_at: Optional[datetime], now: Optional[datetime] = None) -> str:
    """'N minutes ago' under an hour, 'N hours ago' under a day, else 'N days ago'."""
    if created_at is None:
        return "Recently"
    now = now or datetime.now(timezone.utc)
    elapsed = max((now - created_at).total_seconds(), 0)
    if elapsed < 3600:
        return f"{int(elapsed // 60)} minutes ago"
    if elapsed < 86400:
        return f"{int(elapsed // 3600)} hours ago"
    return f"{int(elapsed // 86400)} days ago"


# ---------------------------------------------------------------------------
# Router bodies
# ---------------------------------------------------------------------------

class CelebrityListResponse(BaseModel):
    celebrities: list[Celebrity]
    is_loading: bool
    error: Optional[str] = None
