"""
Emotion Schemas
===============
Pydantic models for contact emotion lookups and the signed-in user's
AI emotion snapshot.

A contact's emotion profile is a tagged variant. ``KnownContactEmotion``
is built from a successful ``latest_emotion_by_phone`` lookup;
``NotAUserContactEmotion`` is the placeholder produced when the lookup
fails for any reason. The placeholder is real data: it is listed,
rendered and cached exactly like a known profile.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

from checkin.services.emotion_codes import NEUTRAL_ID, glyph_for, name_for

NOT_A_USER_CITY = "Location Unknown"
NOT_A_USER_FACTORS = "Not a user"
NOT_A_USER_PROFILE = "Not a user - This contact is not registered on the platform"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Remote wire format: POST /api/contacts/latest_emotion_by_phone
# ---------------------------------------------------------------------------

class PhoneLookupRequest(BaseModel):
    phone: str


class ContactEmotionDetails(BaseModel):
    behavior_factors: str = ""
    health_factors: str = ""
    predicted_emoji_id: int
    user_emotion_profile: str = ""


class LatestEmotionResponse(BaseModel):
    """Body returned by the backend for a registered phone number."""

    city: str = ""
    emotion: ContactEmotionDetails
    phonenumber: str = ""
    username: str = ""


# ---------------------------------------------------------------------------
# Contact emotion profile (tagged variant)
# ---------------------------------------------------------------------------

class _ContactEmotionBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    phone_number: str
    city: str
    behavior_factors: str
    health_factors: str
    emotion_profile: str
    emotion_code_id: int
    last_updated: datetime = Field(default_factory=_utcnow)

    @property
    def contact_key(self) -> str:
        return f"{self.name}|{self.phone_number}"

    @computed_field
    @property
    def emotion_name(self) -> str:
        return name_for(self.emotion_code_id)

    @computed_field
    @property
    def emotion_glyph(self) -> str:
        return glyph_for(self.emotion_code_id)


class KnownContactEmotion(_ContactEmotionBase):
    status: Literal["known"] = "known"

    @computed_field
    @property
    def is_known_user(self) -> bool:
        return True

    @classmethod
    def from_response(
        cls, name: str, phone_number: str, response: LatestEmotionResponse
    ) -> KnownContactEmotion:
        emotion = response.emotion
        return cls(
            name=name,
            phone_number=phone_number,
            city=response.city,
            behavior_factors=emotion.behavior_factors,
            health_factors=emotion.health_factors,
            emotion_profile=emotion.user_emotion_profile,
            emotion_code_id=emotion.predicted_emoji_id,
        )


class NotAUserContactEmotion(_ContactEmotionBase):
    status: Literal["not_a_user"] = "not_a_user"
    city: str = NOT_A_USER_CITY
    behavior_factors: str = NOT_A_USER_FACTORS
    health_factors: str = NOT_A_USER_FACTORS
    emotion_profile: str = NOT_A_USER_PROFILE
    emotion_code_id: int = NEUTRAL_ID

    @computed_field
    @property
    def is_known_user(self) -> bool:
        return False


ContactEmotionProfile = Annotated[
    Union[KnownContactEmotion, NotAUserContactEmotion],
    Field(discriminator="status"),
]


# ---------------------------------------------------------------------------
# Router request/response bodies
# ---------------------------------------------------------------------------

class ContactRef(BaseModel):
    name: str = Field(..., min_length=1)
    phone_number: str = Field(..., min_length=1)


class AnalyzeContactsRequest(BaseModel):
    contacts: list[ContactRef]


class ContactEmotionsResponse(BaseModel):
    is_analyzing: bool
    currently_analyzing: Optional[str] = None
    last_analyzed_at: Optional[datetime] = None
    profiles: list[ContactEmotionProfile]


class ContactProfileText(BaseModel):
    phone_number: str
    profile: str


class EmotionCodeResponse(BaseModel):
    id: int
    name: str
    glyph: str


# ---------------------------------------------------------------------------
# Signed-in user snapshot: POST {emotion_snapshot}/analyze_user
# ---------------------------------------------------------------------------

class UserEmotionRequest(BaseModel):
    username: str
    force_refresh: bool = False


class UserEmotionSnapshot(BaseModel):
    """AI text blob describing the signed-in user's current state."""

    emoji_id: int
    zinger_caption: str
    ai_scoop: str
    crisp_analytics_points: list[str]
    mental_pulse: Optional[str] = None
    social_vibe: Optional[str] = None

    @computed_field
    @property
    def emotion_glyph(self) -> str:
        return glyph_for(self.emoji_id)
