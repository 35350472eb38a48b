"""
Contact Analysis Service
========================
Looks up the latest emotion for each of a set of contacts and publishes
the results as one sorted batch.

Responsibilities:
- analyze(): one ``latest_emotion_by_phone`` call per contact, strictly
  one at a time, in input order
- a failed lookup (network, HTTP, decoding) becomes a "not a user"
  placeholder for that contact and the batch carries on
- results are published only when the whole batch is done, sorted by
  contact name, replacing the previous batch wholesale
- a second analyze() while one is running returns None immediately

No retries. A contact that failed stays a placeholder until the caller
runs a new batch.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Union

from checkin.models.emotion import (
    ContactEmotionProfile,
    ContactRef,
    KnownContactEmotion,
    NotAUserContactEmotion,
)
from checkin.services.api_client import CheckInAPIClient, CheckInAPIError
from checkin.services.emotion_codes import clean_phone_number, extract_emotion_text

logger = logging.getLogger(__name__)

ContactInput = Union[ContactRef, tuple[str, str]]


class ContactAnalysisService:
    def __init__(self, api: CheckInAPIClient) -> None:
        self._api = api
        self._lock = asyncio.Lock()
        self._profiles: list[ContactEmotionProfile] = []
        self.currently_analyzing: Optional[str] = None
        self.last_analyzed_at: Optional[datetime] = None

    @property
    def is_analyzing(self) -> bool:
        return self._lock.locked()

    def profiles(self) -> list[ContactEmotionProfile]:
        """The last published batch."""
        return list(self._profiles)

    def profile_for(self, phone_number: str) -> Optional[ContactEmotionProfile]:
        cleaned = clean_phone_number(phone_number)
        for profile in self._profiles:
            if profile.phone_number == cleaned:
                return profile
        return None

    def remove_contact(self, phone_number: str) -> int:
        """Drop cached profiles for an unpinned contact. Returns how many went."""
        cleaned = clean_phone_number(phone_number)
        remaining = [p for p in self._profiles if p.phone_number != cleaned]
        removed = len(self._profiles) - len(remaining)
        self._profiles = remaining
        return removed

    async def analyze(
        self, contacts: Iterable[ContactInput]
    ) -> Optional[list[ContactEmotionProfile]]:
        """Analyse *contacts* sequentially and publish the sorted batch.

        Returns the published batch, or None if a batch was already running.
        """
        if self._lock.locked():
            logger.info("Contact analysis already running, ignoring request")
            return None

        async with self._lock:
            pending = [_as_pair(c) for c in contacts]
            logger.info("Analysing emotions for %d contacts", len(pending))

            results: list[ContactEmotionProfile] = []
            try:
                for name, phone in pending:
                    self.currently_analyzing = name
                    results.append(await self._analyze_one(name, phone))
            finally:
                self.currently_analyzing = None

            # Plain str ordering is case-sensitive code point order.
            results.sort(key=lambda profile: profile.name)
            self._profiles = results
            self.last_analyzed_at = datetime.now(timezone.utc)

            known = sum(1 for p in results if p.is_known_user)
            logger.info(
                "Contact analysis complete: %d known, %d not on the platform",
                known, len(results) - known,
            )
            return list(results)

    async def _analyze_one(self, name: str, phone_number: str) -> ContactEmotionProfile:
        cleaned = clean_phone_number(phone_number)
        if not cleaned:
            logger.info("Contact %s has no usable phone number", name)
            return NotAUserContactEmotion(name=name, phone_number=cleaned)

        try:
            response = await self._api.latest_emotion_by_phone(cleaned)
        except CheckInAPIError as exc:
            logger.info("No emotion data for %s (%s): %s", name, cleaned, exc)
            return NotAUserContactEmotion(name=name, phone_number=cleaned)

        return KnownContactEmotion.from_response(name, cleaned, response)


def _as_pair(contact: ContactInput) -> tuple[str, str]:
    if isinstance(contact, ContactRef):
        return contact.name, contact.phone_number
    name, phone = contact
    return name, phone


# ---------------------------------------------------------------------------
# Profile text
# ---------------------------------------------------------------------------

_DISCLAIMER = (
    "*This analysis is generated using advanced sentiment analysis algorithms "
    "and should be used as a guide for understanding emotional patterns.*"
)


def render_profile(profile: ContactEmotionProfile) -> str:
    """Markdown summary shown on the contact detail screen."""
    if not profile.is_known_user:
        return "\n".join([
            f"**Contact Profile for {profile.name}**",
            "",
            f"**Current Emotional State:** {profile.emotion_glyph} Neutral",
            f"**Phone:** {profile.phone_number}",
            f"**Location:** {profile.city}",
            "",
            "**Status:** Awaiting sentiment analysis data...",
            "",
            "This contact's detailed emotional profile will be available once "
            "the sentiment analysis is complete. Please check back in a few moments.",
        ])

    emotion_text = extract_emotion_text(profile.emotion_profile)
    updated = profile.last_updated.strftime("%b %d, %Y at %H:%M")
    return "\n".join([
        f"**Contact Emotion Profile for {profile.name}**",
        "",
        f"**Current Emotional State:** {profile.emotion_glyph} {emotion_text} ({profile.emotion_name})",
        f"**Phone:** {profile.phone_number}",
        f"**Location:** {profile.city or 'Unknown'}",
        "",
        "**Behavioral Analysis:**",
        profile.behavior_factors or "Behavioral analysis data is being processed...",
        "",
        "**Health & Wellness Factors:**",
        profile.health_factors or "Health analysis data is being processed...",
        "",
        "**Emotion Profile Summary:**",
        profile.emotion_profile or "Detailed emotion profile is being generated...",
        "",
        "**Analysis Metadata:**",
        f"• Predicted Emoji ID: {profile.emotion_code_id}",
        f"• Emotion Classification: {emotion_text}",
        f"• Profile Last Updated: {updated}",
        "",
        _DISCLAIMER,
    ])
