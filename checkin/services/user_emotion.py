"""
User Emotion Service
====================
Fetches the AI emotion snapshot for the signed-in user from the
emotion-snapshot service and caches it per user for a fixed TTL, so the
home screen does not trigger a fresh (slow, paid) analysis on every
visit.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional

from pydantic import ValidationError

from checkin.models.emotion import UserEmotionSnapshot
from checkin.services.api_client import CheckInAPIClient, CheckInAPIError
from checkin.services.cache import CacheManager

logger = logging.getLogger(__name__)

CACHE_NAMESPACE = "user_analysis"

ERROR_USERNAME_REQUIRED = "Username is required"
ERROR_UNAVAILABLE = "API temporarily unavailable"


class UserEmotionService:
    def __init__(
        self,
        api: CheckInAPIClient,
        cache: CacheManager,
        ttl: timedelta = timedelta(minutes=60),
    ) -> None:
        self._api = api
        self._cache = cache
        self._ttl = ttl
        self.error_message: Optional[str] = None

    async def get_snapshot(
        self, username: str, force_refresh: bool = False
    ) -> Optional[UserEmotionSnapshot]:
        """Cached snapshot for *username*, fetched when missing, stale or forced."""
        if not username:
            self.error_message = ERROR_USERNAME_REQUIRED
            return None

        if not force_refresh:
            cached = self._cached(username)
            if cached is not None:
                self.error_message = None
                return cached

        try:
            snapshot = await self._api.analyze_user(username)
        except CheckInAPIError as exc:
            logger.warning("User analysis failed for %s: %s", username, exc)
            self.error_message = ERROR_UNAVAILABLE
            return None

        self._cache.set(CACHE_NAMESPACE, username, snapshot.model_dump(exclude={"emotion_glyph"}))
        self.error_message = None
        return snapshot

    def clear(self, username: str) -> None:
        self._cache.clear_user_cache(username)

    def _cached(self, username: str) -> Optional[UserEmotionSnapshot]:
        payload = self._cache.get(CACHE_NAMESPACE, username, self._ttl)
        if payload is None:
            return None
        try:
            return UserEmotionSnapshot.model_validate(payload)
        except ValidationError:
            logger.warning("Discarding unreadable cached analysis for %s", username)
            return None
