"""
CheckIn API Client
==================
Thin async HTTP wrapper around the remote services the app talks to:

- the Django backend (contact emotion lookup, followers, activity logger)
- the emotion-snapshot service (AI analysis of the signed-in user)
- the celebrity service (public mood feed)

Every call is a JSON POST except the celebrity feed, which is a GET.
Failures are normalised into one taxonomy so callers can branch on
meaning rather than on httpx internals:

    NetworkError   transport failure, timeout or redirect loop; no usable response
    HTTPError      non-2xx response (status_code + body kept)
    NotFoundError  HTTP 404; "no remote record yet" for the followers API
    DecodingError  2xx response whose body cannot be decompressed or is not
                   the expected JSON shape

None of these are retried here. Each is terminal for the one call that
raised it; the managers decide what that means for their operation.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from checkin.config import Settings
from checkin.models.activity import ActivityData, LogActivityRequest, LogActivityResponse
from checkin.models.celebrity import CelebrityAPIResponse
from checkin.models.emotion import LatestEmotionResponse, PhoneLookupRequest, UserEmotionSnapshot
from checkin.models.following import (
    FollowRequest,
    FollowResponse,
    GetFollowingRequest,
    GetFollowingResponse,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
T = TypeVar("T")

LATEST_EMOTION_PATH = "/api/contacts/latest_emotion_by_phone"
GET_FOLLOWING_PATH = "/api/followers/get_following/"
FOLLOW_PATH = "/api/followers/follow/"
UNFOLLOW_PATH = "/api/followers/unfollow/"
LOG_ACTIVITY_PATH = "/api/logger/log-activity/"
ANALYZE_USER_PATH = "/analyze_user"
CELEBRITIES_PATH = "/user_emotions/celebs"

_celebrity_rows = TypeAdapter(list[CelebrityAPIResponse])


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class CheckInAPIError(Exception):
    """Base class for every failure raised by CheckInAPIClient."""


class NetworkError(CheckInAPIError):
    """The request never produced a response (DNS, connect, timeout...)."""


class HTTPError(CheckInAPIError):
    """Non-2xx response from a remote service."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"CheckIn API error {status_code}: {body}")


class NotFoundError(HTTPError):
    """HTTP 404."""


class DecodingError(CheckInAPIError):
    """Response body was not JSON or did not match the expected schema."""


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class CheckInAPIClient:
    """Makes JSON requests to the CheckIn backend and its companion services."""

    def __init__(
        self,
        base_url: str,
        emotion_snapshot_base_url: str,
        timeout: float = 30.0,
        celebrity_base_url: str | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._snapshot_base_url = emotion_snapshot_base_url.rstrip("/")
        self._celebrity_base_url = (celebrity_base_url or base_url).rstrip("/")
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> CheckInAPIClient:
        return cls(
            settings.api_base_url,
            settings.emotion_snapshot_base_url,
            timeout=settings.request_timeout_seconds,
            celebrity_base_url=settings.celebrity_base_url,
        )

    # ---- Contacts --------------------------------------------------------

    async def latest_emotion_by_phone(self, phone: str) -> LatestEmotionResponse:
        """POST /api/contacts/latest_emotion_by_phone for a digits-only number."""
        return await self._post(
            f"{self._base_url}{LATEST_EMOTION_PATH}",
            PhoneLookupRequest(phone=phone),
            LatestEmotionResponse,
        )

    # ---- Followers -------------------------------------------------------

    async def get_following(self, username: str) -> GetFollowingResponse:
        """Remote following list. Raises NotFoundError if the user has none yet."""
        return await self._post(
            f"{self._base_url}{GET_FOLLOWING_PATH}",
            GetFollowingRequest(user=username),
            GetFollowingResponse,
        )

    async def follow(self, phone: str, username: str) -> FollowResponse:
        return await self._post(
            f"{self._base_url}{FOLLOW_PATH}",
            FollowRequest(user=phone, follower=username),
            FollowResponse,
        )

    async def unfollow(self, phone: str, username: str) -> FollowResponse:
        return await self._post(
            f"{self._base_url}{UNFOLLOW_PATH}",
            FollowRequest(user=phone, follower=username),
            FollowResponse,
        )

    # ---- Activity logger -------------------------------------------------

    async def log_activity(self, email: str, action: str, time: str) -> LogActivityResponse:
        return await self._post(
            f"{self._base_url}{LOG_ACTIVITY_PATH}",
            LogActivityRequest(email=email, activity=ActivityData(action=action, time=time)),
            LogActivityResponse,
        )

    # ---- Emotion snapshot ------------------------------------------------

    async def analyze_user(self, username: str) -> UserEmotionSnapshot:
        return await self._post(
            f"{self._snapshot_base_url}{ANALYZE_USER_PATH}",
            {"username": username},
            UserEmotionSnapshot,
        )

    # ---- Celebrity feed --------------------------------------------------

    async def fetch_celebrities(self) -> list[CelebrityAPIResponse]:
        """GET /user_emotions/celebs on the celebrity service."""
        url = f"{self._celebrity_base_url}{CELEBRITIES_PATH}"
        response = await self._send("GET", url)
        return self._decode(url, response, _celebrity_rows.validate_python)

    # ---- Transport -------------------------------------------------------

    async def _post(
        self,
        url: str,
        payload: BaseModel | dict[str, Any],
        response_model: type[ModelT],
    ) -> ModelT:
        """Shared async POST. Maps every failure onto the CheckInAPIError taxonomy."""
        body = payload.model_dump() if isinstance(payload, BaseModel) else payload
        response = await self._send("POST", url, json=body)
        return self._decode(url, response, response_model.model_validate)

    async def _send(self, method: str, url: str, json: Any = None) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.request(method, url, json=json)
        except httpx.DecodingError as exc:
            logger.debug("%s %s returned an undecodable body: %s", method, url, exc)
            raise DecodingError(f"Undecodable response from {url}: {exc}") from exc
        except httpx.RequestError as exc:
            logger.debug("%s %s failed before a response: %s", method, url, exc)
            raise NetworkError(str(exc)) from exc

        if response.status_code == 404:
            raise NotFoundError(response.status_code, response.text)
        if not response.is_success:
            raise HTTPError(response.status_code, response.text)
        return response

    @staticmethod
    def _decode(url: str, response: httpx.Response, validate: Callable[[Any], T]) -> T:
        try:
            return validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise DecodingError(f"Unexpected response from {url}: {exc}") from exc
