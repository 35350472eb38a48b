"""
Tests for /api/v1/emotions and /api/v1/health
==============================================
Covers:
- GET /codes/{id}: known id, unknown id falls back to neutral
- GET /lookup: exact, case-insensitive, unknown name
- POST /user: snapshot returned, served from cache, 503 on API failure,
  422 on empty username
- Health check

Run: pytest tests/test_emotions_api.py -v
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from checkin.config import Settings
from checkin.dependencies import AppServices
from checkin.main import create_app
from checkin.models.emotion import UserEmotionSnapshot
from checkin.services.api_client import NetworkError

_SNAPSHOT = UserEmotionSnapshot(
    ai_scoop="Riding a good streak",
    crisp_analytics_points=["Slept 8h"],
    emoji_id=29,
    zinger_caption="Main character energy",
)


def _services(api: MagicMock | None = None) -> AppServices:
    api = api or MagicMock()
    return AppServices.from_settings(Settings(state_file=""), api=api)


class TestEmotionCodes:

    def test_known_code(self):
        with TestClient(create_app(_services())) as client:
            response = client.get("/api/v1/emotions/codes/29")

        assert response.status_code == 200
        assert response.json() == {"id": 29, "name": "heart-eyes", "glyph": "😍"}

    def test_unknown_code_is_neutral(self):
        with TestClient(create_app(_services())) as client:
            response = client.get("/api/v1/emotions/codes/500")

        assert response.json() == {"id": 46, "name": "neutral-face", "glyph": "😐"}

    def test_lookup_case_insensitive(self):
        with TestClient(create_app(_services())) as client:
            response = client.get("/api/v1/emotions/lookup", params={"name": "Diagonal-mouth"})

        assert response.json()["id"] == 12

    def test_lookup_unknown_name(self):
        with TestClient(create_app(_services())) as client:
            response = client.get("/api/v1/emotions/lookup", params={"name": "nope"})

        assert response.json()["id"] == 46

    def test_health(self):
        with TestClient(create_app(_services())) as client:
            response = client.get("/api/v1/health")

        assert response.json() == {"status": "ok", "service": "checkin-core"}


class TestUserEmotion:

    def test_returns_snapshot(self):
        api = MagicMock()
        api.analyze_user = AsyncMock(return_value=_SNAPSHOT)
        with TestClient(create_app(_services(api))) as client:
            first = client.post("/api/v1/emotions/user", json={"username": "alice"})
            second = client.post("/api/v1/emotions/user", json={"username": "alice"})

        assert first.status_code == 200
        assert first.json()["emotion_glyph"] == "😍"
        assert second.json()["zinger_caption"] == "Main character energy"
        assert api.analyze_user.await_count == 1

    def test_api_failure_returns_503(self):
        api = MagicMock()
        api.analyze_user = AsyncMock(side_effect=NetworkError("offline"))
        with TestClient(create_app(_services(api))) as client:
            response = client.post("/api/v1/emotions/user", json={"username": "alice"})

        assert response.status_code == 503
        assert response.json()["detail"]["message"] == "API temporarily unavailable"

    def test_empty_username_returns_422(self):
        with TestClient(create_app(_services())) as client:
            response = client.post("/api/v1/emotions/user", json={"username": ""})

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "username_required"
