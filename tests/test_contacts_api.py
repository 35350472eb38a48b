"""
Tests for /api/v1/contacts
==========================
Covers:
- POST /analyze: known and not-a-user profiles, sorted by name, tagged status
- POST /analyze while a batch is running → 409
- POST /analyze validation (missing phone)
- GET /emotions: last published batch
- GET /emotions/{phone}/profile: rendered text, 404 for unknown numbers

Run: pytest tests/test_contacts_api.py -v
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from checkin.config import Settings
from checkin.dependencies import AppServices
from checkin.main import create_app
from checkin.models.emotion import ContactEmotionDetails, LatestEmotionResponse
from checkin.services.api_client import HTTPError

_KNOWN = LatestEmotionResponse(
    city="Austin",
    emotion=ContactEmotionDetails(
        behavior_factors="Active",
        health_factors="Rested",
        predicted_emoji_id=34,
        user_emotion_profile="Happy",
    ),
    phonenumber="1555",
    username="bob",
)


def _services() -> tuple[AppServices, MagicMock]:
    async def lookup(phone):
        if phone == "1999":
            raise HTTPError(500, "boom")
        return _KNOWN

    api = MagicMock()
    api.latest_emotion_by_phone = AsyncMock(side_effect=lookup)
    return AppServices.from_settings(Settings(state_file=""), api=api), api


_BODY = {
    "contacts": [
        {"name": "Zed", "phone_number": "+1 999"},
        {"name": "Amy", "phone_number": "+1 555"},
    ]
}


class TestAnalyze:

    def test_analyze_returns_sorted_tagged_profiles(self):
        services, _ = _services()
        with TestClient(create_app(services)) as client:
            response = client.post("/api/v1/contacts/analyze", json=_BODY)

        assert response.status_code == 200
        body = response.json()
        assert body["is_analyzing"] is False
        profiles = body["profiles"]
        assert [p["name"] for p in profiles] == ["Amy", "Zed"]
        assert profiles[0]["status"] == "known"
        assert profiles[0]["is_known_user"] is True
        assert profiles[0]["emotion_glyph"] == "😄"
        assert profiles[1]["status"] == "not_a_user"
        assert profiles[1]["is_known_user"] is False
        assert profiles[1]["city"] == "Location Unknown"

    def test_analyze_while_running_returns_409(self):
        services, api = _services()
        services.contacts._lock = MagicMock()
        services.contacts._lock.locked.return_value = True
        with TestClient(create_app(services)) as client:
            response = client.post("/api/v1/contacts/analyze", json=_BODY)

        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "analysis_in_progress"
        api.latest_emotion_by_phone.assert_not_awaited()

    def test_missing_phone_rejected(self):
        services, _ = _services()
        with TestClient(create_app(services)) as client:
            response = client.post("/api/v1/contacts/analyze", json={"contacts": [{"name": "Amy"}]})

        assert response.status_code == 422

    def test_list_returns_last_batch(self):
        services, _ = _services()
        with TestClient(create_app(services)) as client:
            assert client.get("/api/v1/contacts/emotions").json()["profiles"] == []
            client.post("/api/v1/contacts/analyze", json=_BODY)
            response = client.get("/api/v1/contacts/emotions")

        assert len(response.json()["profiles"]) == 2
        assert response.json()["last_analyzed_at"] is not None


class TestProfileText:

    def test_profile_text(self):
        services, _ = _services()
        with TestClient(create_app(services)) as client:
            client.post("/api/v1/contacts/analyze", json=_BODY)
            response = client.get("/api/v1/contacts/emotions/1555/profile")

        assert response.status_code == 200
        assert "**Contact Emotion Profile for Amy**" in response.json()["profile"]

    def test_unknown_number_returns_404(self):
        services, _ = _services()
        with TestClient(create_app(services)) as client:
            response = client.get("/api/v1/contacts/emotions/1234/profile")

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "contact_not_found"
