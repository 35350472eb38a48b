"""
Tests for ActivityTracker
=========================
Covers:
- Recording is a no-op outside a session
- Capacity flush: exactly 100 events → one flush covering all 100, buffer
  empty immediately, delivery in recording order
- Oversized buffer flushes only the oldest batch_size events
- Timer flush while a session is active
- Session end and backgrounding flush everything and wait for delivery;
  session end also waits for capacity flushes still in flight
- Delivery failures are dropped without affecting later events
- Session helpers: app_opened / app_closed with tab timings, tab and
  screen enter/exit, foreground duration, button clicks
- Email fallback to the guest address
- RemoteActivitySink action naming and timestamp
- BehaviorEvent immutability, coordinates relative position

Run: pytest tests/test_activity_tracker.py -v
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import ValidationError

from checkin.models.activity import BehaviorEvent, Coordinates
from checkin.services.activity_tracker import ActivityTracker, RemoteActivitySink
from checkin.services.api_client import NetworkError

_EMAIL = "alice@example.com"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class RecordingSink:
    def __init__(self, fail_actions: frozenset[str] = frozenset()):
        self.delivered: list[tuple[str, BehaviorEvent]] = []
        self.fail_actions = fail_actions

    async def deliver(self, email: str, event: BehaviorEvent) -> None:
        await asyncio.sleep(0)
        if event.action in self.fail_actions:
            raise NetworkError("offline")
        self.delivered.append((email, event))

    @property
    def actions(self) -> list[str]:
        return [event.action for _, event in self.delivered]


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _tracker(sink=None, **kwargs) -> ActivityTracker:
    return ActivityTracker(sink or RecordingSink(), **kwargs)


# ---------------------------------------------------------------------------
# TestRecording
# ---------------------------------------------------------------------------

class TestRecording:

    @pytest.mark.asyncio
    async def test_noop_when_not_tracking(self):
        tracker = _tracker()

        assert tracker.record(BehaviorEvent(action="tap")) is False
        assert tracker.log_behavior("tap") is None
        assert tracker.buffered_events == 0

    @pytest.mark.asyncio
    async def test_exactly_100_events_trigger_one_flush(self):
        sink = RecordingSink()
        tracker = _tracker(sink, batch_size=100)
        tracker.is_tracking = True
        tracker.set_user_email(_EMAIL)

        for i in range(100):
            tracker.log_behavior("tap", data={"seq": i})

        assert tracker.buffered_events == 0
        assert tracker.flushes_dispatched == 1
        assert tracker.events_dispatched == 100

        await tracker.wait_for_pending_deliveries()
        assert [event.data["seq"] for _, event in sink.delivered] == list(range(100))
        assert {email for email, _ in sink.delivered} == {_EMAIL}

    @pytest.mark.asyncio
    async def test_99_events_do_not_flush(self):
        tracker = _tracker(batch_size=100)
        tracker.is_tracking = True

        for _ in range(99):
            tracker.log_behavior("tap")

        assert tracker.buffered_events == 99
        assert tracker.flushes_dispatched == 0

    @pytest.mark.asyncio
    async def test_batch_flush_takes_oldest_prefix(self):
        sink = RecordingSink()
        tracker = _tracker(sink, batch_size=3)
        tracker.is_tracking = True
        tracker._buffer = [BehaviorEvent(action=f"e{i}") for i in range(4)]

        tracker._flush_batch()
        await tracker.wait_for_pending_deliveries()

        assert sink.actions == ["e0", "e1", "e2"]
        assert tracker.buffered_events == 1

    @pytest.mark.asyncio
    async def test_delivery_failure_is_dropped(self):
        sink = RecordingSink(fail_actions=frozenset({"bad"}))
        tracker = _tracker(sink, batch_size=3)
        tracker.is_tracking = True

        tracker.log_behavior("first")
        tracker.log_behavior("bad")
        tracker.log_behavior("last")
        await tracker.wait_for_pending_deliveries()

        assert sink.actions == ["first", "last"]
        assert tracker.buffered_events == 0

    @pytest.mark.asyncio
    async def test_event_uses_current_tab_by_default(self):
        tracker = _tracker()
        tracker.is_tracking = True
        tracker.current_tab = "home"

        assert tracker.log_behavior("tap").tab == "home"
        assert tracker.log_behavior("tap", tab="").tab == ""


# ---------------------------------------------------------------------------
# TestSessionFlushes
# ---------------------------------------------------------------------------

class TestSessionFlushes:

    @pytest.mark.asyncio
    async def test_timer_flushes_while_active(self):
        sink = RecordingSink()
        tracker = _tracker(sink, flush_interval=0.01)
        tracker.start_session(_EMAIL)
        tracker.log_behavior("tap")

        await asyncio.sleep(0.05)
        await tracker.wait_for_pending_deliveries()

        assert tracker.buffered_events == 0
        assert sink.actions == ["app_opened", "tap"]
        await tracker.end_session()

    @pytest.mark.asyncio
    async def test_end_session_flushes_and_waits(self):
        sink = RecordingSink()
        tracker = _tracker(sink)
        tracker.start_session(_EMAIL)
        tracker.track_button_click("save")

        await tracker.end_session()

        assert sink.actions == ["app_opened", "button_clicked", "app_closed"]
        assert tracker.buffered_events == 0
        assert tracker.is_tracking is False
        assert tracker.log_behavior("after") is None

    @pytest.mark.asyncio
    async def test_end_session_waits_for_earlier_capacity_flush(self):
        class SlowSink(RecordingSink):
            async def deliver(self, email, event):
                if event.action == "tap":
                    await asyncio.sleep(0.05)
                await super().deliver(email, event)

        sink = SlowSink()
        tracker = _tracker(sink, batch_size=2)
        tracker.start_session(_EMAIL)
        tracker.log_behavior("tap")
        assert tracker.flushes_dispatched == 1

        await tracker.end_session()

        assert sorted(sink.actions) == ["app_closed", "app_opened", "tap"]

    @pytest.mark.asyncio
    async def test_end_session_without_start_is_noop(self):
        sink = RecordingSink()
        tracker = _tracker(sink)

        await tracker.end_session()

        assert sink.delivered == []

    @pytest.mark.asyncio
    async def test_background_flushes_and_waits(self):
        sink = RecordingSink()
        tracker = _tracker(sink)
        tracker.start_session(_EMAIL)

        await tracker.app_did_enter_background()

        assert sink.actions == ["app_opened", "app_backgrounded"]
        assert tracker.is_tracking is True
        await tracker.end_session()


# ---------------------------------------------------------------------------
# TestSessionHelpers
# ---------------------------------------------------------------------------

class TestSessionHelpers:

    @pytest.mark.asyncio
    async def test_tab_timings_reported_on_close(self):
        clock = FakeClock()
        sink = RecordingSink()
        tracker = _tracker(sink, clock=clock)
        tracker.start_session(_EMAIL)

        tracker.enter_tab("home", 0)
        clock.advance(5)
        tracker.enter_tab("friends", 1)
        clock.advance(3)
        await tracker.end_session()

        assert sink.actions == [
            "app_opened",
            "tab_entered",
            "tab_exited",
            "tab_entered",
            "tab_exited",
            "app_closed",
        ]
        closed = sink.delivered[-1][1]
        assert closed.duration_seconds == 8
        assert closed.data["tab_timings"] == {"home": 5, "friends": 3}
        entered_friends = sink.delivered[3][1]
        assert entered_friends.data["previous_tab"] == "home"

    @pytest.mark.asyncio
    async def test_screen_enter_exit(self):
        clock = FakeClock()
        tracker = _tracker(clock=clock)
        tracker.is_tracking = True

        tracker.enter_screen("profile", {"source": "tab"})
        clock.advance(2)
        tracker.enter_screen("settings")

        actions = [e.action for e in tracker._buffer]
        assert actions == ["screen_entered", "screen_exited", "screen_entered"]
        assert tracker._buffer[0].data["source"] == "tab"
        assert tracker._buffer[1].duration_seconds == 2
        assert tracker.current_screen == "settings"

    @pytest.mark.asyncio
    async def test_foreground_records_background_duration(self):
        clock = FakeClock()
        tracker = _tracker(clock=clock)
        tracker.start_session(_EMAIL)
        await tracker.app_did_enter_background()

        clock.advance(42)
        tracker.app_will_enter_foreground()

        event = tracker._buffer[-1]
        assert event.action == "app_foregrounded"
        assert event.data["background_duration_seconds"] == 42
        await tracker.end_session()

    @pytest.mark.asyncio
    async def test_foreground_without_background_records_nothing(self):
        tracker = _tracker()
        tracker.is_tracking = True

        tracker.app_will_enter_foreground()

        assert tracker.buffered_events == 0

    @pytest.mark.asyncio
    async def test_button_click_with_coordinates(self):
        tracker = _tracker()
        tracker.is_tracking = True
        coords = Coordinates(x=50, y=100, screen_width=200, screen_height=400)

        event = tracker.track_button_click("save", coordinates=coords)

        assert event.data == {"button_name": "save", "button_type": "button"}
        assert event.coordinates.relative_x == 0.25
        assert event.coordinates.relative_y == 0.25

    def test_empty_email_falls_back_to_guest(self):
        tracker = _tracker()
        tracker.set_user_email("")
        assert tracker.email == "guest@guest.com"


# ---------------------------------------------------------------------------
# TestRemoteSink
# ---------------------------------------------------------------------------

class TestRemoteSink:

    @pytest.mark.asyncio
    async def test_posts_action_with_tab_and_timestamp(self):
        api = MagicMock()
        api.log_activity = AsyncMock()
        event = BehaviorEvent(action="button_clicked", tab="home", timestamp="2026-03-01T10:00:00Z")

        await RemoteActivitySink(api).deliver(_EMAIL, event)

        api.log_activity.assert_awaited_once_with(_EMAIL, "button_clicked_home", "2026-03-01T10:00:00Z")

    @pytest.mark.asyncio
    async def test_missing_tab_becomes_unknown(self):
        api = MagicMock()
        api.log_activity = AsyncMock()

        await RemoteActivitySink(api).deliver(_EMAIL, BehaviorEvent(action="app_opened"))

        assert api.log_activity.await_args.args[1] == "app_opened_unknown"


# ---------------------------------------------------------------------------
# TestBehaviorEvent
# ---------------------------------------------------------------------------

class TestBehaviorEvent:

    def test_is_immutable(self):
        event = BehaviorEvent(action="tap")
        with pytest.raises(ValidationError):
            event.action = "other"

    def test_timestamp_is_utc_iso(self):
        event = BehaviorEvent(action="tap")
        assert event.timestamp.endswith("Z")
        assert "T" in event.timestamp
