"""
Activity Tracker
================
Buffers UI and lifecycle events in memory and ships them to the
backend logger without making callers wait.

Flush triggers:
- the buffer reaches ``batch_size`` events (100): the oldest
  ``batch_size`` events go out at once
- every ``flush_interval`` seconds (120) while a session is active
- session end and app backgrounding: everything buffered goes out and
  the call waits until delivery has finished

The buffer is cleared the moment a flush is dispatched, before any
delivery is confirmed. A delivery that fails loses those events; there
is no retry and nothing is persisted. Within one flush events are sent
one after another in recording order. Two flushes in flight at the same
time may interleave.

Where events go is decided by an ``ActivitySink``. ``RemoteActivitySink``
posts one ``log-activity`` call per event; anything implementing
``deliver()`` can stand in for it (a durable queue, a test recorder).
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Optional, Protocol

from checkin.models.activity import BehaviorEvent, Coordinates
from checkin.services.api_client import CheckInAPIClient

logger = logging.getLogger(__name__)

DEFAULT_GUEST_EMAIL = "guest@guest.com"


# ---------------------------------------------------------------------------
# Sinks
# ---------------------------------------------------------------------------


class ActivitySink(Protocol):
    async def deliver(self, email: str, event: BehaviorEvent) -> None:
        ...


class RemoteActivitySink:
    """Posts each event to /api/logger/log-activity/."""

    def __init__(self, api: CheckInAPIClient) -> None:
        self._api = api

    async def deliver(self, email: str, event: BehaviorEvent) -> None:
        await self._api.log_activity(email, event.api_action, event.timestamp)


# ---------------------------------------------------------------------------
# Tracker
# ---------------------------------------------------------------------------


class ActivityTracker:
    """Session-scoped event buffer. Must be driven from the event loop thread."""

    def __init__(
        self,
        sink: ActivitySink,
        batch_size: int = 100,
        flush_interval: float = 120.0,
        guest_email: str = DEFAULT_GUEST_EMAIL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sink = sink
        self._batch_size = batch_size
        self._flush_interval = flush_interval
        self._guest_email = guest_email
        self._clock = clock

        self._buffer: list[BehaviorEvent] = []
        self._timer_task: Optional[asyncio.Task] = None
        self._deliveries: set[asyncio.Task] = set()

        self.is_tracking = False
        self.email = guest_email
        self.current_tab = ""
        self.current_screen: Optional[str] = None
        self.tab_timings: dict[str, float] = {}
        self.events_recorded = 0
        self.flushes_dispatched = 0
        self.events_dispatched = 0

        self._session_started: Optional[float] = None
        self._tab_started: Optional[float] = None
        self._screen_started: Optional[float] = None
        self._background_started: Optional[float] = None

    @property
    def buffered_events(self) -> int:
        return len(self._buffer)

    def set_user_email(self, email: str) -> None:
        self.email = email or self._guest_email

    # ---- Recording -------------------------------------------------------

    def record(self, event: BehaviorEvent) -> bool:
        """Append *event*. No-op (returns False) when no session is active."""
        if not self.is_tracking:
            return False
        self._buffer.append(event)
        self.events_recorded += 1
        if len(self._buffer) >= self._batch_size:
            self._flush_batch()
        return True

    def log_behavior(
        self,
        action: str,
        tab: Optional[str] = None,
        coordinates: Optional[Coordinates] = None,
        duration_seconds: Optional[float] = None,
        data: Optional[dict[str, Any]] = None,
    ) -> Optional[BehaviorEvent]:
        """Build an event in the current tab context and record it."""
        if not self.is_tracking:
            return None
        event = BehaviorEvent(
            action=action,
            tab=self.current_tab if tab is None else tab,
            coordinates=coordinates,
            duration_seconds=duration_seconds,
            data=data or {},
        )
        self.record(event)
        return event

    # ---- Session lifecycle -----------------------------------------------

    def start_session(self, email: Optional[str] = None, details: Optional[dict[str, Any]] = None) -> None:
        """Start tracking and the periodic flush timer."""
        if email is not None:
            self.set_user_email(email)
        if self.is_tracking:
            logger.info("Activity session already active for %s", self.email)
            return

        self._session_started = self._clock()
        self.is_tracking = True
        self.tab_timings = {}
        self.log_behavior("app_opened", data=dict(details or {}))
        self._timer_task = asyncio.get_running_loop().create_task(self._run_timer())
        logger.info("Activity session started for %s", self.email)

    async def end_session(self) -> None:
        """Record app_closed, flush, and wait out every delivery still in flight."""
        if self._session_started is None:
            return

        session_duration = self._clock() - self._session_started
        if self.current_tab:
            self.exit_tab(self.current_tab)
        if self.current_screen:
            self.exit_screen(self.current_screen)
        self.log_behavior(
            "app_closed",
            duration_seconds=session_duration,
            data={
                "total_activities_logged": self.events_recorded,
                "tab_timings": dict(self.tab_timings),
            },
        )

        self._stop_timer()
        await self.flush_all()
        await self.wait_for_pending_deliveries()
        self.is_tracking = False
        self._session_started = None
        logger.info("Activity session ended after %.1fs", session_duration)

    async def app_did_enter_background(self) -> None:
        self._background_started = self._clock()
        self.log_behavior(
            "app_backgrounded",
            data={"current_tab": self.current_tab, "current_screen": self.current_screen or ""},
        )
        await self.flush_all()

    def app_will_enter_foreground(self) -> None:
        if self._background_started is not None:
            background_duration = self._clock() - self._background_started
            self.log_behavior(
                "app_foregrounded",
                duration_seconds=background_duration,
                data={
                    "background_duration_seconds": background_duration,
                    "current_tab": self.current_tab,
                    "current_screen": self.current_screen or "",
                },
            )
        self._background_started = None

    # ---- Tabs and screens ------------------------------------------------

    def enter_tab(self, tab_name: str, tab_index: int) -> None:
        previous = self.current_tab
        if previous and previous != tab_name:
            self.exit_tab(previous)

        self.current_tab = tab_name
        self._tab_started = self._clock()
        self.log_behavior(
            "tab_entered",
            tab=tab_name,
            data={"tab_name": tab_name, "tab_index": tab_index, "previous_tab": previous or "none"},
        )

    def exit_tab(self, tab_name: str) -> None:
        if self.current_tab != tab_name or self._tab_started is None:
            return
        time_spent = self._clock() - self._tab_started
        self.tab_timings[tab_name] = self.tab_timings.get(tab_name, 0.0) + time_spent
        self.log_behavior(
            "tab_exited",
            tab=tab_name,
            duration_seconds=time_spent,
            data={
                "tab_name": tab_name,
                "time_spent_seconds": time_spent,
                "total_time_in_tab": self.tab_timings[tab_name],
            },
        )
        self.current_tab = ""
        self._tab_started = None

    def enter_screen(self, screen_name: str, details: Optional[dict[str, Any]] = None) -> None:
        if self.current_screen and self.current_screen != screen_name:
            self.exit_screen(self.current_screen)

        self.current_screen = screen_name
        self._screen_started = self._clock()
        data = dict(details or {})
        data["screen_name"] = screen_name
        data["current_tab"] = self.current_tab
        self.log_behavior("screen_entered", data=data)

    def exit_screen(self, screen_name: str) -> None:
        if self.current_screen != screen_name or self._screen_started is None:
            return
        time_spent = self._clock() - self._screen_started
        self.log_behavior(
            "screen_exited",
            duration_seconds=time_spent,
            data={"screen_name": screen_name, "time_spent_seconds": time_spent},
        )
        self.current_screen = None
        self._screen_started = None

    # ---- Interactions ----------------------------------------------------

    def track_button_click(
        self,
        button_name: str,
        button_type: str = "button",
        coordinates: Optional[Coordinates] = None,
        data: Optional[dict[str, Any]] = None,
    ) -> Optional[BehaviorEvent]:
        payload = dict(data or {})
        payload["button_name"] = button_name
        payload["button_type"] = button_type
        return self.log_behavior("button_clicked", coordinates=coordinates, data=payload)

    def track_custom_event(
        self,
        action: str,
        data: Optional[dict[str, Any]] = None,
        tab: Optional[str] = None,
        coordinates: Optional[Coordinates] = None,
        duration_seconds: Optional[float] = None,
    ) -> Optional[BehaviorEvent]:
        return self.log_behavior(
            action, tab=tab, coordinates=coordinates,
            duration_seconds=duration_seconds, data=data,
        )

    # ---- Flushing --------------------------------------------------------

    async def flush_all(self) -> None:
        """Send everything buffered and wait for delivery to finish."""
        if not self._buffer:
            return
        batch = self._buffer
        self._buffer = []
        await self._dispatch(batch)

    async def wait_for_pending_deliveries(self) -> None:
        if self._deliveries:
            await asyncio.gather(*list(self._deliveries))

    def _flush_batch(self) -> Optional[asyncio.Task]:
        """Dispatch the oldest batch_size events without waiting."""
        if not self._buffer:
            return None
        batch = self._buffer[: self._batch_size]
        del self._buffer[: self._batch_size]
        return self._dispatch(batch)

    def _dispatch(self, batch: list[BehaviorEvent]) -> asyncio.Task:
        self.flushes_dispatched += 1
        self.events_dispatched += len(batch)
        task = asyncio.get_running_loop().create_task(self._deliver(self.email, batch))
        self._deliveries.add(task)
        task.add_done_callback(self._deliveries.discard)
        return task

    async def _deliver(self, email: str, batch: list[BehaviorEvent]) -> None:
        for event in batch:
            try:
                await self._sink.deliver(email, event)
            except Exception as exc:
                logger.debug("Dropped activity %s: %s", event.api_action, exc)

    async def _run_timer(self) -> None:
        while True:
            await asyncio.sleep(self._flush_interval)
            self._flush_batch()

    def _stop_timer(self) -> None:
        if self._timer_task is not None:
            self._timer_task.cancel()
            self._timer_task = None
