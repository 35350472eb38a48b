"""
Following Sync Service
======================
Keeps the device-local following set (pinned contacts) and the
backend's following list for the same username consistent, without
discarding anything that exists on only one side.

Reconciliation, given local set L and remote set R:

    1. only_local  = L - R,  only_remote = R - L
    2. each number in only_remote is pinned locally as a "Synced Contact"
       placeholder while there is room; the rest are dropped silently
    3. each number in only_local is pushed with a follow request; the
       pushes run concurrently and the sync waits for all of them
    4. failed pushes are counted, never rolled back

If the remote fetch answers 404 the user has no list yet, so every local
number is uploaded instead (upload-only mode). Any other fetch failure
fails the sync without touching the last-sync timestamp.

Running it twice with nothing changed on either side makes zero follow
requests the second time. The caller gates automatic syncs on
``should_sync()``; the cooldown is measured from the last sync that
reached the completion step.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from checkin.db.local_store import LocalStore
from checkin.models.following import PinnedContact, SyncResult
from checkin.services.api_client import CheckInAPIClient, CheckInAPIError, NotFoundError
from checkin.services.contact_analysis import ContactAnalysisService
from checkin.services.pinned_contacts import PinnedContactsStore

logger = logging.getLogger(__name__)

LAST_SYNC_KEY = "LastFollowingSyncTime"

STATUS_NOT_SYNCED = "Not synced"
STATUS_NO_USERNAME = "No username provided"
STATUS_SYNCING = "Syncing..."
STATUS_SYNCED = "Synced successfully"
STATUS_FAILED = "Sync failed"


class FollowingSyncService:
    """Owns reconciliation state: status string, error, last-sync time."""

    def __init__(
        self,
        api: CheckInAPIClient,
        pinned: PinnedContactsStore,
        store: LocalStore,
        contact_analysis: Optional[ContactAnalysisService] = None,
        cooldown: timedelta = timedelta(hours=1),
    ) -> None:
        self._api = api
        self._pinned = pinned
        self._store = store
        self._contact_analysis = contact_analysis
        self._cooldown = cooldown
        self._lock = asyncio.Lock()
        self.status = STATUS_NOT_SYNCED
        self.sync_error: Optional[str] = None

    @property
    def is_syncing(self) -> bool:
        return self._lock.locked()

    @property
    def pinned(self) -> PinnedContactsStore:
        return self._pinned

    @property
    def last_sync_at(self) -> Optional[datetime]:
        raw = self._store.get(LAST_SYNC_KEY)
        if raw is None:
            return None
        try:
            return datetime.fromisoformat(raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring unreadable %s value: %r", LAST_SYNC_KEY, raw)
            return None

    def should_sync(self, now: Optional[datetime] = None) -> bool:
        """True if never synced, or the cooldown has strictly elapsed.

        A naive *now* is taken as local time.
        """
        last = self.last_sync_at
        if last is None:
            return True
        now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
        return now - last.astimezone(timezone.utc) > self._cooldown

    def clear_sync_data(self) -> None:
        self._store.remove(LAST_SYNC_KEY)
        self.status = STATUS_NOT_SYNCED
        self.sync_error = None

    # ---- Reconciliation --------------------------------------------------

    async def sync(self, username: str) -> Optional[SyncResult]:
        """Reconcile local and remote following lists for *username*.

        Returns None without doing anything if a sync is already running
        or *username* is empty, and None after a failed remote fetch.
        """
        if self._lock.locked():
            logger.info("Following sync already in progress, ignoring request")
            return None

        if not username:
            self.status = STATUS_NO_USERNAME
            return None

        async with self._lock:
            self.status = STATUS_SYNCING
            self.sync_error = None

            local = self._pinned.phone_numbers()
            logger.info("Syncing following list for %s (%d local)", username, len(local))

            try:
                remote_response = await self._api.get_following(username)
            except NotFoundError:
                logger.info("No remote following list for %s, uploading local set", username)
                result = await self._upload_only(username, local)
            except CheckInAPIError as exc:
                logger.warning("Failed to fetch following list for %s: %s", username, exc)
                self.sync_error = str(exc)
                self.status = STATUS_FAILED
                return None
            else:
                result = await self._reconcile(username, local, set(remote_response.following))

            self._complete(result)
            return result

    async def _reconcile(self, username: str, local: set[str], remote: set[str]) -> SyncResult:
        only_local = sorted(local - remote)
        only_remote = sorted(remote - local)
        logger.info(
            "Sync diff: %d only local, %d only remote", len(only_local), len(only_remote),
        )

        added: list[str] = []
        dropped: list[str] = []
        for phone in only_remote:
            if self._pinned.add(PinnedContact.synced_placeholder(phone)):
                added.append(phone)
            else:
                dropped.append(phone)
        if dropped:
            logger.info("Dropped %d remote entries over local capacity", len(dropped))

        pushed, failures = await self._push_follows(username, only_local)
        return SyncResult(
            mode="reconcile",
            added_locally=added,
            dropped_over_capacity=dropped,
            pushed=pushed,
            push_failures=failures,
        )

    async def _upload_only(self, username: str, local: set[str]) -> SyncResult:
        pushed, failures = await self._push_follows(username, sorted(local))
        return SyncResult(mode="upload_only", pushed=pushed, push_failures=failures)

    async def _push_follows(
        self, username: str, phones: Iterable[str]
    ) -> tuple[list[str], list[str]]:
        phones = list(phones)
        if not phones:
            return [], []

        outcomes = await asyncio.gather(*(self._follow_one(username, p) for p in phones))
        pushed = [p for p, ok in zip(phones, outcomes) if ok]
        failures = [p for p, ok in zip(phones, outcomes) if not ok]
        logger.info("Backend sync: %d succeeded, %d failed", len(pushed), len(failures))
        return pushed, failures

    async def _follow_one(self, username: str, phone: str) -> bool:
        try:
            await self._api.follow(phone, username)
        except CheckInAPIError as exc:
            logger.warning("Failed to push follow %s for %s: %s", phone, username, exc)
            return False
        return True

    def _complete(self, result: SyncResult) -> None:
        now = datetime.now(timezone.utc)
        self._store.set(LAST_SYNC_KEY, now.isoformat())
        if result.push_failures:
            self.status = f"Synced with {len(result.push_failures)} failed uploads"
        else:
            self.status = STATUS_SYNCED
        logger.info("Following sync completed at %s", now.isoformat())

    # ---- Single-entry changes --------------------------------------------

    async def follow(self, username: str, contact: PinnedContact) -> tuple[bool, bool]:
        """Pin *contact* and push the follow.

        Returns ``(pinned, remote_synced)``. A remote failure leaves the
        local pin in place; the next reconciliation pushes it again.
        """
        if not self._pinned.add(contact):
            return False, False
        if not username:
            return True, False
        try:
            await self._api.follow(contact.phone_number, username)
        except CheckInAPIError as exc:
            logger.warning("Follow %s saved locally, remote push failed: %s", contact.phone_number, exc)
            return True, False
        return True, True

    async def unfollow(self, username: str, phone_number: str) -> tuple[bool, bool]:
        """Unpin *phone_number*, drop its cached profile and push the unfollow."""
        removed = self._pinned.remove(phone_number)
        if self._contact_analysis is not None:
            self._contact_analysis.remove_contact(phone_number)
        if not removed or not username:
            return removed, False
        try:
            await self._api.unfollow(phone_number, username)
        except CheckInAPIError as exc:
            logger.warning("Unfollow %s applied locally, remote push failed: %s", phone_number, exc)
            return True, False
        return True, True
