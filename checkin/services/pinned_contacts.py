"""
Pinned Contacts Store
=====================
The device-local following set: contacts the user has pinned, persisted
in the local store under ``PinnedContactsKey``.

Set semantics are by phone number. Adding a number that is already
present is a no-op, and the store refuses to grow past its capacity
(12 by default). Both refusals are reported by return value, never by
exception, because reconciliation drops over-capacity entries silently.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from checkin.db.local_store import LocalStore
from checkin.models.following import PinnedContact

logger = logging.getLogger(__name__)

PINNED_CONTACTS_KEY = "PinnedContactsKey"

_CONTACT_LIST = TypeAdapter(list[PinnedContact])


class PinnedContactsStore:
    def __init__(self, store: LocalStore, capacity: int = 12) -> None:
        self._store = store
        self._capacity = capacity
        self._contacts: list[PinnedContact] = self._load()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def is_full(self) -> bool:
        return len(self._contacts) >= self._capacity

    def contacts(self) -> list[PinnedContact]:
        return list(self._contacts)

    def phone_numbers(self) -> set[str]:
        return {contact.phone_number for contact in self._contacts}

    def get(self, phone_number: str) -> Optional[PinnedContact]:
        for contact in self._contacts:
            if contact.phone_number == phone_number:
                return contact
        return None

    def add(self, contact: PinnedContact) -> bool:
        """Pin *contact*. Returns False if the number is already pinned or the set is full."""
        if self.get(contact.phone_number) is not None:
            return False
        if self.is_full:
            logger.info(
                "Pinned contacts at capacity (%d), not adding %s",
                self._capacity, contact.phone_number,
            )
            return False
        self._contacts.append(contact)
        self._save()
        return True

    def remove(self, phone_number: str) -> bool:
        remaining = [c for c in self._contacts if c.phone_number != phone_number]
        if len(remaining) == len(self._contacts):
            return False
        self._contacts = remaining
        self._save()
        return True

    # ---- persistence -----------------------------------------------------

    def _load(self) -> list[PinnedContact]:
        raw = self._store.get(PINNED_CONTACTS_KEY)
        if raw is None:
            return []
        try:
            contacts = _CONTACT_LIST.validate_python(raw)
        except ValidationError as exc:
            logger.warning("Discarding unreadable pinned contacts: %s", exc)
            return []

        # Collapse duplicates written by older builds, first one wins.
        unique: dict[str, PinnedContact] = {}
        for contact in contacts:
            unique.setdefault(contact.phone_number, contact)
        return list(unique.values())[: self._capacity]

    def _save(self) -> None:
        self._store.set(
            PINNED_CONTACTS_KEY,
            [contact.model_dump() for contact in self._contacts],
        )
