"""
Cache Manager
=============
Time-expiring cache for AI-generated text blobs, stored per user in the
local key-value store.

Entries live under ``cached_{namespace}_{username}`` as
``{"cached_at": <ISO-8601>, "payload": ...}``. Shared entries that belong
to no user (the celebrity feed) drop the username part. Reads past the
TTL return None but leave the entry in place; the next write replaces it.

Namespaces and usernames may both contain underscores, so keys cannot be
split back apart. Every namespace written is recorded under
``CacheNamespaces`` and ``clear_user_cache`` rebuilds exact keys from it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from checkin.db.local_store import LocalStore

logger = logging.getLogger(__name__)

_PREFIX = "cached_"
NAMESPACES_KEY = "CacheNamespaces"


def _as_utc(moment: Optional[datetime]) -> datetime:
    """Current time if *moment* is None; naive values are taken as local time."""
    return (moment or datetime.now(timezone.utc)).astimezone(timezone.utc)


class CacheManager:
    def __init__(self, store: LocalStore) -> None:
        self._store = store

    @staticmethod
    def key(namespace: str, username: str = "") -> str:
        if not username:
            return f"{_PREFIX}{namespace}"
        return f"{_PREFIX}{namespace}_{username}"

    def get(
        self,
        namespace: str,
        username: str,
        max_age: Optional[timedelta],
        now: Optional[datetime] = None,
    ) -> Optional[Any]:
        """Return the cached payload if it is younger than *max_age*.

        ``max_age=None`` returns the entry whatever its age.
        """
        key = self.key(namespace, username)
        entry = self._store.get(key)
        if not isinstance(entry, dict) or "payload" not in entry:
            return None
        try:
            cached_at = datetime.fromisoformat(entry["cached_at"])
        except (KeyError, TypeError, ValueError):
            logger.warning("Dropping cache entry %s with bad timestamp", key)
            self._store.remove(key)
            return None

        if max_age is not None and _as_utc(now) - _as_utc(cached_at) > max_age:
            return None
        return entry["payload"]

    def set(
        self,
        namespace: str,
        username: str,
        payload: Any,
        now: Optional[datetime] = None,
    ) -> None:
        self._store.set(
            self.key(namespace, username),
            {"cached_at": _as_utc(now).isoformat(), "payload": payload},
        )
        namespaces = self._namespaces()
        if namespace not in namespaces:
            self._store.set(NAMESPACES_KEY, [*namespaces, namespace])

    def clear_user_cache(self, username: str) -> int:
        """Remove every cached entry for *username*. Returns how many were removed."""
        if not username:
            return 0
        doomed = [
            key
            for key in (self.key(ns, username) for ns in self._namespaces())
            if self._store.get(key) is not None
        ]
        for key in doomed:
            self._store.remove(key)
        if doomed:
            logger.info("Cleared %d cached entries for %s", len(doomed), username)
        return len(doomed)

    def _namespaces(self) -> list[str]:
        namespaces = self._store.get(NAMESPACES_KEY, [])
        if not isinstance(namespaces, list):
            return []
        return [ns for ns in namespaces if isinstance(ns, str)]
