"""
Local Key-Value Store
=====================
Device-local persistence for the handful of values the client keeps
between launches: the pinned/followed contacts list, the last following
sync time, and cached AI analysis blobs.

The whole store is one JSON document. Every write rewrites the file so
the on-disk copy is never behind the in-memory one. There is no schema
versioning; readers validate what they load and discard what they can't
parse.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from checkin.config import Settings

logger = logging.getLogger(__name__)


class LocalStore:
    """JSON-file backed key-value store. In-memory only when *path* is None."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path
        self._data: dict[str, Any] = self._load()

    @classmethod
    def from_settings(cls, settings: Settings) -> LocalStore:
        path = Path(settings.state_file).expanduser() if settings.state_file else None
        return cls(path)

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store a JSON-serialisable value and persist immediately."""
        self._data[key] = value
        self._save()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._save()

    def keys(self) -> list[str]:
        return list(self._data)

    # ---- persistence -----------------------------------------------------

    def _load(self) -> dict[str, Any]:
        if self._path is None or not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Local store %s unreadable, starting empty: %s", self._path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Local store %s is not a JSON object, starting empty", self._path)
            return {}
        return data

    def _save(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")

