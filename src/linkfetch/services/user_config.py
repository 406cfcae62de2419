"""Per-user remote daemon configuration backed by a JSON file."""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from linkfetch.core.models import RemoteDaemonConfig, UserRecord

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()


class UserConfigStore:
    """Keyed store of `UserRecord`s with last-write-wins semantics.

    The whole file is re-read on every access so manual edits are picked up
    without a restart. Unreadable files are treated as empty.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    # Raw file access
    def _load(self) -> dict[str, dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as exc:
            logger.warning("Failed to read user store %s: %s", self.path, exc)
            return {}
        users = data.get("users") if isinstance(data, dict) else None
        return users if isinstance(users, dict) else {}

    def _dump(self, users: dict[str, dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps({"users": users}, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )

    # Record access
    def get_record(self, user_id: int) -> UserRecord | None:
        """Return the full stored record for a user, if any."""
        with self._lock:
            raw = self._load().get(str(user_id))
        if not raw:
            return None
        try:
            return UserRecord.from_dict(raw)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Ignoring malformed record for user %s: %s", user_id, exc)
            return None

    def get(self, user_id: int) -> RemoteDaemonConfig | None:
        """Return the user's daemon configuration, if configured."""
        record = self.get_record(user_id)
        return record.aria2 if record else None

    def has(self, user_id: int) -> bool:
        """Whether the user has a daemon configured."""
        return self.get(user_id) is not None

    def save(
        self,
        user_id: int,
        config: RemoteDaemonConfig,
        *,
        username: str | None = None,
    ) -> UserRecord:
        """Persist a configuration, keeping the original creation timestamp."""
        with self._lock:
            users = self._load()
            previous = users.get(str(user_id)) or {}
            now = _utc_now()
            record = UserRecord(
                user_id=user_id,
                username=username or previous.get("username") or None,
                aria2=config,
                created_at=str(previous.get("created_at") or now),
                updated_at=now,
            )
            users[str(user_id)] = record.to_dict()
            self._dump(users)
        logger.info("Saved aria2 config for user %s: %s", user_id, config.endpoint)
        return record

    def delete(self, user_id: int) -> bool:
        """Remove a user's record; returns False when nothing was stored."""
        with self._lock:
            users = self._load()
            if users.pop(str(user_id), None) is None:
                return False
            self._dump(users)
        logger.info("Deleted aria2 config for user %s", user_id)
        return True

    # Async wrappers keep file I/O off the event loop
    async def aget(self, user_id: int) -> RemoteDaemonConfig | None:
        """Get a user's configuration without blocking the event loop."""
        return await asyncio.to_thread(self.get, user_id)

    async def ahas(self, user_id: int) -> bool:
        """Check for a configuration without blocking the event loop."""
        return await asyncio.to_thread(self.has, user_id)

    async def asave(
        self,
        user_id: int,
        config: RemoteDaemonConfig,
        *,
        username: str | None = None,
    ) -> UserRecord:
        """Save a configuration without blocking the event loop."""
        return await asyncio.to_thread(self.save, user_id, config, username=username)

    async def adelete(self, user_id: int) -> bool:
        """Delete a configuration without blocking the event loop."""
        return await asyncio.to_thread(self.delete, user_id)
