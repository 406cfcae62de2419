"""Bounded in-memory cache of resolved media awaiting a delivery action."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from linkfetch.core.config import MAX_PENDING_MEDIA
from linkfetch.core.models import MediaResult

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class PendingMediaCache:
    """FIFO-evicting map from an opaque key to a `MediaResult`.

    Eviction is by insertion order only; entries a user is about to act on
    may be dropped, and callers must treat a missing key as "expired".
    """

    def __init__(
        self,
        limit: int = MAX_PENDING_MEDIA,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        if limit < 1:
            message = "Pending media limit must be positive"
            raise ValueError(message)
        self.limit = limit
        self._clock = clock
        self._entries: dict[str, MediaResult] = {}

    def put(self, requester_id: int, result: MediaResult) -> str:
        """Store a result and return its key."""
        key = f"{requester_id}_{self._clock()}"
        self._entries[key] = result
        self._trim()
        return key

    def get(self, key: str) -> MediaResult | None:
        return self._entries.get(key)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def _trim(self) -> None:
        overflow = len(self._entries) - self.limit
        if overflow <= 0:
            return
        for key in list(self._entries)[:overflow]:
            del self._entries[key]
        logger.debug("Evicted %d pending media entries", overflow)
