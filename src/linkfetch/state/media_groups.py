"""Debounce buffer that coalesces grouped chat attachments into one batch."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from linkfetch.core.config import MEDIA_GROUP_DELAY_SECONDS
from linkfetch.core.error_handling import log_exception
from linkfetch.core.exceptions import AttachmentUnavailableError
from linkfetch.core.models import MediaResult, Platform
from linkfetch.telegram.error_handling import MESSAGE_PROCESSING_EXCEPTIONS

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

logger = logging.getLogger(__name__)


class AttachmentKind(StrEnum):
    """Kind of a single chat attachment."""

    PHOTO = "photo"
    VIDEO = "video"


@dataclass(frozen=True, slots=True)
class MediaGroupItem:
    """One attachment of a media group, before its URL is resolved."""

    file_id: str
    kind: AttachmentKind
    file_name: str


@dataclass(slots=True)
class PendingGroup:
    """Items collected so far for one group id."""

    group_id: str
    requester_id: int
    chat_id: int
    message_id: int
    items: list[MediaGroupItem] = field(default_factory=list)
    timer: asyncio.Task[None] | None = None


class MediaGroupBuffer:
    """Reset-on-arrival debounce keyed by media group id.

    Each new item cancels the group's pending timer and schedules a fresh
    one. When a timer fires, the group is removed from the registry before
    the flush callback runs, so a late item starts a new group instead of
    joining one that is already being processed.
    """

    def __init__(
        self,
        on_flush: Callable[[PendingGroup], Awaitable[None]],
        *,
        delay: float = MEDIA_GROUP_DELAY_SECONDS,
    ) -> None:
        self.on_flush = on_flush
        self.delay = delay
        self._groups: dict[str, PendingGroup] = {}

    def on_item(
        self,
        group_id: str,
        item: MediaGroupItem,
        *,
        requester_id: int,
        chat_id: int,
        message_id: int,
    ) -> None:
        """Add an item and (re)start the group's timer."""
        group = self._groups.get(group_id)
        if group is None:
            group = PendingGroup(
                group_id=group_id,
                requester_id=requester_id,
                chat_id=chat_id,
                message_id=message_id,
            )
            self._groups[group_id] = group
        else:
            # Replies go to the most recent message of the group.
            group.message_id = message_id
            if group.timer is not None:
                group.timer.cancel()

        group.items.append(item)
        group.timer = asyncio.create_task(self._fire_after_delay(group_id))

    def pending_groups(self) -> list[str]:
        return list(self._groups)

    async def _fire_after_delay(self, group_id: str) -> None:
        await asyncio.sleep(self.delay)
        group = self._groups.pop(group_id, None)
        if group is None:
            return
        logger.debug("Flushing media group %s with %d items", group_id, len(group.items))
        try:
            await self.on_flush(group)
        except MESSAGE_PROCESSING_EXCEPTIONS as exc:
            log_exception(
                logger=logger,
                message="Media group flush failed",
                error=exc,
                context={"group_id": group_id, "requester_id": group.requester_id},
            )


async def finalize_media_group(
    group_id: str,
    items: Sequence[MediaGroupItem],
    resolve_url: Callable[[str], Awaitable[str]],
) -> MediaResult | None:
    """Resolve every item's download URL and build one batch result.

    Items whose URL cannot be resolved are dropped. Returns None only when
    no item resolved at all.
    """
    video_urls: list[str] = []
    image_urls: list[str] = []
    for item in items:
        try:
            url = await resolve_url(item.file_id)
        except AttachmentUnavailableError as exc:
            logger.info("Dropping item %s of group %s: %s", item.file_id, group_id, exc)
            continue
        if item.kind is AttachmentKind.VIDEO:
            video_urls.append(url)
        else:
            image_urls.append(url)

    if not video_urls and not image_urls:
        return None

    return MediaResult.build(
        source_url=(video_urls or image_urls)[0],
        platform=Platform.TELEGRAM,
        title=f"telegram_group_{group_id}",
        video_urls=video_urls,
        image_urls=image_urls,
    )
