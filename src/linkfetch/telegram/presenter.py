"""Show a resolved `MediaResult` in chat, degrading step by step on failure."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from telegram import InputMediaPhoto, InputMediaVideo
from telegram.error import TelegramError

from linkfetch.core.config import MEDIA_GROUP_SEND_LIMIT
from linkfetch.core.models import MediaKind, MediaResult
from linkfetch.telegram.formatting import format_video_info, media_count_text

if TYPE_CHECKING:
    from telegram import InlineKeyboardMarkup, Message

logger = logging.getLogger(__name__)


def count_text(result: MediaResult) -> str:
    return media_count_text(len(result.video_urls), len(result.image_urls))


def _with_caption_on_last(
    media: list[InputMediaPhoto | InputMediaVideo],
    caption: str,
) -> list[InputMediaPhoto | InputMediaVideo]:
    """Copy of `media` capped to one album, captioned on the last item."""
    album = media[:MEDIA_GROUP_SEND_LIMIT]
    if not album:
        return album
    last = album[-1]
    if isinstance(last, InputMediaVideo):
        album[-1] = InputMediaVideo(media=last.media, caption=caption)
    else:
        album[-1] = InputMediaPhoto(media=last.media, caption=caption)
    return album


async def _send_album(
    message: Message,
    media: list[InputMediaPhoto | InputMediaVideo],
    caption: str,
    *,
    counts: str,
    keyboard: InlineKeyboardMarkup,
) -> bool:
    """Album followed by a count message carrying the action button."""
    try:
        await message.reply_media_group(
            media=_with_caption_on_last(media, caption),
            do_quote=True,
        )
    except TelegramError as exc:
        logger.warning("Media group send failed: %s", exc)
        return False
    await message.reply_text(counts, reply_markup=keyboard, do_quote=False)
    return True


async def _present_single_video(
    message: Message,
    result: MediaResult,
    keyboard: InlineKeyboardMarkup,
) -> None:
    caption = format_video_info(result) if result.duration else result.title
    try:
        await message.reply_video(
            video=result.primary_url,
            caption=caption,
            supports_streaming=True,
            reply_markup=keyboard,
            do_quote=True,
        )
    except TelegramError as exc:
        logger.warning("Video send failed, trying thumbnail: %s", exc)
    else:
        return

    if result.thumbnail:
        try:
            await message.reply_photo(
                photo=result.thumbnail,
                caption=caption,
                reply_markup=keyboard,
                do_quote=True,
            )
        except TelegramError as exc:
            logger.warning("Thumbnail send failed: %s", exc)
        else:
            return

    await message.reply_text(
        f"{caption}\n\n{result.primary_url}",
        reply_markup=keyboard,
        do_quote=True,
    )


async def _present_single_image(
    message: Message,
    result: MediaResult,
    keyboard: InlineKeyboardMarkup,
) -> None:
    try:
        await message.reply_photo(
            photo=result.primary_url,
            caption=result.title,
            reply_markup=keyboard,
            do_quote=True,
        )
    except TelegramError as exc:
        logger.warning("Image send failed: %s", exc)
        await message.reply_text(
            f"{result.title}\n\n{result.primary_url}",
            reply_markup=keyboard,
            do_quote=True,
        )


async def _present_multi_video(
    message: Message,
    result: MediaResult,
    keyboard: InlineKeyboardMarkup,
) -> None:
    counts = count_text(result)
    videos: list[InputMediaPhoto | InputMediaVideo] = [
        InputMediaVideo(media=url) for url in result.video_urls
    ]
    if await _send_album(message, videos, result.title, counts=counts, keyboard=keyboard):
        return

    # Some hosts refuse hotlinked videos; thumbnails still preview the post.
    if result.thumbnail_urls:
        thumbnails: list[InputMediaPhoto | InputMediaVideo] = [
            InputMediaPhoto(media=url) for url in result.thumbnail_urls
        ]
        if await _send_album(
            message,
            thumbnails,
            result.title,
            counts=counts,
            keyboard=keyboard,
        ):
            return

    video_list = "\n".join(result.video_urls)
    await message.reply_text(
        f"{result.title}\n\nVideo links:\n{video_list}",
        reply_markup=keyboard,
        do_quote=True,
    )


async def _present_multi_image(
    message: Message,
    result: MediaResult,
    keyboard: InlineKeyboardMarkup,
) -> None:
    images: list[InputMediaPhoto | InputMediaVideo] = [
        InputMediaPhoto(media=url) for url in result.image_urls
    ]
    counts = count_text(result)
    if await _send_album(message, images, result.title, counts=counts, keyboard=keyboard):
        return

    batch = result.image_urls[:MEDIA_GROUP_SEND_LIMIT]
    for index, url in enumerate(batch):
        is_last = index == len(batch) - 1
        try:
            await message.reply_photo(
                photo=url,
                caption=result.title if is_last else None,
                reply_markup=keyboard if is_last else None,
                do_quote=index == 0,
            )
        except TelegramError as exc:
            logger.warning("Image %d send failed: %s", index + 1, exc)


async def _present_mixed(
    message: Message,
    result: MediaResult,
    keyboard: InlineKeyboardMarkup,
) -> None:
    media: list[InputMediaPhoto | InputMediaVideo] = [
        InputMediaVideo(media=url) for url in result.video_urls
    ]
    media.extend(InputMediaPhoto(media=url) for url in result.image_urls)
    counts = count_text(result)
    if await _send_album(message, media, result.title, counts=counts, keyboard=keyboard):
        return

    sent = False
    for url in result.video_urls:
        try:
            await message.reply_video(video=url, do_quote=not sent)
        except TelegramError as exc:
            logger.warning("Video send failed: %s", exc)
        else:
            sent = True
    for url in result.image_urls:
        try:
            await message.reply_photo(photo=url, do_quote=not sent)
        except TelegramError as exc:
            logger.warning("Image send failed: %s", exc)
        else:
            sent = True
    if sent:
        await message.reply_text(result.title, reply_markup=keyboard, do_quote=False)


_PRESENTERS = {
    MediaKind.SINGLE_VIDEO: _present_single_video,
    MediaKind.SINGLE_IMAGE: _present_single_image,
    MediaKind.MULTI_VIDEO: _present_multi_video,
    MediaKind.MULTI_IMAGE: _present_multi_image,
    MediaKind.MIXED: _present_mixed,
}


async def present_media(
    message: Message,
    result: MediaResult,
    keyboard: InlineKeyboardMarkup,
) -> None:
    """Reply to `message` with the media, falling back as sends fail."""
    logger.info(
        "Presenting %s: %s (videos=%d, images=%d, thumbnails=%d)",
        result.kind.value,
        result.title,
        len(result.video_urls),
        len(result.image_urls),
        len(result.thumbnail_urls),
    )
    await _PRESENTERS[result.kind](message, result, keyboard)
