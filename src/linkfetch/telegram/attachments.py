"""Photos, videos and documents sent directly to the bot."""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING

from telegram import ReplyParameters

from linkfetch.core.exceptions import AttachmentUnavailableError
from linkfetch.core.models import MediaResult, Platform
from linkfetch.services.attachments import (
    extension_from_mime,
    generate_file_name,
    is_file_size_valid,
    is_video_mime,
    resolve_attachment_url,
)
from linkfetch.state.media_groups import (
    AttachmentKind,
    MediaGroupItem,
    PendingGroup,
    finalize_media_group,
)
from linkfetch.telegram.context import action_keyboard, get_state
from linkfetch.telegram.formatting import format_file_size
from linkfetch.telegram.presenter import count_text

if TYPE_CHECKING:
    from telegram import Bot, Message, Update
    from telegram.ext import ContextTypes

    from linkfetch.state.container import BotState

logger = logging.getLogger(__name__)

FILE_TOO_LARGE = (
    "❌ File is too large ({size}). Bots can only fetch files up to 20 MB."
)
URL_UNAVAILABLE = "❌ Could not get a download link for this file"


async def _reply_with_action(
    state: BotState,
    message: Message,
    user_id: int,
    *,
    url: str,
    title: str,
    is_video: bool,
) -> None:
    """Cache a single attachment and offer the delivery button."""
    result = MediaResult.build(
        source_url=url,
        platform=Platform.TELEGRAM,
        title=title,
        video_urls=[url] if is_video else [],
        image_urls=[] if is_video else [url],
    )
    key = state.pending.put(user_id, result)
    configured = await state.user_store.ahas(user_id)
    await message.reply_text(
        title,
        reply_markup=action_keyboard(key, batch=False, configured=configured),
        do_quote=True,
    )


async def _handle_single(
    context: ContextTypes.DEFAULT_TYPE,
    message: Message,
    user_id: int,
    *,
    file_id: str,
    file_size: int | None,
    title: str,
    is_video: bool,
) -> None:
    if not is_file_size_valid(file_size):
        await message.reply_text(
            FILE_TOO_LARGE.format(size=format_file_size(file_size)),
            do_quote=True,
        )
        return

    try:
        url = await resolve_attachment_url(context.bot, file_id)
    except AttachmentUnavailableError as exc:
        logger.info("Attachment %s unavailable: %s", file_id, exc)
        await message.reply_text(f"{URL_UNAVAILABLE}\n{exc}", do_quote=True)
        return

    state = get_state(context)
    await _reply_with_action(
        state,
        message,
        user_id,
        url=url,
        title=title,
        is_video=is_video,
    )


def _buffer_group_item(
    context: ContextTypes.DEFAULT_TYPE,
    message: Message,
    user_id: int,
    item: MediaGroupItem,
) -> None:
    state = get_state(context)
    if state.media_groups is None:
        error_message = "Media group buffer is not configured"
        raise RuntimeError(error_message)
    state.media_groups.on_item(
        str(message.media_group_id),
        item,
        requester_id=user_id,
        chat_id=message.chat_id,
        message_id=message.message_id,
    )


async def handle_photo(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Use the largest photo size."""
    message = update.effective_message
    user = update.effective_user
    if message is None or user is None or not message.photo:
        return

    photo = message.photo[-1]
    file_name = f"photo_{photo.file_unique_id}.jpg"
    if message.media_group_id:
        item = MediaGroupItem(photo.file_id, AttachmentKind.PHOTO, file_name)
        _buffer_group_item(context, message, user.id, item)
        return

    await _handle_single(
        context,
        message,
        user.id,
        file_id=photo.file_id,
        file_size=photo.file_size,
        title=file_name,
        is_video=False,
    )


async def handle_video(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    message = update.effective_message
    user = update.effective_user
    if message is None or user is None or message.video is None:
        return

    video = message.video
    file_name = video.file_name or f"video_{video.file_unique_id}.mp4"
    if message.media_group_id:
        item = MediaGroupItem(video.file_id, AttachmentKind.VIDEO, file_name)
        _buffer_group_item(context, message, user.id, item)
        return

    await _handle_single(
        context,
        message,
        user.id,
        file_id=video.file_id,
        file_size=video.file_size,
        title=file_name,
        is_video=True,
    )


async def handle_document(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Documents are never grouped; `video/*` counts as video, else image."""
    message = update.effective_message
    user = update.effective_user
    if message is None or user is None or message.document is None:
        return

    document = message.document
    file_name = document.file_name or generate_file_name(
        "file",
        extension_from_mime(document.mime_type),
        document.file_unique_id,
    )
    await _handle_single(
        context,
        message,
        user.id,
        file_id=document.file_id,
        file_size=document.file_size,
        title=file_name,
        is_video=is_video_mime(document.mime_type),
    )


async def flush_media_group(bot: Bot, state: BotState, group: PendingGroup) -> None:
    """Finalize a debounced group and reply to its latest message."""
    reply_to = ReplyParameters(message_id=group.message_id)
    result = await finalize_media_group(
        group.group_id,
        group.items,
        partial(resolve_attachment_url, bot),
    )
    if result is None:
        await bot.send_message(
            chat_id=group.chat_id,
            text=URL_UNAVAILABLE,
            reply_parameters=reply_to,
        )
        return

    key = state.pending.put(group.requester_id, result)
    configured = await state.user_store.ahas(group.requester_id)
    await bot.send_message(
        chat_id=group.chat_id,
        text=count_text(result),
        reply_parameters=reply_to,
        reply_markup=action_keyboard(key, batch=result.kind.is_batch, configured=configured),
    )
