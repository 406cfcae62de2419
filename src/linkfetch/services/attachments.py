"""Chat attachment helpers: file URL lookup, size checks and naming."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from telegram.error import TelegramError

from linkfetch.core.config import MAX_TELEGRAM_FILE_SIZE
from linkfetch.core.exceptions import AttachmentUnavailableError

if TYPE_CHECKING:
    from telegram import Bot

logger = logging.getLogger(__name__)

_MIME_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "video/mp4": "mp4",
    "video/quicktime": "mov",
    "video/x-msvideo": "avi",
    "video/webm": "webm",
    "audio/mpeg": "mp3",
    "audio/ogg": "ogg",
    "audio/wav": "wav",
    "application/pdf": "pdf",
    "application/zip": "zip",
    "application/x-rar-compressed": "rar",
    "application/x-7z-compressed": "7z",
    "text/plain": "txt",
    "application/json": "json",
}

_UNSAFE_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')


async def resolve_attachment_url(bot: Bot, file_id: str) -> str:
    """Turn a Telegram file id into a directly downloadable URL.

    Raises:
        AttachmentUnavailableError: when Telegram refuses the lookup or the
            file has no download path (e.g. above the bot API size ceiling).

    """
    try:
        telegram_file = await bot.get_file(file_id)
    except TelegramError as exc:
        message = str(exc) or "Failed to get file"
        raise AttachmentUnavailableError(message) from exc

    if not telegram_file.file_path:
        message = "File path not available"
        raise AttachmentUnavailableError(message)
    return telegram_file.file_path


def is_file_size_valid(file_size: int | None) -> bool:
    """Unknown sizes are accepted; Telegram will refuse them later if needed."""
    if file_size is None:
        return True
    return file_size <= MAX_TELEGRAM_FILE_SIZE


def extension_from_mime(mime_type: str | None) -> str:
    """Map a MIME type to a file extension, defaulting to `bin`."""
    if not mime_type:
        return "bin"
    if mime_type in _MIME_EXTENSIONS:
        return _MIME_EXTENSIONS[mime_type]
    _, _, subtype = mime_type.partition("/")
    return subtype or "bin"


def generate_file_name(base_name: str, extension: str, unique_id: str) -> str:
    """Build a filesystem-safe name for an attachment without one."""
    safe_name = _UNSAFE_FILENAME_CHARS.sub("_", base_name)[:100]
    return f"{safe_name}_{unique_id}.{extension}"


def is_video_mime(mime_type: str | None) -> bool:
    """Documents are treated as videos only for `video/*` MIME types."""
    return bool(mime_type and mime_type.startswith("video/"))
