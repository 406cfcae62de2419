"""Centralized error handling for Telegram update handlers."""

from __future__ import annotations

import logging
from contextlib import suppress
from typing import TYPE_CHECKING

import httpx
from telegram import Update
from telegram.error import TelegramError

from linkfetch.core.error_handling import COMMON_HANDLER_EXCEPTIONS, log_update_error

if TYPE_CHECKING:
    from telegram.ext import ContextTypes

LOGGER = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An error occurred, please try again later."
MESSAGE_PROCESSING_EXCEPTIONS = (
    *COMMON_HANDLER_EXCEPTIONS,
    TelegramError,
    httpx.HTTPError,
)


async def send_update_error(
    update: object,
    context: ContextTypes.DEFAULT_TYPE,
    *,
    description: str = INTERNAL_ERROR_MESSAGE,
) -> None:
    """Tell the user something went wrong, when there is a chat to reply to."""
    if not isinstance(update, Update) or update.effective_chat is None:
        return
    with suppress(TelegramError):
        await context.bot.send_message(
            chat_id=update.effective_chat.id,
            text=description,
        )


async def handle_update_error(
    update: object,
    context: ContextTypes.DEFAULT_TYPE,
) -> None:
    """Application-level error handler registered with PTB."""
    log_update_error(logger=LOGGER, update=update, error=context.error)
    await send_update_error(update, context)
