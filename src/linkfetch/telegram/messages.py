"""Inbound text: setup answers first, otherwise links to resolve."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from linkfetch.core.error_handling import log_exception
from linkfetch.core.models import ExtractionFailure
from linkfetch.services.platforms import extract_supported_urls
from linkfetch.state.setup import AwaitingDirectory
from linkfetch.telegram.context import action_keyboard, get_state
from linkfetch.telegram.error_handling import (
    INTERNAL_ERROR_MESSAGE,
    MESSAGE_PROCESSING_EXCEPTIONS,
)
from linkfetch.telegram.presenter import present_media
from linkfetch.telegram.setup_replies import TESTING, render_setup_reply

if TYPE_CHECKING:
    from telegram import Message, Update
    from telegram.ext import ContextTypes

    from linkfetch.state.container import BotState

logger = logging.getLogger(__name__)


async def _handle_setup_answer(
    state: BotState,
    message: Message,
    user_id: int,
    username: str | None,
) -> None:
    if isinstance(state.setup.step_for(user_id), AwaitingDirectory):
        await message.reply_text(TESTING)

    reply = await state.setup.handle_text(user_id, message.text or "", username=username)
    rendered = render_setup_reply(reply)
    if rendered is not None:
        text, keyboard = rendered
        await message.reply_text(text, reply_markup=keyboard)


async def resolve_and_present(
    state: BotState,
    message: Message,
    user_id: int,
    url: str,
) -> None:
    """Resolve one link, cache the result and show it with an action button."""
    outcome = await state.resolver.resolve(url)
    if isinstance(outcome, ExtractionFailure):
        await message.reply_text(f"❌ {outcome.reason}", do_quote=True)
        return

    key = state.pending.put(user_id, outcome)
    configured = await state.user_store.ahas(user_id)
    keyboard = action_keyboard(key, batch=outcome.kind.is_batch, configured=configured)
    await present_media(message, outcome, keyboard)


async def handle_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle a plain text message."""
    message = update.effective_message
    user = update.effective_user
    if message is None or user is None or not message.text:
        return

    state = get_state(context)
    if state.setup.is_active(user.id):
        await _handle_setup_answer(state, message, user.id, user.username)
        return

    urls = extract_supported_urls(message.text)
    if not urls:
        return

    # One link at a time, in message order.
    for url in urls:
        try:
            await resolve_and_present(state, message, user.id, url)
        except MESSAGE_PROCESSING_EXCEPTIONS as exc:
            log_exception(
                logger=logger,
                message="Failed to process link",
                error=exc,
                context={"user_id": user.id, "url": url},
            )
            await message.reply_text(INTERNAL_ERROR_MESSAGE, do_quote=True)
