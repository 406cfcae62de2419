"""Inline button presses: setup navigation, config management and delivery."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from linkfetch.services.delivery import deliver_batch, deliver_single
from linkfetch.state.setup import AwaitingDirectory
from linkfetch.telegram.context import (
    CANCEL_DELETE,
    CANCEL_SETUP,
    CONFIRM_DELETE_CONFIG,
    DO_DELETE_CONFIG,
    DOWNLOAD_ALL_PREFIX,
    DOWNLOAD_PREFIX,
    SETUP_ARIA2,
    SKIP_DIR,
    SKIP_SECRET,
    TEST_ARIA2,
    get_state,
)
from linkfetch.telegram.setup_replies import TESTING, render_setup_reply

if TYPE_CHECKING:
    from telegram import CallbackQuery, Update
    from telegram.ext import ContextTypes

    from linkfetch.state.container import BotState

logger = logging.getLogger(__name__)

CONTENT_EXPIRED = "Content expired, please resolve the link again"
CONFIGURE_FIRST = "Please configure Aria2 first"


async def _send(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    text: str,
) -> None:
    """New message in the chat the button was pressed in."""
    if update.effective_chat is None:
        return
    await context.bot.send_message(chat_id=update.effective_chat.id, text=text)


async def _handle_setup_button(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    query: CallbackQuery,
    data: str,
) -> None:
    state = get_state(context)
    user = query.from_user

    if data == CANCEL_SETUP:
        state.setup.cancel(user.id)
        await query.answer("Cancelled")
        await query.edit_message_text("❌ Setup cancelled.")
        return

    if data == SKIP_SECRET:
        reply = state.setup.skip_secret(user.id)
        await query.answer()
        rendered = render_setup_reply(reply)
        if rendered is not None:
            text, keyboard = rendered
            await query.edit_message_text(text, reply_markup=keyboard)
        return

    await query.answer()
    if not isinstance(state.setup.step_for(user.id), AwaitingDirectory):
        return
    await _send(update, context, TESTING)
    reply = await state.setup.skip_directory(user.id, username=user.username)
    rendered = render_setup_reply(reply)
    if rendered is not None:
        await _send(update, context, rendered[0])


async def _handle_test(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    query: CallbackQuery,
) -> None:
    state = get_state(context)
    config = await state.user_store.aget(query.from_user.id)
    if config is None:
        await query.answer("Aria2 is not configured")
        return

    await query.answer("Testing...")
    result = await state.aria2.test_connection(config)
    if result.ok:
        await _send(update, context, f"✅ Connected! Aria2 version: {result.version}")
    else:
        await _send(update, context, f"❌ Connection failed: {result.reason}")


async def _handle_delete_buttons(
    context: ContextTypes.DEFAULT_TYPE,
    query: CallbackQuery,
    data: str,
) -> None:
    if data == CONFIRM_DELETE_CONFIG:
        await query.answer()
        await query.edit_message_text(
            "⚠️ Delete your Aria2 configuration?",
            reply_markup=InlineKeyboardMarkup(
                [
                    [
                        InlineKeyboardButton("✅ Delete", callback_data=DO_DELETE_CONFIG),
                        InlineKeyboardButton("❌ Cancel", callback_data=CANCEL_DELETE),
                    ],
                ],
            ),
        )
        return

    if data == DO_DELETE_CONFIG:
        await get_state(context).user_store.adelete(query.from_user.id)
        await query.answer("Deleted")
        await query.edit_message_text("✅ Aria2 configuration deleted.")
        return

    await query.answer("Cancelled")
    await query.delete_message()


async def handle_download(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    query: CallbackQuery,
    key: str,
    *,
    batch: bool,
) -> None:
    """Send a cached result to the user's daemon.

    Single deliveries keep the entry on failure so the button can be pressed
    again; batches drop it once every item has been attempted.
    """
    state: BotState = get_state(context)
    result = state.pending.get(key)
    if result is None:
        await query.answer(CONTENT_EXPIRED)
        return

    config = await state.user_store.aget(query.from_user.id)
    if config is None:
        await query.answer(CONFIGURE_FIRST)
        return

    if not batch:
        await query.answer("Sending to Aria2...")
        filename, outcome = await deliver_single(state.aria2, config, result)
        if outcome.ok:
            state.pending.delete(key)
            await _send(
                update,
                context,
                "✅ Sent to Aria2\n\n"
                f"📄 File name: {filename}\n"
                f"🆔 Task ID: {outcome.task_id}",
            )
        else:
            await _send(update, context, f"❌ Send failed: {outcome.reason}")
        return

    await query.answer("Sending batch to Aria2...")
    report = await deliver_batch(state.aria2, config, result)
    state.pending.delete(key)
    await _send(update, context, report.summary_text())


async def handle_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Route a callback query by its data string."""
    query = update.callback_query
    if query is None:
        return
    data = query.data
    if not data:
        await query.answer("Error")
        return

    if data in (CANCEL_SETUP, SKIP_SECRET, SKIP_DIR):
        await _handle_setup_button(update, context, query, data)
    elif data == SETUP_ARIA2:
        await query.answer()
        await _send(update, context, "Use /set_aria2 to start configuring Aria2.")
    elif data == TEST_ARIA2:
        await _handle_test(update, context, query)
    elif data in (CONFIRM_DELETE_CONFIG, DO_DELETE_CONFIG, CANCEL_DELETE):
        await _handle_delete_buttons(context, query, data)
    elif data.startswith(DOWNLOAD_ALL_PREFIX):
        key = data.removeprefix(DOWNLOAD_ALL_PREFIX)
        await handle_download(update, context, query, key, batch=True)
    elif data.startswith(DOWNLOAD_PREFIX):
        key = data.removeprefix(DOWNLOAD_PREFIX)
        await handle_download(update, context, query, key, batch=False)
    else:
        await query.answer("Unknown action")
