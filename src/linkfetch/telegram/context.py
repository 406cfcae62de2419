"""Access to the shared `BotState` from PTB callbacks."""

from __future__ import annotations

from typing import TYPE_CHECKING

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

if TYPE_CHECKING:
    from telegram.ext import Application, ContextTypes

    from linkfetch.state.container import BotState

STATE_KEY = "linkfetch_state"

# Callback data
CANCEL_SETUP = "cancel_setup"
SKIP_SECRET = "skip_secret"
SKIP_DIR = "skip_dir"
SETUP_ARIA2 = "setup_aria2"
TEST_ARIA2 = "test_aria2"
CONFIRM_DELETE_CONFIG = "confirm_delete_config"
DO_DELETE_CONFIG = "do_delete_config"
CANCEL_DELETE = "cancel_delete"
DOWNLOAD_PREFIX = "download:"
DOWNLOAD_ALL_PREFIX = "download_all:"


def attach_state(application: Application, state: BotState) -> None:
    application.bot_data[STATE_KEY] = state


def get_state(context: ContextTypes.DEFAULT_TYPE) -> BotState:
    """Return the coordinator stored on the application."""
    return context.application.bot_data[STATE_KEY]


def cancel_setup_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [[InlineKeyboardButton("❌ Cancel", callback_data=CANCEL_SETUP)]],
    )


def skip_keyboard(skip_label: str, skip_data: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [
            [InlineKeyboardButton(skip_label, callback_data=skip_data)],
            [InlineKeyboardButton("❌ Cancel", callback_data=CANCEL_SETUP)],
        ],
    )


def action_keyboard(key: str, *, batch: bool, configured: bool) -> InlineKeyboardMarkup:
    """Delivery button, or a setup shortcut when no daemon is configured."""
    if not configured:
        button = InlineKeyboardButton("Configure Aria2", callback_data=SETUP_ARIA2)
    else:
        prefix = DOWNLOAD_ALL_PREFIX if batch else DOWNLOAD_PREFIX
        button = InlineKeyboardButton("Send to Aria2", callback_data=f"{prefix}{key}")
    return InlineKeyboardMarkup([[button]])
