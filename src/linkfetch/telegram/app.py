"""Build the python-telegram-bot `Application` and register handlers."""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING

from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    MessageHandler,
    filters,
)

from linkfetch.state.media_groups import MediaGroupBuffer
from linkfetch.telegram.attachments import (
    flush_media_group,
    handle_document,
    handle_photo,
    handle_video,
)
from linkfetch.telegram.callbacks import handle_callback
from linkfetch.telegram.commands import (
    aria2_config_command,
    delete_config_command,
    help_command,
    set_aria2_command,
    start_command,
    test_aria2_command,
)
from linkfetch.telegram.context import attach_state
from linkfetch.telegram.error_handling import handle_update_error
from linkfetch.telegram.messages import handle_text

if TYPE_CHECKING:
    from linkfetch.state.container import BotState

COMMAND_HANDLERS = (
    ("start", start_command),
    ("help", help_command),
    ("set_aria2", set_aria2_command),
    ("aria2_config", aria2_config_command),
    ("delete_config", delete_config_command),
    ("test_aria2", test_aria2_command),
)


def register_handlers(application: Application) -> None:
    for name, callback in COMMAND_HANDLERS:
        application.add_handler(CommandHandler(name, callback))
    application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_text))
    application.add_handler(MessageHandler(filters.PHOTO, handle_photo))
    application.add_handler(MessageHandler(filters.VIDEO, handle_video))
    application.add_handler(MessageHandler(filters.Document.ALL, handle_document))
    application.add_handler(CallbackQueryHandler(handle_callback))
    application.add_error_handler(handle_update_error)


def build_application(state: BotState) -> Application:
    """Create the bot application wired to `state`."""
    builder = Application.builder().token(state.settings.bot_token)
    if state.settings.proxy_url:
        builder = builder.proxy(state.settings.proxy_url).get_updates_proxy(
            state.settings.proxy_url,
        )
    # Resolutions can take up to the parse timeout; other users must not wait.
    application = builder.concurrent_updates(True).build()

    state.media_groups = MediaGroupBuffer(
        partial(flush_media_group, application.bot, state),
    )
    attach_state(application, state)
    register_handlers(application)
    return application
