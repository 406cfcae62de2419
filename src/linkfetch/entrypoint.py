"""Entrypoint module for initializing services."""

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from linkfetch.core.config import load_settings
from linkfetch.state.container import build_state
from linkfetch.telegram.app import build_application
from linkfetch.telegram.commands import register_bot_commands

if TYPE_CHECKING:
    from telegram.ext import Application

    from linkfetch.state.container import BotState

logger = logging.getLogger(__name__)

_NOISY_LOGGERS = ("httpx", "httpcore", "telegram")


@dataclass(slots=True)
class _EntrypointState:
    application: "Application | None" = None
    bot_state: "BotState | None" = None


_STATE = _EntrypointState()


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s: %(message)s",
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


async def shutdown() -> None:
    """Best-effort shutdown of long-lived resources.

    This is safe to call multiple times.
    """
    application = _STATE.application
    if application is not None:
        if application.updater is not None and application.updater.running:
            with contextlib.suppress(Exception):
                await application.updater.stop()
        if application.running:
            with contextlib.suppress(Exception):
                await application.stop()
        with contextlib.suppress(Exception):
            await application.shutdown()
        _STATE.application = None

    if _STATE.bot_state is not None:
        with contextlib.suppress(Exception):
            await _STATE.bot_state.aclose()
        _STATE.bot_state = None


async def main() -> None:
    """Load settings, start polling and run until cancelled."""
    settings = load_settings()
    configure_logging(settings.log_level)

    _STATE.bot_state = build_state(settings)
    application = build_application(_STATE.bot_state)
    _STATE.application = application

    try:
        await application.initialize()
        await register_bot_commands(application.bot)
        await application.start()
        if application.updater is None:
            message = "Application was built without an updater"
            raise RuntimeError(message)
        await application.updater.start_polling()
        logger.info("Bot is running")
        await asyncio.Event().wait()
    finally:
        # Ctrl+C typically cancels the main task; shield shutdown so polling
        # stops before the event loop is closed.
        with contextlib.suppress(Exception):
            await asyncio.shield(shutdown())
