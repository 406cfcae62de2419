"""Centralized exception logging and process-level hooks."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Mapping
    from types import TracebackType

LOGGER = logging.getLogger(__name__)
COMMON_HANDLER_EXCEPTIONS = (
    AssertionError,
    AttributeError,
    LookupError,
    OSError,
    RuntimeError,
    TimeoutError,
    TypeError,
    ValueError,
)


def _format_context(context: Mapping[str, object]) -> str:
    """Render structured context as a stable key-value string."""
    return ", ".join(f"{key}={context[key]!r}" for key in sorted(context))


def log_exception(
    *,
    logger: logging.Logger,
    message: str,
    error: BaseException,
    context: Mapping[str, object] | None = None,
) -> None:
    """Write a structured exception log entry."""
    if context:
        logger.error(
            "%s | %s",
            message,
            _format_context(context),
            exc_info=error,
        )
        return
    logger.error(message, exc_info=error)


def register_asyncio_exception_handler(
    loop: asyncio.AbstractEventLoop,
    *,
    logger: logging.Logger | None = None,
) -> None:
    """Install a loop-level asyncio exception handler."""
    target_logger = logger or LOGGER

    def _handle_exception(
        _loop: asyncio.AbstractEventLoop,
        context: dict[str, Any],
    ) -> None:
        error = context.get("exception")
        message = str(context.get("message") or "Unhandled asyncio exception")
        if isinstance(error, BaseException):
            log_exception(
                logger=target_logger,
                message=message,
                error=error,
                context={key: value for key, value in context.items() if key != "exception"},
            )
            return
        target_logger.error("%s | %s", message, _format_context(context))

    loop.set_exception_handler(_handle_exception)


def install_global_exception_hooks(*, logger: logging.Logger | None = None) -> None:
    """Route uncaught main-thread exceptions to the log."""
    target_logger = logger or LOGGER
    previous_excepthook = sys.excepthook

    def _sys_excepthook(
        exc_type: type[BaseException],
        exc_value: BaseException,
        exc_traceback: TracebackType | None,
    ) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            previous_excepthook(exc_type, exc_value, exc_traceback)
            return
        target_logger.error(
            "Unhandled exception at process boundary",
            exc_info=(exc_type, exc_value, exc_traceback),
        )

    sys.excepthook = _sys_excepthook


def build_update_context(update: object) -> dict[str, object]:
    """Build structured context fields for update-processing logs."""
    user = getattr(update, "effective_user", None)
    chat = getattr(update, "effective_chat", None)
    return {
        "update_id": getattr(update, "update_id", None),
        "user_id": getattr(user, "id", None),
        "chat_id": getattr(chat, "id", None),
    }


def log_update_error(
    *,
    logger: logging.Logger,
    update: object,
    error: BaseException | None,
) -> None:
    """Log an uncaught update-handler exception with update metadata."""
    context = build_update_context(update)
    if isinstance(error, BaseException):
        log_exception(
            logger=logger,
            message="Unhandled update handler error",
            error=error,
            context=context,
        )
        return
    logger.error("Unhandled update handler error | %s", _format_context(context))
