from __future__ import annotations

import asyncio
import logging
import sys
from datetime import UTC, datetime
from types import SimpleNamespace

import pytest
from telegram import Chat, Message, Update, User
from telegram.error import NetworkError

from linkfetch.core.error_handling import (
    build_update_context,
    install_global_exception_hooks,
    log_exception,
    register_asyncio_exception_handler,
)
from linkfetch.telegram.error_handling import (
    INTERNAL_ERROR_MESSAGE,
    handle_update_error,
    send_update_error,
)

from ._fakes import FakeBot


def _raise_value_error() -> None:
    raise ValueError


def _make_update(chat_id: int = 7, user_id: int = 42) -> Update:
    message = Message(
        message_id=1,
        date=datetime.now(UTC),
        chat=Chat(id=chat_id, type=Chat.PRIVATE),
        from_user=User(id=user_id, first_name="Alice", is_bot=False),
        text="hi",
    )
    return Update(update_id=99, message=message)


class _FailingBot(FakeBot):
    async def send_message(self, **kwargs: object) -> None:
        message = "network down"
        raise NetworkError(message)


def test_build_update_context_collects_ids() -> None:
    assert build_update_context(_make_update()) == {
        "update_id": 99,
        "user_id": 42,
        "chat_id": 7,
    }


def test_log_exception_renders_sorted_context(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("tests.log_exception")

    with caplog.at_level(logging.ERROR, logger=logger.name):
        log_exception(
            logger=logger,
            message="Send failed",
            error=RuntimeError("boom"),
            context={"url": "u", "key": "k"},
        )

    assert "Send failed | key='k', url='u'" in caplog.text


@pytest.mark.asyncio
async def test_handle_update_error_logs_and_notifies_chat(
    caplog: pytest.LogCaptureFixture,
) -> None:
    bot = FakeBot()
    context = SimpleNamespace(bot=bot, error=RuntimeError("boom"))

    with caplog.at_level(logging.ERROR):
        await handle_update_error(_make_update(chat_id=11), context)

    assert "Unhandled update handler error" in caplog.text
    assert bot.sent == [{"chat_id": 11, "text": INTERNAL_ERROR_MESSAGE}]


@pytest.mark.asyncio
async def test_send_update_error_ignores_non_updates() -> None:
    bot = FakeBot()

    await send_update_error(object(), SimpleNamespace(bot=bot))

    assert bot.sent == []


@pytest.mark.asyncio
async def test_send_update_error_suppresses_telegram_failures() -> None:
    await send_update_error(_make_update(), SimpleNamespace(bot=_FailingBot()))


@pytest.mark.asyncio
async def test_register_asyncio_exception_handler_logs_errors(
    caplog: pytest.LogCaptureFixture,
) -> None:
    loop = asyncio.get_running_loop()
    previous_handler = loop.get_exception_handler()
    logger = logging.getLogger("tests.asyncio_handler")
    register_asyncio_exception_handler(loop, logger=logger)
    handler = loop.get_exception_handler()
    assert handler is not None

    try:
        with caplog.at_level(logging.ERROR, logger=logger.name):
            try:
                _raise_value_error()
            except ValueError as exc:
                handler(loop, {"message": "loop context", "exception": exc})
    finally:
        loop.set_exception_handler(previous_handler)

    assert "loop context" in caplog.text


def test_global_hook_logs_uncaught_exceptions(
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    forwarded: list[type[BaseException]] = []
    monkeypatch.setattr(sys, "excepthook", lambda exc_type, *_: forwarded.append(exc_type))
    logger = logging.getLogger("test.global_hook")

    install_global_exception_hooks(logger=logger)
    with caplog.at_level(logging.ERROR, logger=logger.name):
        sys.excepthook(ValueError, ValueError("bad"), None)
        sys.excepthook(KeyboardInterrupt, KeyboardInterrupt(), None)

    assert "Unhandled exception at process boundary" in caplog.text
    assert forwarded == [KeyboardInterrupt]
