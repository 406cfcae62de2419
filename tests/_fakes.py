from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

from telegram.error import BadRequest

from linkfetch.core.exceptions import ExtractionError
from linkfetch.core.models import MediaResult, Platform, RemoteDaemonConfig
from linkfetch.services.aria2 import ConnectivityResult, DownloadResult


@dataclass(slots=True)
class FakeExtractor:
    name: str
    platforms: frozenset[Platform]
    result: MediaResult | None = None
    error: BaseException | None = None
    calls: list[str] = field(default_factory=list)

    def supports(self, platform: Platform) -> bool:
        return platform in self.platforms

    async def attempt(self, url: str, platform: Platform) -> MediaResult:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        if self.result is None:
            message = f"{self.name} found nothing"
            raise ExtractionError(message)
        return self.result


@dataclass(slots=True)
class FakeAria2Client:
    connectivity: ConnectivityResult = field(
        default_factory=lambda: ConnectivityResult(ok=True, version="1.37.0"),
    )
    download_results: list[DownloadResult] = field(default_factory=list)
    tested: list[RemoteDaemonConfig] = field(default_factory=list)
    downloads: list[tuple[str, str | None]] = field(default_factory=list)
    release: asyncio.Event | None = None

    async def test_connection(self, config: RemoteDaemonConfig) -> ConnectivityResult:
        self.tested.append(config)
        if self.release is not None:
            await self.release.wait()
        return self.connectivity

    async def add_download(
        self,
        direct_url: str,
        config: RemoteDaemonConfig,
        filename: str | None = None,
    ) -> DownloadResult:
        self.downloads.append((direct_url, filename))
        if self.download_results:
            return self.download_results.pop(0)
        return DownloadResult(ok=True, task_id=f"gid{len(self.downloads)}")


@dataclass(slots=True)
class FakeTelegramFile:
    file_path: str | None


@dataclass(slots=True)
class FakeBot:
    file_paths: dict[str, str | None] = field(default_factory=dict)
    sent: list[dict[str, Any]] = field(default_factory=list)

    async def get_file(self, file_id: str) -> FakeTelegramFile:
        if file_id not in self.file_paths:
            message = "Wrong file_id specified"
            raise BadRequest(message)
        return FakeTelegramFile(self.file_paths[file_id])

    async def send_message(self, **kwargs: Any) -> None:
        self.sent.append(kwargs)


@dataclass(slots=True)
class FakeCallbackQuery:
    data: str
    user_id: int = 42
    answers: list[str | None] = field(default_factory=list)
    edits: list[str] = field(default_factory=list)
    deleted: bool = False

    @property
    def from_user(self) -> SimpleNamespace:
        return SimpleNamespace(id=self.user_id, username="alice")

    async def answer(self, text: str | None = None) -> None:
        self.answers.append(text)

    async def edit_message_text(self, text: str, **_kwargs: Any) -> None:
        self.edits.append(text)

    async def delete_message(self) -> None:
        self.deleted = True


def make_callback_update(query: FakeCallbackQuery, chat_id: int = 7) -> SimpleNamespace:
    return SimpleNamespace(
        callback_query=query,
        effective_chat=SimpleNamespace(id=chat_id),
        effective_user=query.from_user,
    )


def make_context(state: object, bot: FakeBot | None = None) -> SimpleNamespace:
    return SimpleNamespace(
        bot=bot or FakeBot(),
        application=SimpleNamespace(bot_data={"linkfetch_state": state}),
        error=None,
    )


def make_message(text: str = "", message_id: int = 1) -> SimpleNamespace:
    return SimpleNamespace(
        text=text,
        message_id=message_id,
        reply_text=AsyncMock(),
        reply_video=AsyncMock(),
        reply_photo=AsyncMock(),
        reply_media_group=AsyncMock(),
    )
