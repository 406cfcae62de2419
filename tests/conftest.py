from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import httpx
import pytest

from linkfetch.core.config import Settings, clear_config_cache
from linkfetch.core.models import MediaResult, Platform
from linkfetch.services.resolver import MediaResolver
from linkfetch.services.user_config import UserConfigStore
from linkfetch.state.container import BotState
from linkfetch.state.pending import PendingMediaCache
from linkfetch.state.setup import SetupSessionManager

from ._fakes import FakeAria2Client


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _fresh_config_cache() -> Iterator[None]:
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(bot_token="123:abc", data_dir=tmp_path / "data")


@pytest.fixture
def mock_client_factory() -> Callable[
    [Callable[[httpx.Request], httpx.Response]],
    httpx.AsyncClient,
]:
    def _factory(
        handler: Callable[[httpx.Request], httpx.Response],
    ) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _factory


@pytest.fixture
def video_result() -> MediaResult:
    return MediaResult.build(
        source_url="https://www.youtube.com/watch?v=abc",
        platform=Platform.YOUTUBE,
        title="My Video",
        video_urls=["https://cdn.example.com/video.mp4"],
    )


@pytest.fixture
def aria2_client() -> FakeAria2Client:
    return FakeAria2Client()


@pytest.fixture
def bot_state(settings: Settings, aria2_client: FakeAria2Client) -> BotState:
    user_store = UserConfigStore(settings.users_file)
    return BotState(
        settings=settings,
        httpx_client=httpx.AsyncClient(),
        resolver=MediaResolver([]),
        pending=PendingMediaCache(),
        user_store=user_store,
        aria2=aria2_client,  # type: ignore[arg-type]
        setup=SetupSessionManager(user_store, aria2_client),  # type: ignore[arg-type]
    )
