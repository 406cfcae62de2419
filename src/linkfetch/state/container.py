"""Coordinator that owns every ephemeral store and shared service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx

from linkfetch.core.config import HttpxClientOptions, get_or_create_httpx_client
from linkfetch.services.aria2 import Aria2Client
from linkfetch.services.extractors import (
    HtmlImageExtractor,
    VxTwitterExtractor,
    YtDlpExtractor,
    YtDlpOptions,
)
from linkfetch.services.resolver import MediaResolver
from linkfetch.services.user_config import UserConfigStore
from linkfetch.state.pending import PendingMediaCache
from linkfetch.state.setup import SetupSessionManager

if TYPE_CHECKING:
    from linkfetch.core.config import Settings
    from linkfetch.state.media_groups import MediaGroupBuffer

logger = logging.getLogger(__name__)

_httpx_client_holder: list[httpx.AsyncClient | None] = []


@dataclass(slots=True)
class BotState:
    """Everything the chat handlers share.

    Handlers receive this object through the application's `bot_data`
    instead of reaching for module-level globals.
    """

    settings: Settings
    httpx_client: httpx.AsyncClient
    resolver: MediaResolver
    pending: PendingMediaCache
    user_store: UserConfigStore
    aria2: Aria2Client
    setup: SetupSessionManager
    media_groups: MediaGroupBuffer | None = None

    async def aclose(self) -> None:
        """Release network resources."""
        if not self.httpx_client.is_closed:
            await self.httpx_client.aclose()


def build_resolver(settings: Settings, httpx_client: httpx.AsyncClient) -> MediaResolver:
    """Extractors in priority order: yt-dlp, vxtwitter API, HTML scraping."""
    ytdlp_options = YtDlpOptions(
        executable=settings.ytdlp_path,
        cookies_file=settings.ytdlp_cookies,
        timeout_seconds=settings.parse_timeout_seconds,
    )
    return MediaResolver(
        [
            YtDlpExtractor(ytdlp_options),
            VxTwitterExtractor(httpx_client),
            HtmlImageExtractor(httpx_client),
        ],
    )


def build_state(
    settings: Settings,
    *,
    httpx_client: httpx.AsyncClient | None = None,
) -> BotState:
    """Wire the services and stores for one bot process."""
    if httpx_client is None:
        httpx_client = get_or_create_httpx_client(
            _httpx_client_holder,
            options=HttpxClientOptions(proxy_url=settings.proxy_url),
        )

    user_store = UserConfigStore(settings.users_file)
    aria2 = Aria2Client(httpx_client)
    logger.info("User store at %s", settings.users_file)
    return BotState(
        settings=settings,
        httpx_client=httpx_client,
        resolver=build_resolver(settings, httpx_client),
        pending=PendingMediaCache(),
        user_store=user_store,
        aria2=aria2,
        setup=SetupSessionManager(user_store, aria2),
    )
