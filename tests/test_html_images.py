from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from linkfetch.core.exceptions import ExtractionError
from linkfetch.core.models import MediaKind, Platform
from linkfetch.services.extractors.html_images import (
    HtmlImageExtractor,
    extract_instagram_images,
    extract_page_title,
    extract_twitter_images,
)

ClientFactory = Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]

TWITTER_PAGE = """
<html><head>
<meta property="og:image" content="https://pbs.twimg.com/media/ABC?format=jpg&amp;name=small">
<meta property="og:title" content="Alice on X: &quot;hello&quot;">
<meta name="twitter:image" content="https://pbs.twimg.com/profile_images/me.jpg">
</head><body>
<img src="https://pbs.twimg.com/media/ABC">
<script>{"media_url_https":"https:\\/\\/pbs.twimg.com\\/media\\/DEF.jpg"}</script>
</body></html>
"""

INSTAGRAM_PAGE = """
<html><head>
<meta property="og:image" content="https://scontent.cdninstagram.com/v/t51.2885-15/1.jpg?stp=a&amp;oh=b">
<title>Instagram post</title>
</head><body>
<img src="https://scontent.fbcdn.net/v/t51.29350-15/2.jpg">
<img src="https://scontent.cdninstagram.com/static/profile.jpg">
</body></html>
"""


def test_twitter_images_are_deduplicated_and_enlarged() -> None:
    images = extract_twitter_images(TWITTER_PAGE)

    assert images == [
        "https://pbs.twimg.com/media/ABC?format=jpg&name=large",
        "https://pbs.twimg.com/media/DEF.jpg?format=jpg&name=large",
    ]


def test_instagram_images_keep_only_post_media() -> None:
    images = extract_instagram_images(INSTAGRAM_PAGE)

    assert images == [
        "https://scontent.cdninstagram.com/v/t51.2885-15/1.jpg?stp=a&oh=b",
        "https://scontent.fbcdn.net/v/t51.29350-15/2.jpg",
    ]


def test_title_prefers_og_title_then_page_title() -> None:
    assert extract_page_title(TWITTER_PAGE, Platform.TWITTER) == 'Alice on X: "hello"'
    assert extract_page_title(INSTAGRAM_PAGE, Platform.INSTAGRAM) == "Instagram post"
    assert extract_page_title("<html></html>", Platform.INSTAGRAM) == "instagram image"


@pytest.mark.asyncio
async def test_attempt_scrapes_instagram_page(mock_client_factory: ClientFactory) -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        assert "Mozilla" in request.headers["User-Agent"]
        return httpx.Response(200, text=INSTAGRAM_PAGE)

    async with mock_client_factory(_handler) as client:
        result = await HtmlImageExtractor(client).attempt(
            "https://www.instagram.com/p/abc/",
            Platform.INSTAGRAM,
        )

    assert result.kind is MediaKind.MULTI_IMAGE
    assert result.thumbnail == result.image_urls[0]


@pytest.mark.asyncio
async def test_page_without_images_is_an_error(mock_client_factory: ClientFactory) -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html><title>Nothing</title></html>")

    async with mock_client_factory(_handler) as client:
        with pytest.raises(ExtractionError, match="No images found"):
            await HtmlImageExtractor(client).attempt(
                "https://x.com/alice/status/1",
                Platform.TWITTER,
            )


@pytest.mark.asyncio
async def test_http_error_status_is_an_error(mock_client_factory: ClientFactory) -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    async with mock_client_factory(_handler) as client:
        with pytest.raises(ExtractionError, match="HTTP 404"):
            await HtmlImageExtractor(client).attempt(
                "https://x.com/alice/status/1",
                Platform.TWITTER,
            )


def test_only_twitter_and_instagram_are_supported() -> None:
    extractor = HtmlImageExtractor(httpx.AsyncClient())

    assert extractor.supports(Platform.INSTAGRAM)
    assert not extractor.supports(Platform.TIKTOK)
