"""Image extraction by scraping known patterns out of post HTML."""

from __future__ import annotations

import html
import logging
import re

import httpx

from linkfetch.core.config import BROWSER_HEADERS
from linkfetch.core.exceptions import ExtractionError
from linkfetch.core.models import MediaResult, Platform
from linkfetch.services.extractors.vxtwitter import to_large_image_url

logger = logging.getLogger(__name__)

_SUPPORTED_PLATFORMS = frozenset({Platform.TWITTER, Platform.INSTAGRAM})

_OG_IMAGE_RE = re.compile(
    r'<meta\s+(?:property|name)="og:image"\s+content="([^"]+)"',
    re.IGNORECASE,
)
_TWITTER_IMAGE_RE = re.compile(
    r'<meta\s+(?:property|name)="twitter:image"\s+content="([^"]+)"',
    re.IGNORECASE,
)
_TWIMG_DIRECT_RE = re.compile(r"https?://pbs\.twimg\.com/media/[A-Za-z0-9_-]+", re.IGNORECASE)
_TWIMG_JSON_RE = re.compile(
    r'"media_url_https"\s*:\s*"(https:[^"]+pbs\.twimg\.com\\?/media\\?/[^"]+)"',
    re.IGNORECASE,
)
_TWIMG_DATA_ATTR_RE = re.compile(
    r'data-image-url="([^"]+pbs\.twimg\.com/media/[^"]+)"',
    re.IGNORECASE,
)

_INSTAGRAM_DISPLAY_URL_RE = re.compile(r'"display_url"\s*:\s*"([^"]+)"', re.IGNORECASE)
_INSTAGRAM_SRC_RE = re.compile(
    r'src="(https?://[^"]*(?:cdninstagram|fbcdn)[^"]+)"',
    re.IGNORECASE,
)
_INSTAGRAM_CDN_HOSTS = ("cdninstagram.com", "fbcdn.net")
_INSTAGRAM_PATH_MARKERS = ("/t51.", "/e35/")

_OG_TITLE_RE = re.compile(
    r'<meta\s+(?:property|name)="og:title"\s+content="([^"]+)"',
    re.IGNORECASE,
)
_TWITTER_TITLE_RE = re.compile(
    r'<meta\s+(?:property|name)="twitter:title"\s+content="([^"]+)"',
    re.IGNORECASE,
)
_PAGE_TITLE_RE = re.compile(r"<title>([^<]+)</title>", re.IGNORECASE)

_TWIMG_MEDIA_MARKER = "pbs.twimg.com/media/"


def _unescape_json_url(value: str) -> str:
    return value.replace("\\u0026", "&").replace("\\/", "/")


def extract_twitter_images(page_html: str) -> list[str]:
    """Collect large-size post images from X (Twitter) page HTML."""
    images: dict[str, None] = {}

    for pattern in (_OG_IMAGE_RE, _TWITTER_IMAGE_RE):
        for match in pattern.finditer(page_html):
            if _TWIMG_MEDIA_MARKER in match.group(1):
                images[to_large_image_url(match.group(1))] = None

    for match in _TWIMG_DIRECT_RE.finditer(page_html):
        images[to_large_image_url(match.group(0))] = None

    for match in _TWIMG_JSON_RE.finditer(page_html):
        images[to_large_image_url(_unescape_json_url(match.group(1)))] = None

    for match in _TWIMG_DATA_ATTR_RE.finditer(page_html):
        images[to_large_image_url(match.group(1))] = None

    return list(images)


def extract_instagram_images(page_html: str) -> list[str]:
    """Collect CDN image URLs from Instagram page HTML."""
    images: dict[str, None] = {}

    for match in _OG_IMAGE_RE.finditer(page_html):
        url = match.group(1)
        if any(host in url for host in (*_INSTAGRAM_CDN_HOSTS, "instagram.com")):
            images[html.unescape(url)] = None

    for match in _INSTAGRAM_DISPLAY_URL_RE.finditer(page_html):
        url = _unescape_json_url(match.group(1))
        if any(host in url for host in _INSTAGRAM_CDN_HOSTS):
            images[url] = None

    for match in _INSTAGRAM_SRC_RE.finditer(page_html):
        url = html.unescape(match.group(1))
        if any(marker in url for marker in _INSTAGRAM_PATH_MARKERS):
            images[url] = None

    return list(images)


def extract_page_title(page_html: str, platform: Platform) -> str:
    """Pick the og:title, twitter:title or <title>, in that order."""
    for pattern in (_OG_TITLE_RE, _TWITTER_TITLE_RE, _PAGE_TITLE_RE):
        match = pattern.search(page_html)
        if match:
            return html.unescape(match.group(1)).strip()
    return f"{platform.value} image"


class HtmlImageExtractor:
    """Heuristic page scraper for X (Twitter) and Instagram images."""

    name = "html-images"

    def __init__(self, httpx_client: httpx.AsyncClient) -> None:
        self.httpx_client = httpx_client

    def supports(self, platform: Platform) -> bool:
        return platform in _SUPPORTED_PLATFORMS

    async def fetch_page(self, url: str) -> str:
        """Fetch the post page with browser-like headers."""
        try:
            response = await self.httpx_client.get(
                url,
                headers=BROWSER_HEADERS,
                follow_redirects=True,
            )
        except httpx.HTTPError as exc:
            message = f"Image parsing failed: {exc}"
            raise ExtractionError(message) from exc

        if not response.is_success:
            message = f"Image parsing failed: HTTP {response.status_code}"
            raise ExtractionError(message)
        return response.text

    async def attempt(self, url: str, platform: Platform) -> MediaResult:
        if platform not in _SUPPORTED_PLATFORMS:
            message = "Image parsing is not supported for this platform"
            raise ExtractionError(message)

        page_html = await self.fetch_page(url)
        if platform is Platform.TWITTER:
            images = extract_twitter_images(page_html)
        else:
            images = extract_instagram_images(page_html)

        if not images:
            message = "No images found"
            raise ExtractionError(message)

        logger.info("Scraped %d image(s) from %s page", len(images), platform.value)
        return MediaResult.build(
            source_url=url,
            platform=platform,
            title=extract_page_title(page_html, platform),
            image_urls=images,
            thumbnail=images[0],
        )
