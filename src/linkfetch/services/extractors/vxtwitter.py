"""X (Twitter) post media via the vxtwitter JSON API."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

import httpx

from linkfetch.core.config import API_USER_AGENT, TITLE_PREVIEW_LENGTH
from linkfetch.core.exceptions import ExtractionError
from linkfetch.core.models import MediaResult, Platform

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

VXTWITTER_API_URL = "https://api.vxtwitter.com/Twitter/status/{tweet_id}"

_TWEET_ID_RE = re.compile(r"(?:twitter\.com|x\.com)/[^/]+/status/(\d+)", re.IGNORECASE)
_TWIMG_MEDIA_MARKER = "pbs.twimg.com/media/"
_LARGE_JPG_QUERY = "?format=jpg&name=large"
_VIDEO_TYPES = frozenset({"video", "gif"})
_WHITESPACE_RE = re.compile(r"\s+")


def extract_tweet_id(url: str) -> str | None:
    """Return the numeric status id of a post URL."""
    match = _TWEET_ID_RE.search(url)
    return match.group(1) if match else None


def to_large_image_url(url: str) -> str:
    """Rewrite a twimg media URL to its large JPEG rendition."""
    if _TWIMG_MEDIA_MARKER not in url:
        return url
    return url.split("?", 1)[0] + _LARGE_JPG_QUERY


def build_post_title(payload: dict[str, Any]) -> str:
    """Author name plus the first characters of the post text."""
    text = _WHITESPACE_RE.sub(" ", str(payload.get("text") or "")).strip()
    if not text:
        return f"@{payload.get('user_screen_name') or 'unknown'}'s post"

    preview = text[:TITLE_PREVIEW_LENGTH]
    if len(text) > TITLE_PREVIEW_LENGTH:
        preview += "..."
    return f"{payload.get('user_name') or ''}: {preview}"


def _urls(items: Iterable[dict[str, Any]], key: str) -> list[str]:
    return [str(item[key]) for item in items if item.get(key)]


def build_media_result(url: str, payload: dict[str, Any]) -> MediaResult:
    """Partition API media into videos and images and normalize them."""
    if not payload.get("hasMedia") or not payload.get("mediaURLs"):
        message = "This post has no media"
        raise ExtractionError(message)

    media = [item for item in payload.get("media_extended") or [] if isinstance(item, dict)]
    video_items = [item for item in media if item.get("type") in _VIDEO_TYPES]
    image_items = [item for item in media if item.get("type") == "image"]

    video_urls = _urls(video_items, "url")
    image_urls = [to_large_image_url(image_url) for image_url in _urls(image_items, "url")]
    if not video_urls and not image_urls:
        message = "Could not parse the post media"
        raise ExtractionError(message)

    title = build_post_title(payload)
    if not video_urls:
        return MediaResult.build(
            source_url=url,
            platform=Platform.TWITTER,
            title=title,
            image_urls=image_urls,
            thumbnail=image_urls[0],
        )

    first_video = video_items[0]
    duration_ms = first_video.get("duration_millis")
    size = first_video.get("size") or {}
    resolution = None
    if size.get("width") and size.get("height"):
        resolution = f"{size['width']}x{size['height']}"

    return MediaResult.build(
        source_url=url,
        platform=Platform.TWITTER,
        title=title,
        video_urls=video_urls,
        image_urls=image_urls,
        thumbnail_urls=tuple(_urls(video_items, "thumbnail_url")),
        thumbnail=first_video.get("thumbnail_url"),
        duration=duration_ms // 1000 if duration_ms else None,
        resolution=resolution,
    )


class VxTwitterExtractor:
    """Structured API strategy for X (Twitter) posts."""

    name = "vxtwitter"

    def __init__(self, httpx_client: httpx.AsyncClient) -> None:
        self.httpx_client = httpx_client

    def supports(self, platform: Platform) -> bool:
        return platform is Platform.TWITTER

    async def fetch_post(self, tweet_id: str) -> dict[str, Any]:
        """Call the API once and return the decoded post payload."""
        try:
            response = await self.httpx_client.get(
                VXTWITTER_API_URL.format(tweet_id=tweet_id),
                headers={"User-Agent": API_USER_AGENT},
            )
        except httpx.HTTPError as exc:
            message = f"X (Twitter) request failed: {exc}"
            raise ExtractionError(message) from exc

        if not response.is_success:
            message = f"X (Twitter) API request failed: {response.status_code}"
            raise ExtractionError(message)

        try:
            payload = response.json()
        except ValueError as exc:
            message = "X (Twitter) API returned non-JSON response"
            raise ExtractionError(message) from exc

        if not isinstance(payload, dict):
            message = "X (Twitter) API returned an unexpected payload"
            raise ExtractionError(message)
        return payload

    async def attempt(self, url: str, platform: Platform) -> MediaResult:
        del platform
        tweet_id = extract_tweet_id(url)
        if not tweet_id:
            message = "Could not extract the post id"
            raise ExtractionError(message)

        payload = await self.fetch_post(tweet_id)
        result = build_media_result(url, payload)
        logger.info(
            "vxtwitter resolved %s kind=%s videos=%d images=%d",
            tweet_id,
            result.kind.value,
            len(result.video_urls),
            len(result.image_urls),
        )
        return result
