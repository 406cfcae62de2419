"""Platform detection and link extraction for inbound chat text."""

from __future__ import annotations

import re

from linkfetch.core.models import Platform

# Ordered: the first platform with a matching pattern wins.
_PLATFORM_PATTERNS: tuple[tuple[Platform, tuple[re.Pattern[str], ...]], ...] = (
    (
        Platform.TWITTER,
        (
            re.compile(r"https?://(?:www\.|mobile\.)?(?:twitter|x)\.com/\w+/status/\d+", re.IGNORECASE),
            re.compile(r"https?://t\.co/\w+", re.IGNORECASE),
        ),
    ),
    (
        Platform.FACEBOOK,
        (
            re.compile(r"https?://(?:www\.|m\.)?facebook\.com/.*/videos/", re.IGNORECASE),
            re.compile(r"https?://(?:www\.|m\.)?facebook\.com/watch", re.IGNORECASE),
            re.compile(r"https?://fb\.watch/\w+", re.IGNORECASE),
        ),
    ),
    (
        Platform.TIKTOK,
        (re.compile(r"https?://(?:www\.|vm\.|vt\.)?tiktok\.com/", re.IGNORECASE),),
    ),
    (
        Platform.INSTAGRAM,
        (
            re.compile(
                r"https?://(?:www\.)?instagram\.com/(?:p|reel|reels|tv)/[\w-]+",
                re.IGNORECASE,
            ),
        ),
    ),
    (
        Platform.YOUTUBE,
        (
            re.compile(r"https?://(?:www\.)?(?:youtube\.com/watch\?v=|youtu\.be/)", re.IGNORECASE),
            re.compile(r"https?://(?:www\.)?youtube\.com/shorts/", re.IGNORECASE),
        ),
    ),
)

_URL_RE = re.compile(r"https?://[^\s<>\"'{}|\\^`\[\]]+", re.IGNORECASE)
_TRAILING_PUNCTUATION = ".,;:!?)"

_PLATFORM_NAMES = {
    Platform.TWITTER: "X (Twitter)",
    Platform.FACEBOOK: "Facebook",
    Platform.TIKTOK: "TikTok",
    Platform.INSTAGRAM: "Instagram",
    Platform.YOUTUBE: "YouTube",
    Platform.TELEGRAM: "Telegram",
    Platform.UNKNOWN: "Unknown",
}

_PLATFORM_EMOJIS = {
    Platform.TWITTER: "🐦",
    Platform.FACEBOOK: "📘",
    Platform.TIKTOK: "🎵",
    Platform.INSTAGRAM: "📸",
    Platform.YOUTUBE: "📺",
    Platform.TELEGRAM: "✈️",
    Platform.UNKNOWN: "🔗",
}


def detect_platform(url: str) -> Platform:
    """Classify a URL into a supported platform, or `Platform.UNKNOWN`."""
    for platform, patterns in _PLATFORM_PATTERNS:
        if any(pattern.search(url) for pattern in patterns):
            return platform
    return Platform.UNKNOWN


def is_supported_url(url: str) -> bool:
    """Return True when the URL belongs to a known platform."""
    return detect_platform(url) is not Platform.UNKNOWN


def extract_candidate_urls(text: str) -> list[str]:
    """Find every http(s) URL in free text, in document order."""
    urls: list[str] = []
    for match in _URL_RE.finditer(text or ""):
        candidate = match.group(0).rstrip(_TRAILING_PUNCTUATION)
        if candidate:
            urls.append(candidate)
    return urls


def filter_supported(urls: list[str]) -> list[str]:
    """Keep only URLs whose platform is recognised."""
    return [url for url in urls if is_supported_url(url)]


def extract_supported_urls(text: str) -> list[str]:
    """Extract the actionable links of a chat message."""
    return filter_supported(extract_candidate_urls(text))


def platform_name(platform: Platform) -> str:
    """Human-readable platform name."""
    return _PLATFORM_NAMES[platform]


def platform_emoji(platform: Platform) -> str:
    """Emoji used when presenting a platform."""
    return _PLATFORM_EMOJIS[platform]
