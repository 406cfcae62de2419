"""Data models for linkfetch."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

OptionValue = str | int | float | bool


class Platform(StrEnum):
    """Source platform of a link or attachment."""

    TWITTER = "twitter"
    FACEBOOK = "facebook"
    TIKTOK = "tiktok"
    INSTAGRAM = "instagram"
    YOUTUBE = "youtube"
    TELEGRAM = "telegram"
    UNKNOWN = "unknown"


class MediaKind(StrEnum):
    """Shape of a resolved media result."""

    SINGLE_VIDEO = "video"
    MULTI_VIDEO = "videos"
    SINGLE_IMAGE = "image"
    MULTI_IMAGE = "images"
    MIXED = "mixed"

    @property
    def is_batch(self) -> bool:
        """Whether delivery should treat the result as several items."""
        return self in (MediaKind.MULTI_VIDEO, MediaKind.MULTI_IMAGE, MediaKind.MIXED)


def classify_media_kind(video_count: int, image_count: int) -> MediaKind:
    """Derive the media kind from how many videos and images were found."""
    if video_count and image_count:
        return MediaKind.MIXED
    if video_count > 1:
        return MediaKind.MULTI_VIDEO
    if video_count == 1:
        return MediaKind.SINGLE_VIDEO
    if image_count > 1:
        return MediaKind.MULTI_IMAGE
    if image_count == 1:
        return MediaKind.SINGLE_IMAGE
    message = "Media result needs at least one video or image URL"
    raise ValueError(message)


@dataclass(frozen=True, slots=True)
class VideoFormat:
    """Alternate progressive format reported by the universal extractor."""

    format_id: str
    ext: str
    quality: str
    resolution: str | None = None
    file_size: int | None = None
    url: str | None = None


@dataclass(frozen=True, slots=True)
class MediaResult:
    """Normalized output of every extraction path.

    `kind` always agrees with `video_urls` / `image_urls`, and `primary_url`
    is the first video (or first image when there are no videos).
    """

    source_url: str
    platform: Platform
    kind: MediaKind
    title: str
    primary_url: str
    video_urls: tuple[str, ...] = ()
    image_urls: tuple[str, ...] = ()
    thumbnail_urls: tuple[str, ...] = ()
    thumbnail: str | None = None
    duration: float | None = None
    resolution: str | None = None
    file_size: int | None = None
    formats: tuple[VideoFormat, ...] = ()

    def __post_init__(self) -> None:
        expected = classify_media_kind(len(self.video_urls), len(self.image_urls))
        if expected is not self.kind:
            message = (
                f"Media kind {self.kind.value!r} does not match "
                f"{len(self.video_urls)} video(s) and {len(self.image_urls)} image(s)"
            )
            raise ValueError(message)
        first_url = (self.video_urls or self.image_urls)[0]
        if self.primary_url != first_url:
            message = "primary_url must be the first video or image URL"
            raise ValueError(message)

    @classmethod
    def build(
        cls,
        *,
        source_url: str,
        platform: Platform,
        title: str,
        video_urls: list[str] | tuple[str, ...] = (),
        image_urls: list[str] | tuple[str, ...] = (),
        **metadata: Any,
    ) -> MediaResult:
        """Create a result, deriving `kind` and `primary_url` from the URLs."""
        videos = tuple(url for url in video_urls if url)
        images = tuple(url for url in image_urls if url)
        kind = classify_media_kind(len(videos), len(images))
        return cls(
            source_url=source_url,
            platform=platform,
            kind=kind,
            title=title or "",
            primary_url=(videos or images)[0],
            video_urls=videos,
            image_urls=images,
            **metadata,
        )

    @property
    def media_count(self) -> int:
        """Total number of direct URLs carried by this result."""
        return len(self.video_urls) + len(self.image_urls)


@dataclass(frozen=True, slots=True)
class ExtractionFailure:
    """Aggregate failure reported when no strategy produced media."""

    reason: str
    timed_out: bool = False


@dataclass(frozen=True, slots=True)
class RemoteDaemonConfig:
    """Per-user connection details for a remote aria2 daemon."""

    endpoint: str
    secret: str | None = None
    directory: str | None = None
    extra_options: dict[str, OptionValue] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the JSON user store."""
        data: dict[str, Any] = {"rpc_url": self.endpoint}
        if self.secret:
            data["secret"] = self.secret
        if self.directory:
            data["dir"] = self.directory
        if self.extra_options:
            data["options"] = dict(self.extra_options)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RemoteDaemonConfig:
        """Rebuild from the JSON user store representation."""
        raw_options = data.get("options") or {}
        options = {
            str(key): value
            for key, value in raw_options.items()
            if isinstance(value, (str, int, float, bool))
        }
        return cls(
            endpoint=str(data["rpc_url"]),
            secret=data.get("secret") or None,
            directory=data.get("dir") or None,
            extra_options=options,
        )

    @property
    def masked_secret(self) -> str | None:
        """Secret with everything after the first three characters hidden."""
        if not self.secret:
            return None
        return self.secret[:3] + "*" * max(0, len(self.secret) - 3)


@dataclass(slots=True)
class UserRecord:
    """Persisted per-user record in the JSON store."""

    user_id: int
    aria2: RemoteDaemonConfig | None
    created_at: str
    updated_at: str
    username: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the JSON user store."""
        data: dict[str, Any] = {
            "user_id": self.user_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if self.username:
            data["username"] = self.username
        if self.aria2 is not None:
            data["aria2"] = self.aria2.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserRecord:
        """Rebuild from the JSON user store representation."""
        raw_aria2 = data.get("aria2")
        return cls(
            user_id=int(data["user_id"]),
            username=data.get("username") or None,
            aria2=RemoteDaemonConfig.from_dict(raw_aria2) if raw_aria2 else None,
            created_at=str(data.get("created_at") or ""),
            updated_at=str(data.get("updated_at") or ""),
        )
