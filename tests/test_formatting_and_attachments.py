from __future__ import annotations

import pytest

from linkfetch.core.exceptions import AttachmentUnavailableError
from linkfetch.core.models import MediaResult, Platform
from linkfetch.services.attachments import (
    extension_from_mime,
    generate_file_name,
    is_file_size_valid,
    is_video_mime,
    resolve_attachment_url,
)
from linkfetch.telegram.formatting import (
    format_duration,
    format_file_size,
    format_video_info,
    media_count_text,
)

from ._fakes import FakeBot


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0, "0:00"), (65, "1:05"), (599.9, "9:59"), (3600, "1:00:00"), (3725, "1:02:05")],
)
def test_format_duration(seconds: float, expected: str) -> None:
    assert format_duration(seconds) == expected


@pytest.mark.parametrize(
    ("size", "expected"),
    [
        (None, "Unknown"),
        (512, "512 B"),
        (1536, "1.5 KB"),
        (5 * 1024 * 1024, "5.0 MB"),
        (3 * 1024 * 1024 * 1024, "3.00 GB"),
    ],
)
def test_format_file_size(size: int | None, expected: str) -> None:
    assert format_file_size(size) == expected


def test_video_info_skips_unknown_fields() -> None:
    result = MediaResult.build(
        source_url="https://youtu.be/x",
        platform=Platform.YOUTUBE,
        title="Clip",
        video_urls=["https://cdn/v.mp4"],
        duration=90,
        file_size=2048,
    )

    assert format_video_info(result) == (
        "🎬 Video info\n\n📝 Title: Clip\n⏱ Duration: 1:30\n💾 Size: 2.0 KB"
    )


def test_media_count_text() -> None:
    assert media_count_text(2, 3) == "🎬( 2 ) + 🖼️( 3 )"
    assert media_count_text(2, 0) == "🎬( 2 )"
    assert media_count_text(0, 4) == "🖼️( 4 )"


def test_file_size_ceiling_is_inclusive() -> None:
    assert is_file_size_valid(None)
    assert is_file_size_valid(20 * 1024 * 1024)
    assert not is_file_size_valid(20 * 1024 * 1024 + 1)


@pytest.mark.parametrize(
    ("mime", "extension"),
    [
        ("video/quicktime", "mov"),
        ("application/x-7z-compressed", "7z"),
        ("image/heic", "heic"),
        (None, "bin"),
        ("weird", "bin"),
    ],
)
def test_extension_from_mime(mime: str | None, extension: str) -> None:
    assert extension_from_mime(mime) == extension


def test_generate_file_name_replaces_unsafe_characters() -> None:
    assert generate_file_name('a/b:c*"d', "pdf", "UID") == "a_b_c__d_UID.pdf"
    assert len(generate_file_name("x" * 300, "txt", "u")) == 100 + len("_u.txt")


def test_only_video_mime_types_are_videos() -> None:
    assert is_video_mime("video/webm")
    assert not is_video_mime("image/png")
    assert not is_video_mime(None)


@pytest.mark.asyncio
async def test_resolve_attachment_url_returns_file_path() -> None:
    bot = FakeBot(file_paths={"f1": "https://api.telegram.org/file/bot1/photos/a.jpg"})

    assert await resolve_attachment_url(bot, "f1") == "https://api.telegram.org/file/bot1/photos/a.jpg"  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_resolve_attachment_url_failures() -> None:
    bot = FakeBot(file_paths={"empty": None})

    with pytest.raises(AttachmentUnavailableError, match="File path not available"):
        await resolve_attachment_url(bot, "empty")  # type: ignore[arg-type]
    with pytest.raises(AttachmentUnavailableError, match="Wrong file_id"):
        await resolve_attachment_url(bot, "missing")  # type: ignore[arg-type]
