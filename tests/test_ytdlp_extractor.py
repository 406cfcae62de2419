from __future__ import annotations

import asyncio
import json
from typing import Any

import pytest

from linkfetch.core.exceptions import (
    TIMEOUT_REASON,
    ExtractionError,
    ExtractionTimeoutError,
)
from linkfetch.core.models import MediaKind, Platform
from linkfetch.services.extractors.ytdlp import (
    YtDlpExtractor,
    YtDlpOptions,
    build_media_result,
    select_progressive_formats,
)

URL = "https://www.youtube.com/watch?v=abc"


class _FakeProcess:
    def __init__(
        self,
        *,
        stdout: bytes = b"",
        stderr: bytes = b"",
        returncode: int = 0,
        hang: bool = False,
    ) -> None:
        self._stdout = stdout
        self._stderr = stderr
        self._final_returncode = returncode
        self._hang = hang
        self.returncode: int | None = None
        self.killed = False

    async def communicate(self) -> tuple[bytes, bytes]:
        if self._hang:
            await asyncio.sleep(3600)
        self.returncode = self._final_returncode
        return self._stdout, self._stderr

    def kill(self) -> None:
        self.killed = True
        self.returncode = -9

    async def wait(self) -> int:
        return self.returncode or 0


def _patch_subprocess(
    monkeypatch: pytest.MonkeyPatch,
    process: _FakeProcess,
) -> list[tuple[Any, ...]]:
    calls: list[tuple[Any, ...]] = []

    async def _fake_exec(*args: Any, **_kwargs: Any) -> _FakeProcess:
        calls.append(args)
        return process

    monkeypatch.setattr(
        "linkfetch.services.extractors.ytdlp.asyncio.create_subprocess_exec",
        _fake_exec,
    )
    return calls


def test_build_args_requests_metadata_only_with_cookies() -> None:
    options = YtDlpOptions(cookies_file="/etc/cookies.txt")

    assert options.build_args(URL) == [
        "--dump-json",
        "--no-warnings",
        "--no-playlist",
        "--cookies",
        "/etc/cookies.txt",
        URL,
    ]


def test_progressive_selection_skips_segmented_and_audio_only() -> None:
    formats = [
        {"format_id": "hls", "url": "u1", "ext": "mp4", "protocol": "m3u8_native", "vcodec": "avc1", "width": 1920},
        {"format_id": "audio", "url": "u2", "ext": "m4a", "protocol": "https", "vcodec": "none"},
        {"format_id": "18", "url": "u3", "ext": "mp4", "protocol": "https", "vcodec": "avc1", "width": 640},
        {"format_id": "22", "url": "u4", "ext": "mp4", "protocol": "https", "vcodec": "avc1", "width": 1280},
        {"format_id": "webm", "url": "u5", "ext": "webm", "protocol": "https", "vcodec": "vp9", "width": 3840},
    ]

    selected = select_progressive_formats(formats)

    assert [fmt["format_id"] for fmt in selected] == ["22", "18"]


def test_build_media_result_falls_back_to_best_progressive_format() -> None:
    output = {
        "title": "Clip",
        "duration": 125,
        "formats": [
            {"format_id": "18", "url": "https://cdn/18.mp4", "ext": "mp4", "protocol": "https", "vcodec": "avc1", "width": 640, "height": 360},
            {"format_id": "22", "url": "https://cdn/22.mp4", "ext": "mp4", "protocol": "https", "vcodec": "avc1", "width": 1280, "height": 720, "filesize_approx": 5000},
        ],
    }

    result = build_media_result(URL, Platform.YOUTUBE, output)

    assert result.kind is MediaKind.SINGLE_VIDEO
    assert result.primary_url == "https://cdn/22.mp4"
    assert result.resolution == "1280x720"
    assert result.file_size == 5000
    assert result.duration == 125
    assert [fmt.format_id for fmt in result.formats] == ["22", "18"]


def test_build_media_result_without_any_url_is_an_error() -> None:
    with pytest.raises(ExtractionError, match="No downloadable video format"):
        build_media_result(URL, Platform.YOUTUBE, {"title": "x", "formats": []})


@pytest.mark.asyncio
async def test_attempt_parses_first_json_document(monkeypatch: pytest.MonkeyPatch) -> None:
    payload = {"title": "Hello", "url": "https://cdn/direct.mp4", "width": 1920, "height": 1080}
    calls = _patch_subprocess(
        monkeypatch,
        _FakeProcess(stdout=json.dumps(payload).encode() + b"\n"),
    )

    result = await YtDlpExtractor(YtDlpOptions(executable="yt")).attempt(URL, Platform.YOUTUBE)

    assert result.title == "Hello"
    assert result.primary_url == "https://cdn/direct.mp4"
    assert result.resolution == "1920x1080"
    assert calls[0][0] == "yt"
    assert calls[0][-1] == URL


@pytest.mark.asyncio
async def test_nonzero_exit_reports_last_stderr_line(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_subprocess(
        monkeypatch,
        _FakeProcess(
            stderr=b"WARNING: something\nERROR: Unsupported URL: https://x\n",
            returncode=1,
        ),
    )

    with pytest.raises(ExtractionError) as exc_info:
        await YtDlpExtractor().attempt(URL, Platform.YOUTUBE)

    assert exc_info.value.reason == "Unsupported URL: https://x"


@pytest.mark.asyncio
async def test_timeout_kills_the_process(monkeypatch: pytest.MonkeyPatch) -> None:
    process = _FakeProcess(hang=True)
    _patch_subprocess(monkeypatch, process)
    extractor = YtDlpExtractor(YtDlpOptions(timeout_seconds=0.01))

    with pytest.raises(ExtractionTimeoutError) as exc_info:
        await extractor.attempt(URL, Platform.YOUTUBE)

    assert exc_info.value.reason == TIMEOUT_REASON
    assert process.killed


@pytest.mark.asyncio
async def test_missing_executable_is_an_extraction_error() -> None:
    extractor = YtDlpExtractor(YtDlpOptions(executable="/nonexistent/linkfetch-yt-dlp"))

    with pytest.raises(ExtractionError, match="Cannot start"):
        await extractor.attempt(URL, Platform.YOUTUBE)


def test_supports_every_known_platform() -> None:
    extractor = YtDlpExtractor()

    assert extractor.supports(Platform.TIKTOK)
    assert not extractor.supports(Platform.UNKNOWN)
