"""Universal video extraction by running the yt-dlp executable."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from dataclasses import dataclass, field
from typing import Any

from linkfetch.core.config import MAX_ALTERNATE_FORMATS
from linkfetch.core.exceptions import ExtractionError, ExtractionTimeoutError
from linkfetch.core.models import MediaResult, Platform, VideoFormat

logger = logging.getLogger(__name__)

_UNKNOWN_TITLE = "Unknown title"
_PROGRESSIVE_EXT = "mp4"
_DIRECT_PROTOCOL = "https"


@dataclass(frozen=True, slots=True)
class YtDlpOptions:
    """How to invoke the yt-dlp executable."""

    executable: str = "yt-dlp"
    cookies_file: str | None = None
    timeout_seconds: float = 60.0
    extra_args: tuple[str, ...] = field(default=())

    def build_args(self, url: str) -> list[str]:
        """Command-line arguments for a metadata-only run."""
        args = ["--dump-json", "--no-warnings", "--no-playlist"]
        if self.cookies_file:
            args.extend(["--cookies", self.cookies_file])
        args.extend(self.extra_args)
        args.append(url)
        return args


def _dimensions(item: dict[str, Any]) -> str | None:
    width = item.get("width")
    height = item.get("height")
    if width and height:
        return f"{width}x{height}"
    return None


def select_progressive_formats(formats: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Return direct MP4 video formats, widest first.

    Segmented streams (HLS/DASH) and audio-only entries are excluded.
    """
    eligible = [
        fmt
        for fmt in formats
        if fmt.get("url")
        and fmt.get("ext") == _PROGRESSIVE_EXT
        and fmt.get("protocol") == _DIRECT_PROTOCOL
        and fmt.get("vcodec") not in (None, "none")
    ]
    return sorted(eligible, key=lambda fmt: fmt.get("width") or 0, reverse=True)


def _to_video_format(fmt: dict[str, Any]) -> VideoFormat:
    return VideoFormat(
        format_id=str(fmt.get("format_id") or "unknown"),
        ext=str(fmt.get("ext") or _PROGRESSIVE_EXT),
        quality=str(fmt.get("quality") or fmt.get("resolution") or "unknown"),
        resolution=fmt.get("resolution") or _dimensions(fmt),
        file_size=fmt.get("filesize") or fmt.get("filesize_approx"),
        url=fmt.get("url"),
    )


def build_media_result(
    url: str,
    platform: Platform,
    output: dict[str, Any],
) -> MediaResult:
    """Normalize yt-dlp JSON output into a single-video result."""
    progressive = select_progressive_formats(output.get("formats") or [])
    best = progressive[0] if progressive else {}

    direct_url = output.get("url") or best.get("url")
    if not direct_url:
        message = "No downloadable video format found"
        raise ExtractionError(message)

    resolution = (
        output.get("resolution")
        or _dimensions(output)
        or best.get("resolution")
        or _dimensions(best)
    )
    file_size = (
        output.get("filesize")
        or output.get("filesize_approx")
        or best.get("filesize_approx")
    )

    return MediaResult.build(
        source_url=url,
        platform=platform,
        title=output.get("title") or _UNKNOWN_TITLE,
        video_urls=[direct_url],
        thumbnail=output.get("thumbnail"),
        duration=output.get("duration"),
        resolution=resolution,
        file_size=file_size,
        formats=tuple(
            _to_video_format(fmt) for fmt in progressive[:MAX_ALTERNATE_FORMATS]
        ),
    )


def _first_json_document(stdout: bytes) -> dict[str, Any]:
    for line in stdout.decode("utf-8", errors="replace").splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        try:
            payload = json.loads(stripped)
        except json.JSONDecodeError as exc:
            message = "Extractor returned malformed output"
            raise ExtractionError(message) from exc
        if isinstance(payload, dict):
            return payload
    message = "Extractor returned no metadata"
    raise ExtractionError(message)


def _last_error_line(stderr: bytes) -> str:
    lines = [
        line.strip()
        for line in stderr.decode("utf-8", errors="replace").splitlines()
        if line.strip()
    ]
    if not lines:
        return "Unknown error"
    return lines[-1].removeprefix("ERROR: ")


async def _terminate(process: asyncio.subprocess.Process) -> None:
    if process.returncode is not None:
        return
    with contextlib.suppress(ProcessLookupError):
        process.kill()
    with contextlib.suppress(ProcessLookupError):
        await process.wait()


class YtDlpExtractor:
    """Runs `yt-dlp --dump-json` under a hard timeout."""

    name = "yt-dlp"

    def __init__(self, options: YtDlpOptions | None = None) -> None:
        self.options = options or YtDlpOptions()

    def supports(self, platform: Platform) -> bool:
        return platform is not Platform.UNKNOWN

    async def fetch_metadata(self, url: str) -> dict[str, Any]:
        """Run the executable and return its first JSON document.

        The process is killed when the timeout elapses.
        """
        try:
            process = await asyncio.create_subprocess_exec(
                self.options.executable,
                *self.options.build_args(url),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            message = f"Cannot start {self.options.executable}: {exc}"
            raise ExtractionError(message) from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=self.options.timeout_seconds,
            )
        except TimeoutError:
            logger.warning(
                "yt-dlp timed out after %.1fs url=%s",
                self.options.timeout_seconds,
                url,
            )
            await _terminate(process)
            raise ExtractionTimeoutError(self.options.timeout_seconds) from None

        if process.returncode != 0:
            raise ExtractionError(_last_error_line(stderr))

        return _first_json_document(stdout)

    async def attempt(self, url: str, platform: Platform) -> MediaResult:
        logger.debug("Running yt-dlp for url=%s", url)
        output = await self.fetch_metadata(url)
        result = build_media_result(url, platform, output)
        logger.info(
            "yt-dlp resolved video title=%r direct_url=%s",
            result.title,
            "yes" if result.primary_url else "no",
        )
        return result
