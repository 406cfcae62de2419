"""Hand resolved media to the user's aria2 daemon."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from linkfetch.core.config import BATCH_FILENAME_LIMIT, SINGLE_FILENAME_LIMIT
from linkfetch.core.models import MediaKind

if TYPE_CHECKING:
    from linkfetch.core.models import MediaResult, RemoteDaemonConfig
    from linkfetch.services.aria2 import Aria2Client, DownloadResult

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_ILLEGAL_CHARS = re.compile(r'[<>:"/\\|?*]')
_EXTENSION = re.compile(r"\.\w{2,5}$")

VIDEO = "video"
IMAGE = "image"


def sanitize_title(title: str, limit: int) -> str:
    """Strip whitespace and path-unsafe characters, then truncate."""
    return _ILLEGAL_CHARS.sub("", _WHITESPACE.sub("", title))[:limit]


def single_download_filename(result: MediaResult) -> str:
    """Filename for a one-item delivery, keeping an existing extension."""
    safe_title = sanitize_title(result.title, SINGLE_FILENAME_LIMIT)
    if _EXTENSION.search(safe_title):
        return safe_title
    extension = "jpg" if result.kind is MediaKind.SINGLE_IMAGE else "mp4"
    return f"{safe_title}.{extension}"


@dataclass(frozen=True, slots=True)
class DownloadJob:
    """One URL of a batch together with its target filename."""

    url: str
    filename: str
    kind: str


def plan_batch_downloads(result: MediaResult) -> tuple[str, list[DownloadJob]]:
    """Return the shared base name and one job per direct URL.

    Mixed batches number videos and images separately (`_v1.mp4`, `_i1.jpg`);
    single-type batches use `_1.mp4` or `_1.jpg`.
    """
    base_name = sanitize_title(result.title, BATCH_FILENAME_LIMIT)
    if result.video_urls and result.image_urls:
        jobs = [
            DownloadJob(url, f"{base_name}_v{index}.mp4", VIDEO)
            for index, url in enumerate(result.video_urls, start=1)
        ]
        jobs.extend(
            DownloadJob(url, f"{base_name}_i{index}.jpg", IMAGE)
            for index, url in enumerate(result.image_urls, start=1)
        )
        return base_name, jobs

    if result.video_urls:
        urls, extension, kind = result.video_urls, "mp4", VIDEO
    else:
        urls, extension, kind = result.image_urls, "jpg", IMAGE
    jobs = [
        DownloadJob(url, f"{base_name}_{index}.{extension}", kind)
        for index, url in enumerate(urls, start=1)
    ]
    return base_name, jobs


@dataclass(frozen=True, slots=True)
class BatchOutcome:
    """Per-item results of a batch delivery, in submission order."""

    base_name: str
    jobs: tuple[DownloadJob, ...]
    results: tuple[DownloadResult, ...]

    @property
    def success_count(self) -> int:
        return sum(1 for result in self.results if result.ok)

    @property
    def failure_count(self) -> int:
        return len(self.results) - self.success_count

    @property
    def first_error(self) -> str:
        for result in self.results:
            if not result.ok and result.reason:
                return result.reason
        return "Unknown error"

    def summary_text(self) -> str:
        """User-facing summary: full success, partial counts or first error."""
        if self.results and self.success_count == len(self.results):
            video_count = sum(1 for job in self.jobs if job.kind == VIDEO)
            image_count = len(self.jobs) - video_count
            counts = []
            if video_count:
                counts.append(f"🎬 ({video_count})")
            if image_count:
                counts.append(f"🖼 ({image_count})")
            task_ids = ", ".join(str(result.task_id) for result in self.results)
            return (
                "✅ Sent to Aria2\n\n"
                f"{', '.join(counts)}\n"
                f"📁 Name: {self.base_name}\n"
                f"🆔 Task IDs: {task_ids}"
            )
        if self.success_count:
            return (
                "⚠️ Partially sent\n\n"
                f"✅ Succeeded: {self.success_count}\n"
                f"❌ Failed: {self.failure_count}"
            )
        return f"❌ Batch send failed: {self.first_error}"


async def deliver_single(
    client: Aria2Client,
    config: RemoteDaemonConfig,
    result: MediaResult,
) -> tuple[str, DownloadResult]:
    """Send the primary URL; returns the filename used and the RPC outcome."""
    filename = single_download_filename(result)
    logger.info("Sending %s to aria2: %s", result.kind.value, result.primary_url)
    return filename, await client.add_download(result.primary_url, config, filename)


async def deliver_batch(
    client: Aria2Client,
    config: RemoteDaemonConfig,
    result: MediaResult,
) -> BatchOutcome:
    """Send every URL once; failures are recorded, never retried."""
    base_name, jobs = plan_batch_downloads(result)
    outcomes: list[DownloadResult] = []
    for position, job in enumerate(jobs, start=1):
        logger.info(
            "Sending %s %d/%d to aria2: %s",
            job.kind,
            position,
            len(jobs),
            job.url,
        )
        outcomes.append(await client.add_download(job.url, config, job.filename))
    return BatchOutcome(base_name=base_name, jobs=tuple(jobs), results=tuple(outcomes))
