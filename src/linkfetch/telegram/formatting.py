"""Text rendering for media results shown in chat."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from linkfetch.core.models import MediaResult

_KIB = 1024
_MIB = 1024 * 1024
_GIB = 1024 * 1024 * 1024


def format_duration(seconds: float) -> str:
    """Render a duration as `m:ss`, or `h:mm:ss` from one hour upwards."""
    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_file_size(size_bytes: int | None) -> str:
    if size_bytes is None:
        return "Unknown"
    if size_bytes < _KIB:
        return f"{size_bytes} B"
    if size_bytes < _MIB:
        return f"{size_bytes / _KIB:.1f} KB"
    if size_bytes < _GIB:
        return f"{size_bytes / _MIB:.1f} MB"
    return f"{size_bytes / _GIB:.2f} GB"


def format_video_info(result: MediaResult) -> str:
    """Multi-line summary of a video result; optional fields are skipped."""
    lines = ["🎬 Video info\n", f"📝 Title: {result.title}"]
    if result.duration:
        lines.append(f"⏱ Duration: {format_duration(result.duration)}")
    if result.resolution:
        lines.append(f"📊 Resolution: {result.resolution}")
    if result.file_size:
        lines.append(f"💾 Size: {format_file_size(result.file_size)}")
    return "\n".join(lines)


def media_count_text(video_count: int, image_count: int) -> str:
    """Compact count label sent alongside a media group."""
    if video_count and image_count:
        return f"🎬( {video_count} ) + 🖼️( {image_count} )"
    if video_count:
        return f"🎬( {video_count} )"
    if image_count:
        return f"🖼️( {image_count} )"
    return ""
