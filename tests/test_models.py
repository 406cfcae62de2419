from __future__ import annotations

import pytest

from linkfetch.core.models import (
    MediaKind,
    MediaResult,
    Platform,
    RemoteDaemonConfig,
    UserRecord,
    classify_media_kind,
)


@pytest.mark.parametrize(
    ("videos", "images", "expected"),
    [
        (1, 0, MediaKind.SINGLE_VIDEO),
        (3, 0, MediaKind.MULTI_VIDEO),
        (0, 1, MediaKind.SINGLE_IMAGE),
        (0, 4, MediaKind.MULTI_IMAGE),
        (1, 1, MediaKind.MIXED),
    ],
)
def test_classify_media_kind(videos: int, images: int, expected: MediaKind) -> None:
    assert classify_media_kind(videos, images) is expected


def test_classify_media_kind_rejects_empty() -> None:
    with pytest.raises(ValueError, match="at least one"):
        classify_media_kind(0, 0)


def test_build_derives_kind_and_primary_url() -> None:
    result = MediaResult.build(
        source_url="https://x.com/a/status/1",
        platform=Platform.TWITTER,
        title="t",
        video_urls=["https://v/1.mp4", ""],
        image_urls=["https://i/1.jpg", "https://i/2.jpg"],
    )

    assert result.kind is MediaKind.MIXED
    assert result.primary_url == "https://v/1.mp4"
    assert result.video_urls == ("https://v/1.mp4",)
    assert result.media_count == 3
    assert result.kind.is_batch


def test_inconsistent_kind_is_rejected() -> None:
    with pytest.raises(ValueError, match="does not match"):
        MediaResult(
            source_url="u",
            platform=Platform.TWITTER,
            kind=MediaKind.MULTI_IMAGE,
            title="t",
            primary_url="https://i/1.jpg",
            image_urls=("https://i/1.jpg",),
        )


def test_primary_url_must_be_first_media_url() -> None:
    with pytest.raises(ValueError, match="primary_url"):
        MediaResult(
            source_url="u",
            platform=Platform.TWITTER,
            kind=MediaKind.MULTI_IMAGE,
            title="t",
            primary_url="https://i/2.jpg",
            image_urls=("https://i/1.jpg", "https://i/2.jpg"),
        )


def test_masked_secret_keeps_first_three_characters() -> None:
    config = RemoteDaemonConfig(endpoint="http://h:6800/jsonrpc", secret="hunter2")

    assert config.masked_secret == "hun****"
    assert RemoteDaemonConfig(endpoint="http://h").masked_secret is None


def test_daemon_config_drops_non_scalar_options() -> None:
    config = RemoteDaemonConfig.from_dict(
        {
            "rpc_url": "http://h:6800/jsonrpc",
            "options": {"split": 4, "header": ["a", "b"], "continue": True},
        },
    )

    assert config.extra_options == {"split": 4, "continue": True}


def test_user_record_serialization_keeps_daemon_config() -> None:
    record = UserRecord(
        user_id=42,
        username="alice",
        aria2=RemoteDaemonConfig(endpoint="http://h:6800/jsonrpc", directory="/dl"),
        created_at="2024-01-01T00:00:00+00:00",
        updated_at="2024-01-02T00:00:00+00:00",
    )

    restored = UserRecord.from_dict(record.to_dict())

    assert restored == record
    assert record.to_dict()["aria2"] == {"rpc_url": "http://h:6800/jsonrpc", "dir": "/dl"}
