"""
Data models for YouTube playlist entries.

This module defines immutable dataclasses representing one playlist entry
and its thumbnail set. These models flow from the enumerator to the record
store and the thumbnail materializer.

Design Decisions:
    - All dataclasses are frozen (immutable) to prevent accidental modification
    - Factory methods read the raw playlistItems.list response (camelCase keys)
    - to_dict()/from_dict() define the on-disk record format (snake_case keys)
    - Timestamps are timezone-aware datetimes, written back as RFC 3339

Usage:
    from yt_playlist_downloader.youtube.models import Video

    video = Video.from_playlist_item(item)
    record = video.to_dict()
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterator

from yt_playlist_downloader.core.exceptions import MalformedResponseError


# Variant names in the order they are materialized and serialized
REQUIRED_VARIANTS = ("default", "high", "medium")
OPTIONAL_VARIANTS = ("standard", "maxres")
THUMBNAIL_VARIANTS = REQUIRED_VARIANTS + OPTIONAL_VARIANTS


def parse_timestamp(value: str) -> datetime:
    """
    Parse an RFC 3339 timestamp as returned by the YouTube Data API.

    Accepts a trailing 'Z' for UTC. Naive values are assumed to be UTC.

    Raises:
        ValueError: If the value is not a valid timestamp string.
    """
    if not isinstance(value, str):
        raise ValueError(f"Timestamp must be a string, got {type(value).__name__}")

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    """
    Format a datetime as RFC 3339, using the 'Z' suffix for UTC.

    Example:
        format_timestamp(datetime(2020, 1, 1, tzinfo=timezone.utc))
        # Returns: "2020-01-01T00:00:00Z"
    """
    text = value.isoformat()
    if value.utcoffset() is not None and value.utcoffset().total_seconds() == 0:
        text = text[: -len("+00:00")] + "Z"
    return text


def _require(
    section: dict[str, Any],
    key: str,
    path: str,
    item_id: str | None
) -> Any:
    """Return section[key] or raise MalformedResponseError naming the field."""
    value = section.get(key)
    if value is None:
        raise MalformedResponseError(
            f"Playlist item is missing '{path}'",
            details={"item_id": item_id},
            field=path
        )
    return value


def _section(
    data: dict[str, Any],
    key: str,
    path: str,
    item_id: str | None
) -> dict[str, Any]:
    value = _require(data, key, path, item_id)
    if not isinstance(value, dict):
        raise MalformedResponseError(
            f"Playlist item field '{path}' must be an object",
            details={"item_id": item_id, "type": type(value).__name__},
            field=path
        )
    return value


def _video_id(content_details: dict[str, Any], item_id: str | None) -> str:
    """Return contentDetails.videoId, rejecting ids that cannot name a file or directory."""
    path = "contentDetails.videoId"
    video_id = _require(content_details, "videoId", path, item_id)
    if (
        not isinstance(video_id, str)
        or not video_id.strip()
        or video_id in (".", "..")
        or "/" in video_id
        or "\\" in video_id
    ):
        raise MalformedResponseError(
            f"Playlist item has an invalid '{path}': {video_id!r}",
            details={"item_id": item_id, "video_id": video_id},
            field=path
        )
    return video_id


def _api_timestamp(value: Any, path: str, item_id: str | None) -> datetime:
    try:
        return parse_timestamp(value)
    except ValueError as e:
        raise MalformedResponseError(
            f"Playlist item field '{path}' is not a valid timestamp: {value!r}",
            details={"item_id": item_id, "original_error": str(e)},
            field=path
        ) from e


@dataclass(frozen=True)
class Thumbnail:
    """
    One thumbnail image: its source URL and optional pixel dimensions.

    Attributes:
        url: Source URL of the image. The final '/' segment becomes the
             local filename (e.g. ".../vi/abc/hqdefault.jpg" -> "hqdefault.jpg").
        width: Width in pixels, when the API reports it.
        height: Height in pixels, when the API reports it.
    """
    url: str
    width: int | None = None
    height: int | None = None

    @classmethod
    def from_api(
        cls,
        data: dict[str, Any],
        path: str = "thumbnail",
        item_id: str | None = None
    ) -> "Thumbnail":
        """
        Create a Thumbnail from one entry of snippet.thumbnails.

        Args:
            data: The thumbnail object, e.g. {"url": ..., "width": 120, "height": 90}.
            path: Dotted path of this object, used in error messages.
            item_id: Playlist item id, used in error messages.

        Raises:
            MalformedResponseError: If 'url' is missing.
        """
        url = _require(data, "url", f"{path}.url", item_id)
        return cls(url=url, width=data.get("width"), height=data.get("height"))

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Thumbnail":
        return cls(url=data["url"], width=data.get("width"), height=data.get("height"))


@dataclass(frozen=True)
class ThumbnailSet:
    """
    The fixed set of thumbnail variants of one video.

    default, high and medium are present for every available video;
    standard and maxres only exist when the upload resolution allows them.
    """
    default: Thumbnail
    high: Thumbnail
    medium: Thumbnail
    standard: Thumbnail | None = None
    maxres: Thumbnail | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any], item_id: str | None = None) -> "ThumbnailSet":
        """
        Create a ThumbnailSet from snippet.thumbnails.

        Raises:
            MalformedResponseError: If default, high or medium is missing.
        """
        variants: dict[str, Thumbnail | None] = {}

        for name in REQUIRED_VARIANTS:
            path = f"snippet.thumbnails.{name}"
            variants[name] = Thumbnail.from_api(_section(data, name, path, item_id), path, item_id)

        for name in OPTIONAL_VARIANTS:
            raw = data.get(name)
            if isinstance(raw, dict):
                variants[name] = Thumbnail.from_api(raw, f"snippet.thumbnails.{name}", item_id)
            else:
                variants[name] = None

        return cls(**variants)

    def variants(self) -> Iterator[tuple[str, Thumbnail]]:
        """
        Yield (name, thumbnail) for every present variant.

        Order is fixed: default, high, medium, standard, maxres.
        """
        for name in THUMBNAIL_VARIANTS:
            thumbnail = getattr(self, name)
            if thumbnail is not None:
                yield name, thumbnail

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for name in THUMBNAIL_VARIANTS:
            thumbnail = getattr(self, name)
            result[name] = thumbnail.to_dict() if thumbnail is not None else None
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ThumbnailSet":
        return cls(
            default=Thumbnail.from_dict(data["default"]),
            high=Thumbnail.from_dict(data["high"]),
            medium=Thumbnail.from_dict(data["medium"]),
            standard=Thumbnail.from_dict(data["standard"]) if data.get("standard") else None,
            maxres=Thumbnail.from_dict(data["maxres"]) if data.get("maxres") else None,
        )


@dataclass(frozen=True)
class Video:
    """
    Immutable representation of one available playlist entry.

    Attributes:
        video_id: YouTube video id (11 characters). Unique key used to name
                  the record file and the thumbnail directory.
                  Example: "dQw4w9WgXcQ"

        title: Video title as shown in the playlist.

        description: Video description (may be empty).

        published_at: When the entry was added to the playlist.

        video_published_at: When the video itself was published. Absent for
                            some entries (e.g. videos by deleted channels).

        start_at: Optional playlist clip start, as reported by the API.

        end_at: Optional playlist clip end, as reported by the API.

        thumbnails: The video's ThumbnailSet (exclusively owned).
    """
    video_id: str
    title: str
    description: str
    published_at: datetime
    thumbnails: ThumbnailSet
    video_published_at: datetime | None = None
    start_at: str | None = None
    end_at: str | None = None

    @classmethod
    def from_playlist_item(cls, item: dict[str, Any]) -> "Video":
        """
        Create a Video from one element of a playlistItems.list response.

        The item must have been requested with
        part="snippet,contentDetails,id,status".

        Args:
            item: Raw playlist item dictionary.

        Returns:
            Video: A new Video populated from snippet and contentDetails.

        Raises:
            MalformedResponseError: If a required field (snippet.title,
                snippet.description, snippet.publishedAt, snippet.thumbnails,
                contentDetails.videoId) is missing or has the wrong shape.

        Example:
            response = client.playlist_items("PL123")
            videos = [Video.from_playlist_item(item) for item in response["items"]]
        """
        item_id = item.get("id")

        snippet = _section(item, "snippet", "snippet", item_id)
        content_details = _section(item, "contentDetails", "contentDetails", item_id)

        video_published_at = content_details.get("videoPublishedAt")

        return cls(
            video_id=_video_id(content_details, item_id),
            title=_require(snippet, "title", "snippet.title", item_id),
            description=_require(snippet, "description", "snippet.description", item_id),
            published_at=_api_timestamp(
                _require(snippet, "publishedAt", "snippet.publishedAt", item_id),
                "snippet.publishedAt",
                item_id
            ),
            thumbnails=ThumbnailSet.from_api(
                _section(snippet, "thumbnails", "snippet.thumbnails", item_id),
                item_id
            ),
            video_published_at=(
                _api_timestamp(video_published_at, "contentDetails.videoPublishedAt", item_id)
                if video_published_at is not None else None
            ),
            start_at=content_details.get("startAt"),
            end_at=content_details.get("endAt"),
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to the persisted record format.

        Absent optional values are kept as None so every record has the
        same set of keys.
        """
        return {
            "video_id": self.video_id,
            "title": self.title,
            "description": self.description,
            "published_at": format_timestamp(self.published_at),
            "video_published_at": (
                format_timestamp(self.video_published_at)
                if self.video_published_at is not None else None
            ),
            "start_at": self.start_at,
            "end_at": self.end_at,
            "thumbnails": self.thumbnails.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Video":
        """
        Reconstruct a Video from a persisted record.

        Inverse of to_dict().

        Raises:
            KeyError: If a required field is missing.
            ValueError: If a timestamp cannot be parsed.
        """
        video_published_at = data.get("video_published_at")
        return cls(
            video_id=data["video_id"],
            title=data["title"],
            description=data["description"],
            published_at=parse_timestamp(data["published_at"]),
            thumbnails=ThumbnailSet.from_dict(data["thumbnails"]),
            video_published_at=(
                parse_timestamp(video_published_at) if video_published_at is not None else None
            ),
            start_at=data.get("start_at"),
            end_at=data.get("end_at"),
        )

    @property
    def url(self) -> str:
        """Watch URL of the video."""
        return f"https://www.youtube.com/watch?v={self.video_id}"
