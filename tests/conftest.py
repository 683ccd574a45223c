"""Test configuration and fixtures"""

import tempfile
import threading
import time
from pathlib import Path
from typing import Any

import pytest

from yt_playlist_downloader.core.exceptions import TransportError


THUMBNAIL_FILES = {
    "default": "default.jpg",
    "high": "hqdefault.jpg",
    "medium": "mqdefault.jpg",
    "standard": "sddefault.jpg",
    "maxres": "maxresdefault.jpg",
}

THUMBNAIL_SIZES = {
    "default": (120, 90),
    "high": (480, 360),
    "medium": (320, 180),
    "standard": (640, 480),
    "maxres": (1280, 720),
}


def make_playlist_item(
    video_id: str,
    title: str | None = None,
    privacy_status: str | None = "public",
    standard: bool = False,
    maxres: bool = False,
    video_published_at: str | None = "2020-05-01T10:00:00Z",
    start_at: str | None = None,
    end_at: str | None = None,
) -> dict[str, Any]:
    """Build a raw playlistItems.list item the way the API returns it."""
    variants = ["default", "high", "medium"]
    if standard:
        variants.append("standard")
    if maxres:
        variants.append("maxres")

    thumbnails = {}
    for name in variants:
        width, height = THUMBNAIL_SIZES[name]
        thumbnails[name] = {
            "url": f"https://i.ytimg.com/vi/{video_id}/{THUMBNAIL_FILES[name]}",
            "width": width,
            "height": height,
        }

    content_details: dict[str, Any] = {"videoId": video_id}
    if video_published_at is not None:
        content_details["videoPublishedAt"] = video_published_at
    if start_at is not None:
        content_details["startAt"] = start_at
    if end_at is not None:
        content_details["endAt"] = end_at

    item: dict[str, Any] = {
        "kind": "youtube#playlistItem",
        "id": f"item-{video_id}",
        "snippet": {
            "publishedAt": "2021-03-04T05:06:07Z",
            "title": title if title is not None else f"Video {video_id}",
            "description": f"Description of {video_id}",
            "thumbnails": thumbnails,
        },
        "contentDetails": content_details,
    }
    if privacy_status is not None:
        item["status"] = {"privacyStatus": privacy_status}
    return item


def make_page(items: list[dict[str, Any]], next_page_token: str | None = None) -> dict[str, Any]:
    """Build one playlistItems.list response page."""
    page: dict[str, Any] = {
        "kind": "youtube#playlistItemListResponse",
        "items": items,
        "pageInfo": {"totalResults": len(items), "resultsPerPage": 50},
    }
    if next_page_token is not None:
        page["nextPageToken"] = next_page_token
    return page


class FakePlaylistClient:
    """
    In-memory listing client.

    pages maps a playlist id to its response pages, in order. Page i is
    returned for the i-th request of that playlist. errors maps a playlist
    id to an exception raised instead of returning a page.
    """

    def __init__(
        self,
        pages: dict[str, list[dict[str, Any]]],
        errors: dict[str, Exception] | None = None
    ) -> None:
        self.pages = pages
        self.errors = errors or {}
        self.calls: list[tuple[str, str | None, int]] = []
        self._served: dict[str, int] = {}

    def playlist_items(
        self,
        playlist_id: str,
        page_token: str | None = None,
        max_results: int = 50
    ) -> dict[str, Any]:
        self.calls.append((playlist_id, page_token, max_results))
        if playlist_id in self.errors:
            raise self.errors[playlist_id]

        index = self._served.get(playlist_id, 0)
        self._served[playlist_id] = index + 1
        return self.pages[playlist_id][index]

    def reset(self) -> None:
        self._served.clear()


class FakeImageFetcher:
    """
    In-memory image fetcher.

    Returns b"image:<url>" for every URL. URLs in fail_urls raise
    TransportError; URLs in delays sleep first, to shuffle completion order.
    """

    def __init__(
        self,
        fail_urls: set[str] | None = None,
        delays: dict[str, float] | None = None
    ) -> None:
        self.fail_urls = fail_urls or set()
        self.delays = delays or {}
        self.fetched: list[str] = []
        self._lock = threading.Lock()

    def fetch(self, url: str) -> bytes:
        with self._lock:
            self.fetched.append(url)
        if url in self.delays:
            time.sleep(self.delays[url])
        if url in self.fail_urls:
            raise TransportError(
                "Failed to download thumbnail: HTTP 404",
                details={"url": url},
                http_status=404
            )
        return f"image:{url}".encode()


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def playlist_item():
    """Factory for raw playlist items"""
    return make_playlist_item


@pytest.fixture
def image_fetcher():
    """Fake thumbnail fetcher that never touches the network"""
    return FakeImageFetcher()


@pytest.fixture(autouse=True)
def no_api_key_env(monkeypatch):
    """Keep a developer's YOUTUBE_API_KEY out of the tests"""
    monkeypatch.delenv("YOUTUBE_API_KEY", raising=False)
