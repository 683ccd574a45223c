"""
YouTube Data API client for yt-playlist-downloader.

This module wraps googleapiclient's discovery client for the single
endpoint the application needs: playlistItems.list. Responses are returned
as raw dictionaries; mapping them to models is the fetcher's job.

Authentication:
    Only public and unlisted playlist contents are read, so a plain API key
    is enough (no OAuth flow). The key comes from config.yaml or the
    YOUTUBE_API_KEY environment variable.

Usage:
    from yt_playlist_downloader.youtube.client import YouTubeClient

    client = YouTubeClient(api_key="...")
    page = client.playlist_items("PLxxxxxxxx")
    while page.get("nextPageToken"):
        page = client.playlist_items("PLxxxxxxxx", page_token=page["nextPageToken"])

Thread Safety:
    The underlying httplib2.Http is not thread-safe. Enumeration runs
    page by page on the calling thread, so one client per process is fine.
"""

from typing import Any

import httplib2
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from yt_playlist_downloader.core.exceptions import TransportError
from yt_playlist_downloader.core.logger import get_logger


logger = get_logger(__name__)

# Parts requested for every playlist item
PLAYLIST_ITEM_PARTS = "snippet,contentDetails,id,status"

# API-side maximum page size for playlistItems.list
MAX_PAGE_SIZE = 50


def _http_status(error: HttpError) -> int | None:
    status = getattr(error.resp, "status", None)
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


def _is_quota_error(error: HttpError) -> bool:
    """True if the API rejected the call because the daily quota is exhausted."""
    reasons = []
    for detail in getattr(error, "error_details", None) or []:
        if isinstance(detail, dict):
            reasons.append(str(detail.get("reason", "")))
    reasons.append(str(error.reason or ""))
    return any("quota" in reason.lower() for reason in reasons)


class YouTubeClient:
    """
    Thin wrapper around the YouTube Data API v3 discovery client.

    Attributes:
        timeout: Socket timeout in seconds for every API call.

    Example:
        client = YouTubeClient(api_key=config.youtube.api_key, timeout=30)
        response = client.playlist_items("PLxxxxxxxx")
        for item in response["items"]:
            print(item["snippet"]["title"])
    """

    def __init__(self, api_key: str, timeout: float = 30.0) -> None:
        """
        Build the discovery client.

        Args:
            api_key: YouTube Data API v3 key.
            timeout: Socket timeout in seconds.

        Raises:
            TransportError: If the discovery client cannot be built.
        """
        self.timeout = timeout
        try:
            self._youtube = build(
                "youtube",
                "v3",
                developerKey=api_key,
                http=httplib2.Http(timeout=timeout),
                cache_discovery=False,
            )
        except (HttpError, httplib2.HttpLib2Error, OSError) as e:
            raise TransportError(
                f"Failed to initialize YouTube API client: {e}",
                details={"original_error": str(e)}
            ) from e

    def playlist_items(
        self,
        playlist_id: str,
        page_token: str | None = None,
        max_results: int = MAX_PAGE_SIZE
    ) -> dict[str, Any]:
        """
        Fetch one page of a playlist's items.

        Args:
            playlist_id: YouTube playlist id.
            page_token: Cursor from the previous page's 'nextPageToken',
                        or None for the first page.
            max_results: Page size, clamped to 1..50.

        Returns:
            The raw playlistItems.list response. Relevant keys:
            - items: List of playlist item objects
            - nextPageToken: Cursor for the next page (absent on the last page)
            - pageInfo: {'totalResults': ..., 'resultsPerPage': ...}

        Raises:
            TransportError: On HTTP errors (invalid key, exhausted quota,
                            playlist not found) or network failures.
        """
        params: dict[str, Any] = {
            "part": PLAYLIST_ITEM_PARTS,
            "playlistId": playlist_id,
            "maxResults": max(1, min(max_results, MAX_PAGE_SIZE)),
        }
        if page_token:
            params["pageToken"] = page_token

        try:
            return self._youtube.playlistItems().list(**params).execute()
        except HttpError as e:
            status = _http_status(e)
            quota = _is_quota_error(e)
            if status == 404:
                message = f"Playlist not found: {playlist_id}"
            elif quota:
                message = f"YouTube API quota exhausted while listing playlist: {playlist_id}"
            else:
                message = f"Failed to list playlist items: HTTP {status} {e.reason}"
            raise TransportError(
                message,
                details={
                    "playlist_id": playlist_id,
                    "page_token": page_token,
                    "http_status": status,
                    "original_error": str(e),
                },
                http_status=status,
                is_quota_error=quota
            ) from e
        except (httplib2.HttpLib2Error, OSError) as e:
            raise TransportError(
                f"Network error while listing playlist items: {e}",
                details={
                    "playlist_id": playlist_id,
                    "page_token": page_token,
                    "original_error": str(e),
                }
            ) from e
