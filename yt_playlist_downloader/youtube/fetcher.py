"""
Playlist enumerator for yt-playlist-downloader.

This module drives the paginated playlistItems.list endpoint to completion
and turns every available entry into a Video.

Workflow:
    1. Request the first page (50 items) without a cursor
    2. Drop entries whose privacy status is not public/unlisted
    3. Map the remaining entries to Video objects
    4. Repeat with the page's nextPageToken until a page has none
    5. Return all videos in playlist order (page order, then in-page order)

Private and deleted videos stay in a playlist as placeholders with
status.privacyStatus "private" (or no status at all). They carry no usable
metadata, so they are filtered out before mapping and never reach storage.
"""

from typing import Any, Protocol

from yt_playlist_downloader.core.exceptions import MalformedResponseError
from yt_playlist_downloader.core.logger import get_logger
from yt_playlist_downloader.youtube.models import Video

logger = get_logger(__name__)

PAGE_SIZE = 50

AVAILABLE_PRIVACY_STATUSES = frozenset({"public", "unlisted"})


class PlaylistItemsSource(Protocol):
    """Anything that can list one page of a playlist (YouTubeClient, or a test double)."""

    def playlist_items(
        self,
        playlist_id: str,
        page_token: str | None = None,
        max_results: int = PAGE_SIZE
    ) -> dict[str, Any]:
        ...


def is_video_available(privacy_status: str | None) -> bool:
    """
    Check whether a playlist entry can be mirrored.

    Args:
        privacy_status: The entry's status.privacyStatus, or None if absent.

    Returns:
        True for "public" and "unlisted", False for anything else
        (including "private" and None).
    """
    return privacy_status in AVAILABLE_PRIVACY_STATUSES


def item_privacy_status(item: dict[str, Any]) -> str | None:
    """Return status.privacyStatus of a raw item, or None when it is absent or not a string."""
    status = item.get("status")
    if not isinstance(status, dict):
        return None
    privacy_status = status.get("privacyStatus")
    return privacy_status if isinstance(privacy_status, str) else None


class PlaylistFetcher:
    """
    Enumerates playlists through a listing client.

    The client is only used for reads and can be shared by every
    enumeration of the run.

    Example:
        fetcher = PlaylistFetcher(YouTubeClient(api_key))
        videos = fetcher.enumerate_playlist("PLxxxxxxxx")
    """

    def __init__(self, client: PlaylistItemsSource) -> None:
        self._client = client

    def enumerate_playlist(self, playlist_id: str) -> list[Video]:
        """
        Fetch every available video of a playlist.

        Args:
            playlist_id: YouTube playlist id.

        Returns:
            Videos in playlist order. Unavailable entries are skipped.

        Raises:
            TransportError: If any page request fails. No partial result
                            is returned.
            MalformedResponseError: If a page has no 'items' list or an
                                    available entry lacks a required field.
        """
        logger.info(f"Fetching playlist: {playlist_id}")

        videos: list[Video] = []
        skipped = 0
        pages = 0
        page_token: str | None = None

        while True:
            logger.debug(f"Requesting playlist page: playlist={playlist_id} page_token={page_token}")
            response = self._client.playlist_items(
                playlist_id,
                page_token=page_token,
                max_results=PAGE_SIZE
            )
            pages += 1

            items = self._page_items(response, playlist_id, page_token)
            for item in items:
                if not is_video_available(item_privacy_status(item)):
                    skipped += 1
                    logger.debug(
                        f"Skipping unavailable item {item.get('id')} "
                        f"(status: {item_privacy_status(item)})"
                    )
                    continue
                videos.append(Video.from_playlist_item(item))

            next_token = response.get("nextPageToken") or None
            if next_token is None:
                break
            if next_token == page_token:
                raise MalformedResponseError(
                    f"Playlist {playlist_id} returned the same page token twice",
                    details={"playlist_id": playlist_id, "page_token": page_token},
                    field="nextPageToken"
                )
            page_token = next_token

        logger.info(
            f"Playlist {playlist_id}: {len(videos)} available videos "
            f"({skipped} unavailable skipped, {pages} pages)"
        )
        return videos

    @staticmethod
    def _page_items(
        response: Any,
        playlist_id: str,
        page_token: str | None
    ) -> list[dict[str, Any]]:
        """Extract the 'items' list of a page, validating its shape."""
        items = response.get("items") if isinstance(response, dict) else None
        if not isinstance(items, list):
            raise MalformedResponseError(
                f"Playlist page has no 'items' list: {playlist_id}",
                details={"playlist_id": playlist_id, "page_token": page_token},
                field="items"
            )

        for index, item in enumerate(items):
            if not isinstance(item, dict):
                raise MalformedResponseError(
                    f"Playlist item {index} is not an object: {playlist_id}",
                    details={"playlist_id": playlist_id, "page_token": page_token},
                    field=f"items[{index}]"
                )
        return items


def fetch_playlist_videos(client: PlaylistItemsSource, playlist_id: str) -> list[Video]:
    """
    Convenience entry point: enumerate one playlist with a fresh fetcher.

    Args:
        client: Listing client (usually a YouTubeClient).
        playlist_id: YouTube playlist id.

    Returns:
        Available videos in playlist order.
    """
    return PlaylistFetcher(client).enumerate_playlist(playlist_id)
