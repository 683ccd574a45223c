"""
YouTube integration module for yt-playlist-downloader.

Components:
    - Thumbnail, ThumbnailSet, Video: Data models for playlist entries
    - YouTubeClient: YouTube Data API v3 wrapper (playlistItems.list)
    - PlaylistFetcher: Paginated enumeration with availability filtering

Usage:
    from yt_playlist_downloader.youtube import YouTubeClient, PlaylistFetcher

    fetcher = PlaylistFetcher(YouTubeClient(api_key))
    videos = fetcher.enumerate_playlist("PLxxxxxxxx")
"""

from yt_playlist_downloader.youtube.client import YouTubeClient
from yt_playlist_downloader.youtube.fetcher import (
    PlaylistFetcher,
    fetch_playlist_videos,
    is_video_available,
    item_privacy_status,
)
from yt_playlist_downloader.youtube.models import Thumbnail, ThumbnailSet, Video

__all__ = [
    # Models
    "Thumbnail",
    "ThumbnailSet",
    "Video",
    # Client
    "YouTubeClient",
    # Enumeration
    "PlaylistFetcher",
    "fetch_playlist_videos",
    "is_video_available",
    "item_privacy_status",
]
