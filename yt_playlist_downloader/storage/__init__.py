"""
Local storage for yt-playlist-downloader.

Components:
    - VideoRecordStore: One JSON record per video, plus read-back
    - ImageFetcher: HTTP download of thumbnail images
    - ThumbnailMaterializer: Per-video thumbnail directory writer
"""

from yt_playlist_downloader.storage.records import VideoRecordStore
from yt_playlist_downloader.storage.thumbnails import (
    ImageFetcher,
    ThumbnailMaterializer,
    thumbnail_filename,
)

__all__ = [
    "VideoRecordStore",
    "ImageFetcher",
    "ThumbnailMaterializer",
    "thumbnail_filename",
]
