"""
Playlist synchronization for yt-playlist-downloader.

Usage:
    from yt_playlist_downloader.sync import create_synchronizer

    synchronizer = create_synchronizer(config)
    videos = synchronizer.sync_playlists(config.sync.playlists)
"""

from yt_playlist_downloader.sync.synchronizer import (
    PlaylistSynchronizer,
    SyncStats,
    VideoFailure,
    create_synchronizer,
)

__all__ = [
    "PlaylistSynchronizer",
    "SyncStats",
    "VideoFailure",
    "create_synchronizer",
]
