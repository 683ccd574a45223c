"""
yt-playlist-downloader: Mirror YouTube playlists to local storage.

This package enumerates YouTube playlists through the YouTube Data API,
writes one JSON record per available video and downloads every thumbnail
variant of each video.

Architecture:
    The sync of one playlist runs in two steps:

    STEP 1 (youtube/): Enumerate the playlist
        - Page through playlistItems.list (50 items per page)
        - Skip private and deleted entries
        - Map each remaining entry to a Video

    STEP 2 (storage/, sync/): Mirror every video, in parallel
        - Write videos/<video_id>.json
        - Download thumbnails/<video_id>/<image file> for every variant

Modules:
    core/       - Configuration, logging, progress bars, exceptions
    youtube/    - Data models, API client and playlist enumeration (STEP 1)
    storage/    - Record store and thumbnail downloads (STEP 2)
    sync/       - Orchestration across videos and playlists
    utils/      - Utility functions
    cli.py      - Command-line interface

Usage:
    Command Line:
        ytpl sync "https://www.youtube.com/playlist?list=PL..."
        ytpl sync PLaaa PLbbb --continue-on-error
        ytpl videos

    Python API:
        from yt_playlist_downloader import load_config, setup_logging, create_synchronizer

        config = load_config()
        setup_logging(config.output.directory)

        synchronizer = create_synchronizer(config)
        videos = synchronizer.sync_playlists(list(config.sync.playlists))

Configuration:
    Requires a config.yaml file in the current directory:

        youtube:
          api_key: "your_api_key"

        output:
          directory: "~/YouTube/Playlists"

        sync:
          playlists:
            - "PLxxxxxxxx"
          threads: 4

Dependencies:
    - google-api-python-client: YouTube Data API v3
    - requests: Thumbnail downloads
    - click / rich-click: CLI
    - rich: Progress bars
    - tqdm: Progress-bar-safe console logging
    - pyyaml: Configuration file parsing
    - python-dotenv: API key from .env
"""

__version__ = "0.1.0"
__author__ = "yt-playlist-downloader"
__license__ = "MIT"

# Convenience imports for common usage
from yt_playlist_downloader.core import (
    Config,
    ConfigError,
    MalformedResponseError,
    MalformedURLError,
    StorageError,
    TransportError,
    YtPlaylistError,
    get_logger,
    load_config,
    setup_logging,
)
from yt_playlist_downloader.sync import PlaylistSynchronizer, create_synchronizer
from yt_playlist_downloader.youtube import Thumbnail, ThumbnailSet, Video

__all__ = [
    # Version
    "__version__",
    # Core
    "Config",
    "load_config",
    "setup_logging",
    "get_logger",
    # Exceptions
    "YtPlaylistError",
    "ConfigError",
    "TransportError",
    "MalformedResponseError",
    "MalformedURLError",
    "StorageError",
    # Sync
    "PlaylistSynchronizer",
    "create_synchronizer",
    # Models
    "Thumbnail",
    "ThumbnailSet",
    "Video",
]
