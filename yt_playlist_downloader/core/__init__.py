"""
Core module for yt-playlist-downloader.

This module provides the foundational components used throughout the application:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading and validation
    - logger: Logging system with multiple outputs
    - progress: Rich progress bars

Usage:
    from yt_playlist_downloader.core import (
        Config, load_config,
        setup_logging, get_logger,
        YtPlaylistError, ConfigError, TransportError
    )
"""

from yt_playlist_downloader.core.config import (
    Config,
    OutputConfig,
    SyncConfig,
    YouTubeConfig,
    load_config,
)
from yt_playlist_downloader.core.exceptions import (
    ConfigError,
    MalformedResponseError,
    MalformedURLError,
    StorageError,
    TransportError,
    YtPlaylistError,
)
from yt_playlist_downloader.core.logger import (
    get_logger,
    log_sync_failure,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "YouTubeConfig",
    "OutputConfig",
    "SyncConfig",
    "load_config",
    # Exceptions
    "YtPlaylistError",
    "ConfigError",
    "TransportError",
    "MalformedResponseError",
    "MalformedURLError",
    "StorageError",
    # Logger
    "setup_logging",
    "get_logger",
    "log_sync_failure",
    "shutdown_logging",
]
