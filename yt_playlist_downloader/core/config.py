"""
Configuration management for yt-playlist-downloader.

This module handles loading, validating, and providing access to the
application configuration stored in config.yaml.

The configuration file contains:
    - YouTube Data API key and request timeout
    - Output directories for video records and thumbnails
    - Playlists to synchronize
    - Number of parallel worker threads and the error policy

Configuration File Location:
    The config.yaml file is looked up in the current working directory
    unless an explicit path is given.

API Key:
    The key may be omitted from config.yaml and provided through the
    YOUTUBE_API_KEY environment variable instead. A .env file in the
    working directory is loaded automatically.

Example config.yaml:
    youtube:
      api_key: "your_api_key_here"
      request_timeout: 30

    output:
      directory: "~/YouTube/Playlists"
      videos_directory: null        # defaults to {directory}/videos
      thumbnails_directory: null    # defaults to {directory}/thumbnails

    sync:
      playlists:
        - "PLxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxx"
      threads: 4
      continue_on_error: false
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv

from yt_playlist_downloader.core.exceptions import ConfigError
from yt_playlist_downloader.utils import extract_playlist_id


# Default configuration file name (looked up in current working directory)
CONFIG_FILENAME = "config.yaml"

# Environment variable used when youtube.api_key is not in config.yaml
API_KEY_ENV_VAR = "YOUTUBE_API_KEY"

DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_THREADS = 4


@dataclass(frozen=True)
class YouTubeConfig:
    """
    YouTube Data API configuration.

    Attributes:
        api_key: API key from the Google Cloud console with the
                 YouTube Data API v3 enabled.
        request_timeout: Timeout in seconds for API calls and thumbnail downloads.
    """
    api_key: str
    request_timeout: float


@dataclass(frozen=True)
class OutputConfig:
    """
    Output directory configuration.

    Attributes:
        directory: Base directory (also holds the logs/ subdirectory).
        videos_directory: Where one JSON record per video is written.
        thumbnails_directory: Where one subdirectory of images per video is written.
    """
    directory: Path
    videos_directory: Path
    thumbnails_directory: Path


@dataclass(frozen=True)
class SyncConfig:
    """
    Synchronization behavior configuration.

    Attributes:
        playlists: Playlist ids to synchronize when none are given on the
                   command line. Playlist URLs are reduced to their id.
        threads: Number of videos processed in parallel within a playlist.
        continue_on_error: If True, a failed record write or thumbnail
                           download is logged and the run goes on.
                           If False (default), the first failure aborts the run.
    """
    playlists: tuple[str, ...]
    threads: int
    continue_on_error: bool


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    Created by load_config() and treated as immutable (frozen dataclass).

    Example:
        config = load_config()
        print(f"Records in: {config.output.videos_directory}")
        print(f"Using {config.sync.threads} threads")
    """
    youtube: YouTubeConfig
    output: OutputConfig
    sync: SyncConfig


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration from config.yaml.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for config.yaml in current working directory.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If the config file is not found, has invalid YAML syntax,
                     is missing required fields, or contains invalid values.

    Behavior:
        1. Load .env (if any) so YOUTUBE_API_KEY can come from it
        2. Locate config file (explicit path or CWD/config.yaml)
        3. Read and parse YAML content
        4. Validate structure (required sections exist)
        5. Parse each section, applying defaults
        6. Create and return frozen Config object
    """
    load_dotenv(find_dotenv(usecwd=True))

    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    if not config_path.exists():
        raise ConfigError(
            f"Configuration file not found: {config_path}",
            details={"file_path": str(config_path)}
        )

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )

    _validate_config(raw_config)

    return Config(
        youtube=_parse_youtube_config(raw_config.get("youtube")),
        output=_parse_output_config(raw_config["output"]),
        sync=_parse_sync_config(raw_config.get("sync"))
    )


def _validate_config(raw_config: dict[str, Any]) -> None:
    """
    Validate the raw configuration dictionary structure.

    Only 'output' is mandatory; 'youtube' may be absent when the API key
    comes from the environment, and 'sync' falls back to defaults.
    """
    if "output" not in raw_config:
        raise ConfigError(
            "Missing required section: 'output'",
            details={"missing_section": "output"}
        )

    for section in ("youtube", "output", "sync"):
        value = raw_config.get(section)
        if value is not None and not isinstance(value, dict):
            raise ConfigError(
                f"Section '{section}' must be a dictionary",
                details={"section": section}
            )


def _parse_youtube_config(youtube_section: dict[str, Any] | None) -> YouTubeConfig:
    """
    Parse the YouTube section, falling back to YOUTUBE_API_KEY.

    Raises:
        ConfigError: If no API key is available or the timeout is invalid.
    """
    youtube_section = youtube_section or {}

    api_key = youtube_section.get("api_key")
    if api_key is None:
        api_key = os.environ.get(API_KEY_ENV_VAR, "")

    if not isinstance(api_key, str) or not api_key.strip():
        raise ConfigError(
            f"'youtube.api_key' must be set in config.yaml or via {API_KEY_ENV_VAR}",
            details={"field": "youtube.api_key"}
        )

    timeout = youtube_section.get("request_timeout", DEFAULT_REQUEST_TIMEOUT)
    # bool is an int subclass
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigError(
            "'youtube.request_timeout' must be a positive number",
            details={"field": "youtube.request_timeout", "value": timeout}
        )

    return YouTubeConfig(api_key=api_key.strip(), request_timeout=float(timeout))


def _parse_directory(section: dict[str, Any], field: str, default: Path) -> Path:
    """Expand an optional directory field, or return the default."""
    raw = section.get(field)
    if raw is None:
        return default

    if not isinstance(raw, str) or not raw.strip():
        raise ConfigError(
            f"'output.{field}' must be a non-empty string",
            details={"field": f"output.{field}"}
        )
    return Path(raw.strip()).expanduser().resolve()


def _parse_output_config(output_section: dict[str, Any]) -> OutputConfig:
    """
    Parse and validate the output configuration section.

    Expands ~ to home directory and converts to absolute Paths.
    Does NOT create the directories (that happens at sync time).

    Raises:
        ConfigError: If directory is missing or empty.
    """
    directory = output_section.get("directory", "")

    if not isinstance(directory, str) or not directory.strip():
        raise ConfigError(
            "'output.directory' must be a non-empty string",
            details={"field": "output.directory"}
        )

    path = Path(directory.strip()).expanduser().resolve()

    return OutputConfig(
        directory=path,
        videos_directory=_parse_directory(output_section, "videos_directory", path / "videos"),
        thumbnails_directory=_parse_directory(
            output_section, "thumbnails_directory", path / "thumbnails"
        )
    )


def _parse_sync_config(sync_section: dict[str, Any] | None) -> SyncConfig:
    """
    Parse and validate the sync configuration section.

    Applies defaults if section is missing or fields are not specified.
    Default threads: 4. Default continue_on_error: False. Default playlists: none.

    Raises:
        ConfigError: If playlists is not a list of strings, threads is not a
                     positive integer or continue_on_error is not a boolean.
    """
    playlists: tuple[str, ...] = ()
    threads = DEFAULT_THREADS
    continue_on_error = False

    if sync_section is None:
        return SyncConfig(playlists=playlists, threads=threads, continue_on_error=continue_on_error)

    raw_playlists = sync_section.get("playlists")
    if raw_playlists is not None:
        if not isinstance(raw_playlists, list) or not all(
            isinstance(p, str) and p.strip() for p in raw_playlists
        ):
            raise ConfigError(
                "'sync.playlists' must be a list of playlist ids or URLs",
                details={"field": "sync.playlists"}
            )
        try:
            playlists = tuple(extract_playlist_id(p) for p in raw_playlists)
        except ValueError as e:
            raise ConfigError(
                f"Invalid entry in 'sync.playlists': {e}",
                details={"field": "sync.playlists", "original_error": str(e)}
            ) from e

    raw_threads = sync_section.get("threads")
    if raw_threads is not None:
        if isinstance(raw_threads, bool) or not isinstance(raw_threads, int) or raw_threads < 1:
            raise ConfigError(
                "'sync.threads' must be a positive integer",
                details={"field": "sync.threads", "value": raw_threads}
            )
        threads = raw_threads

    raw_continue = sync_section.get("continue_on_error")
    if raw_continue is not None:
        if not isinstance(raw_continue, bool):
            raise ConfigError(
                "'sync.continue_on_error' must be true or false",
                details={"field": "sync.continue_on_error", "value": raw_continue}
            )
        continue_on_error = raw_continue

    return SyncConfig(
        playlists=playlists,
        threads=threads,
        continue_on_error=continue_on_error
    )
