"""
Command-line interface for yt-playlist-downloader.

This module implements the CLI using Click. rich-click is used for the
help output colors.

Commands:
    ytpl sync [PLAYLIST]...             Mirror playlists (ids or URLs)
    ytpl sync                           Mirror the playlists listed in config.yaml
    ytpl videos                         List the video records already on disk

Options (sync):
    --config <path>                     Use another config file
    --threads <n>                       Videos processed in parallel
    --continue-on-error                 Log per-video failures and keep going
    --verbose                           Show DEBUG messages on the console
    --no-progress                       Hide the progress bars

Usage:
    ytpl sync "https://www.youtube.com/playlist?list=PL..."
    ytpl sync PLaaa PLbbb --threads 8 --continue-on-error
    ytpl videos

Exit Codes:
    0    Every video synced
    1    Configuration error, sync error, or failures recorded with
         --continue-on-error
    2    Usage error (no playlist given and none configured)
    130  Interrupted by user
"""

import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

import rich_click as click

# Configure rich-click for better help formatting
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = ""
click.rich_click.MAX_WIDTH = 100
click.rich_click.OPTION_GROUPS = {
    "ytpl sync": [
        {
            "name": "Sync Options",
            "options": ["--threads", "--continue-on-error"],
        },
        {
            "name": "Output",
            "options": ["--config", "--verbose", "--no-progress", "--help"],
        },
    ],
}

from yt_playlist_downloader import __version__
from yt_playlist_downloader.core import (
    Config,
    ConfigError,
    TransportError,
    YtPlaylistError,
    get_logger,
    load_config,
    setup_logging,
    shutdown_logging,
)
from yt_playlist_downloader.storage import ImageFetcher, VideoRecordStore
from yt_playlist_downloader.storage.thumbnails import DEFAULT_THUMBNAIL_WORKERS
from yt_playlist_downloader.sync import PlaylistSynchronizer, create_synchronizer
from yt_playlist_downloader.utils import extract_playlist_id

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="ytpl")
def cli() -> None:
    """
    yt-playlist-downloader: Mirror YouTube playlists to local storage.

    Writes one JSON record per available video and downloads every
    thumbnail variant next to it.

    \b
    BASIC USAGE:
        ytpl sync "https://www.youtube.com/playlist?list=PL..."
        ytpl sync                   # playlists from config.yaml
        ytpl videos                 # list synced records

    \b
    CONFIGURATION:
        Requires config.yaml in the current directory (or --config).
        The API key may come from YOUTUBE_API_KEY instead.
    """


@cli.command()
@click.argument("playlists", nargs=-1, metavar="[PLAYLIST]...")
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file (default: ./config.yaml)"
)
@click.option(
    "--threads",
    type=click.IntRange(min=1),
    default=None,
    help="Videos processed in parallel (overrides sync.threads)"
)
@click.option(
    "--continue-on-error",
    is_flag=True,
    help="Log per-video failures and keep going instead of aborting"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Show DEBUG messages on the console"
)
@click.option(
    "--no-progress",
    is_flag=True,
    help="Hide the progress bars"
)
def sync(
    playlists: tuple[str, ...],
    config_path: Optional[Path],
    threads: Optional[int],
    continue_on_error: bool,
    verbose: bool,
    no_progress: bool
) -> None:
    """
    Mirror playlists to the configured output directories.

    PLAYLIST may be a playlist id or any YouTube URL with a 'list'
    parameter. Without arguments, sync.playlists from config.yaml is used.
    """
    try:
        config = load_config(config_path)
    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    playlist_ids = _resolve_playlist_ids(playlists, config)
    config = _apply_overrides(config, threads, continue_on_error)

    setup_logging(config.output.directory, verbose=verbose)

    try:
        with ImageFetcher(
            timeout=config.youtube.request_timeout,
            pool_maxsize=config.sync.threads * DEFAULT_THUMBNAIL_WORKERS
        ) as image_fetcher:
            synchronizer = create_synchronizer(
                config,
                image_fetcher=image_fetcher,
                show_progress=not no_progress
            )
            synchronizer.sync_playlists(playlist_ids)

        _print_summary(synchronizer)

        if synchronizer.failures:
            click.echo(
                f"{len(synchronizer.failures)} videos failed, see logs in "
                f"{config.output.directory / 'logs'}",
                err=True
            )
            sys.exit(1)

        logger.info("yt-playlist-downloader completed successfully")

    except TransportError as e:
        click.echo(f"Network error: {e.message}", err=True)
        if e.is_quota_error:
            click.echo("The daily YouTube API quota is exhausted, try again tomorrow", err=True)
        elif e.http_status in (400, 403):
            click.echo("Check youtube.api_key in config.yaml (or YOUTUBE_API_KEY)", err=True)
        logger.error(f"Network error: {e.message}", exc_info=True)
        sys.exit(1)

    except YtPlaylistError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Error: {e.message}", exc_info=True)
        sys.exit(1)

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        logger.info("Interrupted by user")
        sys.exit(130)

    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        logger.exception("Unexpected error")
        sys.exit(1)

    finally:
        shutdown_logging()


@cli.command()
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file (default: ./config.yaml)"
)
def videos(config_path: Optional[Path]) -> None:
    """List the video records already synced, ordered by video id."""
    try:
        config = load_config(config_path)
        records = VideoRecordStore(config.output.videos_directory).load_all_videos()
    except YtPlaylistError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    for video in records:
        click.echo(f"{video.video_id}  {video.published_at:%Y-%m-%d}  {video.title}")

    click.echo(f"{len(records)} videos in {config.output.videos_directory}", err=True)


def _resolve_playlist_ids(playlists: tuple[str, ...], config: Config) -> list[str]:
    """Playlist ids from the command line, else from config.yaml."""
    if not playlists:
        if not config.sync.playlists:
            raise click.UsageError(
                "No playlist given and 'sync.playlists' is empty in config.yaml"
            )
        return list(config.sync.playlists)

    playlist_ids = []
    for value in playlists:
        try:
            playlist_ids.append(extract_playlist_id(value))
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="PLAYLIST") from e
    return playlist_ids


def _apply_overrides(config: Config, threads: Optional[int], continue_on_error: bool) -> Config:
    """Return a Config with the command-line options applied to the sync section."""
    sync_config = replace(
        config.sync,
        threads=threads if threads is not None else config.sync.threads,
        continue_on_error=continue_on_error or config.sync.continue_on_error
    )
    return replace(config, sync=sync_config)


def _print_summary(synchronizer: PlaylistSynchronizer) -> None:
    """Log the final statistics of a run."""
    stats = synchronizer.stats

    logger.info("=" * 60)
    logger.info("SYNC STATISTICS")
    logger.info("=" * 60)
    logger.info(f"Playlists:         {stats.playlists}")
    logger.info(f"Videos:            {stats.total}")
    logger.info(f"Synced:            {stats.synced}")
    logger.info(f"Failed:            {stats.failed}")
    logger.info(f"Success rate:      {stats.success_rate:.1f}%")
    logger.info("=" * 60)


def main() -> None:
    """
    Entry point for the CLI.

    This function is called when running `ytpl` from the command line.
    """
    cli()


if __name__ == "__main__":
    main()
