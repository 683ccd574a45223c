"""
Playlist synchronization for yt-playlist-downloader.

This module ties the pipeline together. For each playlist:

    1. Enumerate the available videos (PlaylistFetcher)
    2. Ensure the records directory exists
    3. For every video, in parallel on a bounded thread pool:
       a. Write videos/<video_id>.json (VideoRecordStore)
       b. Download thumbnails/<video_id>/* (ThumbnailMaterializer)
    4. Return the videos in playlist order

Every run is a full resync: records and thumbnails are rewritten from the
current API data, nothing is diffed against the previous run.

Error Policy:
    Enumeration errors (API failure, malformed response) always propagate
    and stop the run, including the remaining playlists of sync_playlists().

    Per-video errors (record write, thumbnail download) depend on
    continue_on_error:
    - False (default): the first failure stops the playlist. Videos not yet
      started are cancelled, running ones are allowed to finish, every
      failure is logged and the first one is raised.
    - True: every failure is logged to sync_failures.log and recorded in
      synchronizer.failures; the video still appears in the result.

Usage:
    from yt_playlist_downloader.sync import create_synchronizer

    synchronizer = create_synchronizer(config)
    videos = synchronizer.sync_playlists(["PLaaa", "PLbbb"])
    print(f"Synced {synchronizer.stats.synced}/{synchronizer.stats.total}")
"""

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path

from yt_playlist_downloader.core.config import Config
from yt_playlist_downloader.core.logger import (
    format_synced_message,
    get_logger,
    log_sync_failure,
)
from yt_playlist_downloader.core.progress import SyncProgressBar
from yt_playlist_downloader.storage.records import VideoRecordStore
from yt_playlist_downloader.storage.thumbnails import (
    DEFAULT_THUMBNAIL_WORKERS,
    BytesFetcher,
    ImageFetcher,
    ThumbnailMaterializer,
)
from yt_playlist_downloader.youtube.client import YouTubeClient
from yt_playlist_downloader.youtube.fetcher import PlaylistFetcher, PlaylistItemsSource
from yt_playlist_downloader.youtube.models import Video

logger = get_logger(__name__)


@dataclass
class SyncStats:
    """
    Statistics accumulated over all playlists synced by one synchronizer.

    Attributes:
        playlists: Number of playlists enumerated.
        total: Number of available videos enumerated.
        synced: Videos whose record and thumbnails were all written.
        failed: Videos with a failed record write or thumbnail download.
    """

    playlists: int = 0
    total: int = 0
    synced: int = 0
    failed: int = 0

    @property
    def success_rate(self) -> float:
        """Calculate success rate as percentage."""
        if self.total == 0:
            return 0.0
        return (self.synced / self.total) * 100


@dataclass(frozen=True)
class VideoFailure:
    """One per-video failure: which playlist, which video, what went wrong."""

    playlist_id: str
    video_id: str
    error: Exception = field(compare=False)


class PlaylistSynchronizer:
    """
    Mirrors playlists to the records and thumbnails directories.

    Attributes:
        threads: Number of videos processed in parallel.
        continue_on_error: Per-video error policy (see module docstring).
        show_progress: Show a progress bar per playlist.
        stats: SyncStats accumulated across calls.
        failures: VideoFailure entries recorded across calls, in the order
                  the failures were observed.

    Thread Safety:
        sync_playlist() itself must be called from one thread at a time.
        Internally, videos are handed to worker threads; each worker only
        touches files keyed by its own video id.
    """

    def __init__(
        self,
        fetcher: PlaylistFetcher,
        record_store: VideoRecordStore,
        materializer: ThumbnailMaterializer,
        threads: int = 4,
        continue_on_error: bool = False,
        show_progress: bool = False
    ) -> None:
        self._fetcher = fetcher
        self._record_store = record_store
        self._materializer = materializer
        self.threads = max(1, threads)
        self.continue_on_error = continue_on_error
        self.show_progress = show_progress
        self.stats = SyncStats()
        self.failures: list[VideoFailure] = []

    def sync_playlist(self, playlist_id: str) -> list[Video]:
        """
        Synchronize one playlist.

        Args:
            playlist_id: YouTube playlist id.

        Returns:
            All available videos of the playlist, in playlist order. With
            continue_on_error, videos whose files failed are included.

        Raises:
            TransportError: If enumeration fails, or (abort mode) a thumbnail
                            download fails.
            MalformedResponseError: If the API response is malformed.
            MalformedURLError: (abort mode) If a thumbnail URL has no filename.
            StorageError: If a directory or file cannot be written
                          (per-video failures only in abort mode).
        """
        videos = self._fetcher.enumerate_playlist(playlist_id)
        self.stats.playlists += 1
        self.stats.total += len(videos)

        self._record_store.ensure_directory()

        if not videos:
            logger.info(f"Playlist {playlist_id} has no available videos")
            return videos

        logger.info(
            f"Syncing {len(videos)} videos from {playlist_id} with {self.threads} threads"
        )
        self._process_videos(playlist_id, videos)
        return videos

    def sync_playlists(self, playlist_ids: list[str]) -> list[Video]:
        """
        Synchronize several playlists one after another.

        Returns:
            The concatenation of every sync_playlist() result, in the order
            the playlist ids were given.

        Raises:
            Whatever sync_playlist() raises; remaining playlists are not synced.
        """
        logger.info(f"Updating playlists: {', '.join(playlist_ids)}")

        videos: list[Video] = []
        for playlist_id in playlist_ids:
            videos.extend(self.sync_playlist(playlist_id))

        logger.info(
            f"Sync complete: {self.stats.synced}/{self.stats.total} videos synced, "
            f"{self.stats.failed} failed, {self.stats.playlists} playlists"
        )
        return videos

    def sync_video(self, video: Video) -> list[Path]:
        """
        Write the record of one video, then its thumbnails.

        Returns:
            Written thumbnail paths.
        """
        self._record_store.save(video)
        return self._materializer.materialize(video)

    def load_all_videos(self) -> list[Video]:
        """Read back every persisted record (ordered by file name)."""
        return self._record_store.load_all_videos()

    def _process_videos(self, playlist_id: str, videos: list[Video]) -> None:
        """
        Run sync_video() for every video on the thread pool.

        Raises:
            The first per-video failure, unless continue_on_error is set.
        """
        progress = SyncProgressBar(total=len(videos), description=playlist_id) if self.show_progress else None
        errors: list[Exception] = []
        seen: set[Future] = set()
        future_to_video: dict[Future, Video] = {}

        executor = ThreadPoolExecutor(max_workers=min(self.threads, len(videos)))
        if progress is not None:
            progress.start()
        try:
            for video in videos:
                future_to_video[executor.submit(self.sync_video, video)] = video

            for future in as_completed(future_to_video):
                seen.add(future)
                error = self._handle_outcome(playlist_id, future_to_video[future], future, progress)
                if error is not None:
                    errors.append(error)
                    if not self.continue_on_error:
                        logger.error(
                            f"Aborting playlist {playlist_id}: waiting for running videos to finish"
                        )
                        break
        finally:
            executor.shutdown(wait=True, cancel_futures=True)
            if progress is not None:
                progress.stop()

        # Videos that were already running when the playlist was aborted
        for future, video in future_to_video.items():
            if future in seen or future.cancelled():
                continue
            error = self._handle_outcome(playlist_id, video, future, progress)
            if error is not None:
                errors.append(error)

        if errors and not self.continue_on_error:
            raise errors[0]

    def _handle_outcome(
        self,
        playlist_id: str,
        video: Video,
        future: Future,
        progress: SyncProgressBar | None
    ) -> Exception | None:
        """Update stats, progress and logs for one finished video; return its error."""
        error = future.exception()

        if error is None:
            self.stats.synced += 1
            logger.debug(format_synced_message(video.video_id, video.title, len(future.result())))
        else:
            self.stats.failed += 1
            self.failures.append(VideoFailure(playlist_id, video.video_id, error))
            log_sync_failure(logger, playlist_id, video.video_id, video.title, str(error))

        if progress is not None:
            progress.update(success=error is None)

        return error


def create_synchronizer(
    config: Config,
    client: PlaylistItemsSource | None = None,
    image_fetcher: BytesFetcher | None = None,
    show_progress: bool = False
) -> PlaylistSynchronizer:
    """
    Build a PlaylistSynchronizer from the application configuration.

    Args:
        config: Loaded configuration.
        client: Listing client. Defaults to a YouTubeClient with the
                configured API key and timeout.
        image_fetcher: Thumbnail fetcher. Defaults to an ImageFetcher with
                       the configured timeout.
        show_progress: Show a progress bar per playlist.

    Returns:
        A ready-to-use synchronizer.

    Raises:
        TransportError: If the YouTube client cannot be initialized.
    """
    if client is None:
        client = YouTubeClient(config.youtube.api_key, config.youtube.request_timeout)
    if image_fetcher is None:
        image_fetcher = ImageFetcher(
            timeout=config.youtube.request_timeout,
            pool_maxsize=config.sync.threads * DEFAULT_THUMBNAIL_WORKERS
        )

    return PlaylistSynchronizer(
        fetcher=PlaylistFetcher(client),
        record_store=VideoRecordStore(config.output.videos_directory),
        materializer=ThumbnailMaterializer(image_fetcher, config.output.thumbnails_directory),
        threads=config.sync.threads,
        continue_on_error=config.sync.continue_on_error,
        show_progress=show_progress
    )
