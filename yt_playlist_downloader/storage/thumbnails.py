"""
Thumbnail download and storage for yt-playlist-downloader.

Every video gets its own directory under the thumbnails root, holding one
image per available thumbnail variant. The local filename is the last path
segment of the image URL:

    thumbnails_directory/
    └── dQw4w9WgXcQ/
        ├── default.jpg        # 120x90
        ├── mqdefault.jpg      # 320x180
        ├── hqdefault.jpg      # 480x360
        ├── sddefault.jpg      # 640x480 (if available)
        └── maxresdefault.jpg  # 1280x720 (if available)

Variants of a video are downloaded in parallel. A failed variant never
stops the others; once all of them have been attempted, the first failure
(in variant order) is raised to the caller. Files already written are kept.

Usage:
    from yt_playlist_downloader.storage.thumbnails import ImageFetcher, ThumbnailMaterializer

    with ImageFetcher(timeout=30) as fetcher:
        materializer = ThumbnailMaterializer(fetcher, config.output.thumbnails_directory)
        paths = materializer.materialize(video)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import requests
from requests.adapters import HTTPAdapter

from yt_playlist_downloader.core.config import DEFAULT_THREADS
from yt_playlist_downloader.core.exceptions import MalformedURLError, StorageError, TransportError
from yt_playlist_downloader.core.logger import get_logger
from yt_playlist_downloader.utils import ensure_directory, run_in_parallel
from yt_playlist_downloader.youtube.models import Thumbnail, Video

logger = get_logger(__name__)

DEFAULT_USER_AGENT = "yt-playlist-downloader/0.1.0"

# Upper bound on simultaneous downloads for one video (there are at most 5 variants)
DEFAULT_THUMBNAIL_WORKERS = 5

# Default videos in parallel (sync.threads) times variants in parallel per video
DEFAULT_POOL_MAXSIZE = DEFAULT_THREADS * DEFAULT_THUMBNAIL_WORKERS


@dataclass(frozen=True)
class ThumbnailTask:
    """One variant to download: where it comes from and where it goes."""
    variant: str
    video_id: str
    thumbnail: Thumbnail
    dest: Path


class BytesFetcher(Protocol):
    """Anything that can fetch the bytes behind a URL (ImageFetcher, or a test double)."""

    def fetch(self, url: str) -> bytes:
        ...


class ImageFetcher:
    """
    Downloads images over HTTP with a shared requests.Session.

    The session keeps connections to the thumbnail CDN alive between
    downloads. It can be used as a context manager to close the session.

    Example:
        fetcher = ImageFetcher(timeout=30)
        data = fetcher.fetch("https://i.ytimg.com/vi/dQw4w9WgXcQ/hqdefault.jpg")
        fetcher.close()
    """

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
        pool_maxsize: int = DEFAULT_POOL_MAXSIZE
    ) -> None:
        """
        Args:
            timeout: Timeout in seconds for every download.
            user_agent: User-Agent header sent with every request.
            pool_maxsize: Connections kept per host. Should cover every worker
                          thread that downloads at the same time.
        """
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

        adapter = HTTPAdapter(pool_maxsize=max(1, pool_maxsize))
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

    def fetch(self, url: str) -> bytes:
        """
        Download the content at url.

        Raises:
            TransportError: On connection errors, timeouts and non-2xx responses.
        """
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise TransportError(
                f"Failed to download thumbnail: HTTP {status}",
                details={"url": url, "original_error": str(e)},
                http_status=status
            ) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(
                f"Failed to download thumbnail: {e}",
                details={"url": url, "original_error": str(e)}
            ) from e

        return response.content

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "ImageFetcher":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def thumbnail_filename(url: str) -> str:
    """
    Derive the local filename of a thumbnail from its URL.

    Args:
        url: Thumbnail URL.

    Returns:
        The substring after the last '/'.

    Raises:
        MalformedURLError: If the URL contains no '/' or ends with '/'.

    Examples:
        thumbnail_filename("https://i.ytimg.com/vi/ID/hqdefault.jpg")
        # Returns: "hqdefault.jpg"
    """
    _, sep, filename = url.rpartition("/")
    if not sep or not filename:
        raise MalformedURLError(url)
    return filename


class ThumbnailMaterializer:
    """
    Writes the thumbnail set of a video to <thumbnails_root>/<video_id>/.

    Attributes:
        thumbnails_root: Root directory for all per-video thumbnail folders.
        max_workers: Maximum parallel downloads per video.
    """

    def __init__(
        self,
        fetcher: BytesFetcher,
        thumbnails_root: Path,
        max_workers: int = DEFAULT_THUMBNAIL_WORKERS
    ) -> None:
        self._fetcher = fetcher
        self.thumbnails_root = thumbnails_root
        self.max_workers = max(1, max_workers)

    def thumbnail_dir(self, video_id: str) -> Path:
        """Return the thumbnail directory of a video."""
        return self.thumbnails_root / video_id

    def materialize(self, video: Video) -> list[Path]:
        """
        Download every present thumbnail variant of a video.

        Args:
            video: The video whose ThumbnailSet is downloaded.

        Returns:
            Written file paths in variant order (default, high, medium,
            standard, maxres).

        Raises:
            MalformedURLError: If a variant URL has no filename. Raised before
                               anything is downloaded.
            StorageError: If the directory or a file cannot be written.
            TransportError: If a download fails.
            When several variants fail, the first one in variant order is
            raised after all variants were attempted.

        Behavior:
            1. Resolve the destination filename of every variant
            2. Create <thumbnails_root>/<video_id>/ (idempotent)
            3. Download and write all variants in parallel, overwriting
            4. Log every failure, then raise the first
        """
        dest_dir = self.thumbnail_dir(video.video_id)
        tasks = self._plan(video, dest_dir)

        try:
            ensure_directory(dest_dir)
        except OSError as e:
            raise StorageError(
                f"Failed to create thumbnail directory for {video.video_id}: {e}",
                details={"video_id": video.video_id, "original_error": str(e)},
                path=str(dest_dir)
            ) from e

        results = run_in_parallel(
            self._download,
            tasks,
            num_threads=self.max_workers,
            description=video.video_id,
            show_progress=False
        )

        written: list[Path] = []
        failures: list[tuple[ThumbnailTask, Exception]] = []
        for task, result in results:
            if isinstance(result, Exception):
                failures.append((task, result))
            else:
                written.append(result)

        for task, error in failures:
            logger.warning(f"Thumbnail '{task.variant}' failed for {video.video_id}: {error}")

        if failures:
            raise failures[0][1]

        return written

    def _plan(self, video: Video, dest_dir: Path) -> list[ThumbnailTask]:
        """
        Resolve the destination of every present variant.

        A destination already claimed by an earlier variant is not written twice.
        """
        tasks: list[ThumbnailTask] = []
        claimed: set[str] = set()

        for name, thumbnail in video.thumbnails.variants():
            filename = thumbnail_filename(thumbnail.url)
            if filename in claimed:
                logger.debug(
                    f"Skipping thumbnail '{name}' for {video.video_id}: "
                    f"{filename} already written by another variant"
                )
                continue
            claimed.add(filename)
            tasks.append(ThumbnailTask(name, video.video_id, thumbnail, dest_dir / filename))

        return tasks

    def _download(self, task: ThumbnailTask) -> Path:
        thumbnail, dest = task.thumbnail, task.dest
        data = self._fetcher.fetch(thumbnail.url)

        try:
            with open(dest, "wb") as f:
                f.write(data)
        except OSError as e:
            raise StorageError(
                f"Failed to write thumbnail for {task.video_id}: {e}",
                details={"video_id": task.video_id, "url": thumbnail.url, "original_error": str(e)},
                path=str(dest)
            ) from e

        logger.debug(f"Downloaded thumbnail: {thumbnail.url} -> {dest}")
        return dest
