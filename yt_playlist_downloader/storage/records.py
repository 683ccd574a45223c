"""
Video record persistence for yt-playlist-downloader.

Each synchronized video is stored as one pretty-printed JSON file named
after its video id:

    videos_directory/
    ├── dQw4w9WgXcQ.json
    ├── 9bZkp7q19f0.json
    └── ...

Records are rewritten in full on every sync. A write goes to a temporary
sibling file first and is then renamed over the target, so a crash never
leaves a truncated record behind.

Usage:
    from yt_playlist_downloader.storage.records import VideoRecordStore

    store = VideoRecordStore(config.output.videos_directory)
    store.ensure_directory()
    store.save(video)
    videos = store.load_all_videos()
"""

import json
from pathlib import Path

from yt_playlist_downloader.core.exceptions import StorageError
from yt_playlist_downloader.core.logger import get_logger
from yt_playlist_downloader.utils import ensure_directory
from yt_playlist_downloader.youtube.models import Video

logger = get_logger(__name__)

RECORD_SUFFIX = ".json"


class VideoRecordStore:
    """
    Reads and writes one JSON record per video.

    Attributes:
        videos_dir: Directory holding the record files.

    Thread Safety:
        Writes for different video ids touch different files and may run
        concurrently. Two concurrent saves of the same id are not supported.
    """

    def __init__(self, videos_dir: Path) -> None:
        self.videos_dir = videos_dir

    def ensure_directory(self) -> Path:
        """
        Create the records directory if needed.

        Raises:
            StorageError: If the directory cannot be created.
        """
        try:
            return ensure_directory(self.videos_dir)
        except OSError as e:
            raise StorageError(
                f"Failed to create records directory: {e}",
                details={"original_error": str(e)},
                path=str(self.videos_dir)
            ) from e

    def record_path(self, video_id: str) -> Path:
        """Return the record file path for a video id."""
        return self.videos_dir / f"{video_id}{RECORD_SUFFIX}"

    def save(self, video: Video) -> Path:
        """
        Write (or overwrite) the record of a video.

        Args:
            video: The video to persist.

        Returns:
            Path of the written record.

        Raises:
            StorageError: If the file cannot be written.
        """
        path = self.record_path(video.video_id)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        content = json.dumps(video.to_dict(), indent=2, ensure_ascii=False) + "\n"

        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(content)
            tmp_path.replace(path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise StorageError(
                f"Failed to write record for {video.video_id}: {e}",
                details={"video_id": video.video_id, "original_error": str(e)},
                path=str(path)
            ) from e

        logger.debug(f"Wrote record: {path}")
        return path

    def load(self, video_id: str) -> Video:
        """
        Read back the record of a video.

        Raises:
            StorageError: If the record does not exist, is not valid JSON,
                          or lacks required fields.
        """
        return self._load_path(self.record_path(video_id))

    def load_all_videos(self) -> list[Video]:
        """
        Read every record in the records directory.

        Returns:
            Videos ordered by record file name. An empty list if the
            directory does not exist yet.

        Raises:
            StorageError: If any record cannot be read or parsed.
        """
        if not self.videos_dir.is_dir():
            return []

        paths = sorted(self.videos_dir.glob(f"*{RECORD_SUFFIX}"), key=lambda p: p.name)
        videos = [self._load_path(path) for path in paths]
        logger.debug(f"Loaded {len(videos)} records from {self.videos_dir}")
        return videos

    @staticmethod
    def _load_path(path: Path) -> Video:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise StorageError(
                f"Failed to read record: {e}",
                details={"original_error": str(e)},
                path=str(path)
            ) from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StorageError(
                f"Record is not valid JSON: {path.name}",
                details={"original_error": str(e)},
                path=str(path)
            ) from e

        if not isinstance(data, dict):
            raise StorageError(
                f"Record must contain a JSON object: {path.name}",
                path=str(path)
            )

        try:
            return Video.from_dict(data)
        except KeyError as e:
            raise StorageError(
                f"Record {path.name} is missing field {e}",
                details={"missing_field": str(e.args[0])},
                path=str(path)
            ) from e
        except (TypeError, ValueError) as e:
            raise StorageError(
                f"Record {path.name} has an invalid value: {e}",
                details={"original_error": str(e)},
                path=str(path)
            ) from e
