"""
Exception classes for yt-playlist-downloader.

This module defines all custom exceptions used throughout the application.
Each exception carries a human-readable message plus an optional details
dictionary, so failures can be logged with enough context to diagnose them.

Exception Hierarchy:
    YtPlaylistError (base)
        ConfigError - Configuration file issues
        TransportError - YouTube API or thumbnail download failed
        MalformedResponseError - API response is missing required fields
        MalformedURLError - Thumbnail URL has no usable filename
        StorageError - Local filesystem read/write failed
"""


class YtPlaylistError(Exception):
    """
    Base exception for all yt-playlist-downloader errors.

    All custom exceptions in this project inherit from this class,
    allowing callers to catch all errors with a single except clause.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (playlist id,
                 video id, URL, path, original error).

    Example:
        try:
            synchronizer.sync_playlist(playlist_id)
        except YtPlaylistError as e:
            logger.error(f"Sync failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'playlist_id': Playlist being synchronized
                     - 'video_id': Video involved in the error
                     - 'url': URL that caused the error
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(YtPlaylistError):
    """
    Raised when there's an issue with the configuration file.

    This is a CRITICAL error that should stop program execution.

    Common causes:
        - config.yaml not found
        - config.yaml has invalid YAML syntax
        - No API key in config.yaml nor in YOUTUBE_API_KEY
        - Invalid field values (e.g., negative thread count)

    Example:
        raise ConfigError(
            "'sync.threads' must be a positive integer",
            details={'field': 'sync.threads', 'value': -1}
        )
    """
    pass


class TransportError(YtPlaylistError):
    """
    Raised when a network call fails.

    Covers both the playlist listing API and the thumbnail image download.
    A failed page request aborts the enumeration of that playlist; a failed
    thumbnail download fails that thumbnail variant.

    Common causes:
        - Invalid API key or exhausted quota (HTTP 403)
        - Playlist not found (HTTP 404)
        - Thumbnail removed from the CDN (HTTP 404)
        - DNS failure, connection reset, timeout

    Attributes:
        http_status: HTTP status code when a response was received, else None.
        is_quota_error: True if the API reported an exhausted quota.

    Example:
        raise TransportError(
            "Failed to list playlist items: HTTP 404",
            details={'playlist_id': 'PL123', 'page_token': None},
            http_status=404
        )
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        http_status: int | None = None,
        is_quota_error: bool = False
    ) -> None:
        """
        Initialize transport error with HTTP context.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context.
            http_status: Status code of the failed response, if any.
            is_quota_error: Set to True when the daily API quota is exhausted.
                            Retrying before the quota resets is pointless.
        """
        super().__init__(message, details)
        self.http_status = http_status
        self.is_quota_error = is_quota_error


class MalformedResponseError(YtPlaylistError):
    """
    Raised when an API response violates the expected contract.

    The listing API is expected to return an 'items' list and, for every
    available item, a title, description, publish date, video id and the
    default/high/medium thumbnails. A missing field means we cannot build a
    meaningful record, so enumeration of the playlist is aborted.

    Attributes:
        field: Dotted path of the missing or invalid field (e.g. 'snippet.title').

    Example:
        raise MalformedResponseError(
            "Playlist item is missing 'contentDetails.videoId'",
            details={'item_id': 'UEwx...'},
            field='contentDetails.videoId'
        )
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        field: str | None = None
    ) -> None:
        super().__init__(message, details)
        self.field = field


class MalformedURLError(YtPlaylistError):
    """
    Raised when a thumbnail URL has no '/'-delimited filename segment.

    The destination filename of a thumbnail is the final path segment of
    its URL. A URL without '/' (or ending with '/') cannot be mapped to a file.

    Attributes:
        url: The offending URL.
    """

    def __init__(self, url: str, details: dict | None = None) -> None:
        super().__init__(
            f"Thumbnail URL has no filename segment: {url!r}",
            {"url": url, **(details or {})}
        )
        self.url = url


class StorageError(YtPlaylistError):
    """
    Raised when a local filesystem operation fails.

    Wraps the underlying OSError (permission denied, disk full, path is a
    file instead of a directory) and JSON decoding failures when reading
    records back.

    Attributes:
        path: The file or directory involved, as a string.

    Example:
        raise StorageError(
            "Failed to write record: [Errno 28] No space left on device",
            details={'video_id': 'dQw4w9WgXcQ'},
            path='/data/videos/dQw4w9WgXcQ.json'
        )
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        path: str | None = None
    ) -> None:
        super().__init__(message, details)
        self.path = path
