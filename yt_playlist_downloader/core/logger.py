"""
Logging configuration for yt-playlist-downloader.

This module sets up the logging system with multiple outputs:
    - Console: Real-time progress with tqdm-compatible formatting
    - log_full.log: Complete log of all events (DEBUG and above)
    - log_errors.log: Only ERROR and CRITICAL level messages
    - sync_failures.log: Videos whose record or thumbnails could not be written

Everything shown on screen is also saved to file, then filtered into
specialized files.

Log File Locations:
    All log files are created in a 'logs' subdirectory of the output
    directory specified in config.yaml. Each run gets its own timestamped files.

Usage:
    from yt_playlist_downloader.core.logger import setup_logging, get_logger

    setup_logging(output_dir)  # Call once at startup
    logger = get_logger(__name__)  # Get logger for each module

    logger.info("Starting sync")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

from tqdm import tqdm


# Log file name prefixes (a run timestamp is appended)
LOG_FULL_PREFIX = "log_full"
LOG_ERRORS_PREFIX = "log_errors"
SYNC_FAILURES_PREFIX = "sync_failures"

# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are too chatty at DEBUG
NOISY_LOGGERS = ("googleapiclient.discovery_cache", "googleapiclient.discovery", "urllib3")


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    BOLD = "\033[1m"


class ColoredConsoleFormatter(logging.Formatter):
    """
    Formatter that adds colors to console output.

    Colors:
        - DEBUG: Blue
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Bold Red
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.BLUE,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        return f"{color}{record.levelname}{Colors.RESET}: {record.getMessage()}"


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes to console without breaking progress bars.

    Progress bars redraw themselves in place with carriage returns, and plain
    writes to stderr would tear them. tqdm.write() prints the message above
    any active bar instead.

    Example:
        handler = TqdmLoggingHandler()
        handler.setFormatter(ColoredConsoleFormatter())
        logger.addHandler(handler)
    """

    def __init__(self, stream: TextIO = sys.stderr) -> None:
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream)
        except Exception:
            self.handleError(record)


class SyncFailedVideoHandler(logging.Handler):
    """
    Handler that captures per-video sync failures for the failures report.

    This handler listens for log records that carry sync failure information
    and writes them to sync_failures.log in a simple, human-readable format:

        PLxxxxxxxx / dQw4w9WgXcQ - Video Title
        https://www.youtube.com/watch?v=dQw4w9WgXcQ
        Failed to download thumbnail: HTTP 404

    The handler looks for specific extra fields in log records:
        - 'sync_failed_video_id': The id of the video that failed
        - 'sync_failed_playlist_id': The playlist being synchronized
        - 'sync_failed_title': The video title
        - 'sync_failed_error': Description of the failure

    Only records containing these fields are written to the report.

    Attributes:
        report_path: Path to the sync_failures.log file.
        report_file: Open file handle (set by open()).
    """

    def __init__(self, report_path: Path) -> None:
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None

    def open(self) -> None:
        """Open the report file for writing (overwrites existing content)."""
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        if not hasattr(record, "sync_failed_video_id"):
            return

        if self.report_file is None:
            return

        try:
            video_id = getattr(record, "sync_failed_video_id")
            playlist_id = getattr(record, "sync_failed_playlist_id", "?")
            title = getattr(record, "sync_failed_title", "")
            error = getattr(record, "sync_failed_error", "")

            self.report_file.write(f"{playlist_id} / {video_id} - {title}\n")
            self.report_file.write(f"https://www.youtube.com/watch?v={video_id}\n")
            self.report_file.write(f"{error}\n\n")
            self.report_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """Close the report file handle. Safe to call multiple times."""
        self.acquire()
        try:
            if self.report_file is not None:
                self.report_file.close()
                self.report_file = None
        finally:
            self.release()
        super().close()


class ErrorOnlyFilter(logging.Filter):
    """
    Filter that only allows ERROR and CRITICAL level records.

    Used by the error log file handler to exclude DEBUG, INFO, and WARNING.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def setup_logging(output_dir: Path, verbose: bool = False) -> Path:
    """
    Configure the logging system for the application.

    This function should be called ONCE at application startup, after
    the configuration is loaded but before any other operations.

    Args:
        output_dir: Directory where log files will be created.
                    Logs are stored in a 'logs' subdirectory.
        verbose: If True, the console also shows DEBUG messages
                 (one line per fetched page and per written thumbnail).

    Returns:
        The logs directory.

    Behavior:
        1. Create output_dir/logs if it doesn't exist
        2. Generate timestamp for this run's log files
        3. Configure root logger level to DEBUG, replacing existing handlers
        4. Console handler (TqdmLoggingHandler), INFO or DEBUG if verbose
        5. log_full_{timestamp}.log at DEBUG
        6. log_errors_{timestamp}.log filtered to ERROR+ by ErrorOnlyFilter
        7. sync_failures_{timestamp}.log fed by log_sync_failure()
        8. Quiet down the Google API client and urllib3 loggers

    Thread Safety:
        This function is NOT thread-safe. Call it once from the main
        thread before starting any worker threads.
    """
    logs_dir = output_dir / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    # Console handler (tqdm-compatible) with colors
    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    file_formatter = logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT)

    full_handler = logging.FileHandler(
        logs_dir / f"{LOG_FULL_PREFIX}_{timestamp}.log", mode="w", encoding="utf-8"
    )
    full_handler.setLevel(logging.DEBUG)
    full_handler.setFormatter(file_formatter)
    root_logger.addHandler(full_handler)

    error_handler = logging.FileHandler(
        logs_dir / f"{LOG_ERRORS_PREFIX}_{timestamp}.log", mode="w", encoding="utf-8"
    )
    error_handler.setLevel(logging.DEBUG)  # Filter handles the level restriction
    error_handler.setFormatter(file_formatter)
    error_handler.addFilter(ErrorOnlyFilter())
    root_logger.addHandler(error_handler)

    failures_handler = SyncFailedVideoHandler(logs_dir / f"{SYNC_FAILURES_PREFIX}_{timestamp}.log")
    failures_handler.open()
    root_logger.addHandler(failures_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logs_dir


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.
              This creates a hierarchy like 'yt_playlist_downloader.sync.synchronizer'.

    Note:
        Loggers obtained before setup_logging() is called will have no
        handlers and will not produce output.
    """
    return logging.getLogger(name)


def format_synced_message(video_id: str, title: str, thumbnails: int) -> str:
    """Format a 'Synced' message with colors."""
    return (
        f"{Colors.GREEN}Synced{Colors.RESET}: "
        f"{video_id} - {title} "
        f"({Colors.CYAN}{thumbnails} thumbnails{Colors.RESET})"
    )


def log_sync_failure(
    logger: logging.Logger,
    playlist_id: str,
    video_id: str,
    title: str,
    error_message: str
) -> None:
    """
    Log a video whose record or thumbnails could not be written.

    Logs an ERROR level message and attaches the extra fields that
    SyncFailedVideoHandler uses to write to sync_failures.log.

    Example:
        log_sync_failure(
            logger,
            playlist_id="PLxxxxxxxx",
            video_id="dQw4w9WgXcQ",
            title="Video Title",
            error_message="Failed to download thumbnail: HTTP 404"
        )
    """
    logger.error(
        f"Sync failed: {video_id} - {title}: {error_message}",
        extra={
            "sync_failed_playlist_id": playlist_id,
            "sync_failed_video_id": video_id,
            "sync_failed_title": title,
            "sync_failed_error": error_message,
        }
    )


def shutdown_logging() -> None:
    """
    Flush, close and remove all handlers from the root logger.

    Typically called in a finally block at application exit.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        handler.flush()
        handler.close()
        root_logger.removeHandler(handler)
