"""
Progress bar handling for yt-playlist-downloader using the Rich library.

Playlist enumeration is a handful of API calls and needs no progress bar;
the per-video work (record write plus thumbnail downloads) gets a
SyncProgressBar per playlist.

Usage:
    from yt_playlist_downloader.core.progress import SyncProgressBar

    with SyncProgressBar(total=len(videos), description=playlist_id) as progress:
        for future in as_completed(futures):
            progress.update(success=future.exception() is None)
"""

from abc import ABC, abstractmethod
from typing import Optional

from rich import get_console
from rich.console import JustifyMethod, OverflowMethod
from rich.highlighter import Highlighter
from rich.progress import (
    BarColumn,
    Progress,
    ProgressColumn,
    Task,
    TaskID,
)
from rich.style import StyleType
from rich.text import Text
from rich.theme import Theme


PROGRESS_THEME = Theme({
    "bar.back": "grey23",
    "bar.complete": "rgb(204,0,0)",  # YouTube red
    "bar.finished": "rgb(114,156,31)",  # Green when done
    "bar.pulse": "rgb(204,0,0)",
    "progress.percentage": "white",
})


class SizedTextColumn(ProgressColumn):
    """
    Text column truncated with ellipsis to a fixed width.
    """

    def __init__(
        self,
        text_format: str,
        style: StyleType = "none",
        justify: JustifyMethod = "left",
        markup: bool = True,
        highlighter: Optional[Highlighter] = None,
        overflow: Optional[OverflowMethod] = None,
        width: int = 20,
    ) -> None:
        self.text_format = text_format
        self.justify: JustifyMethod = justify
        self.style = style
        self.markup = markup
        self.highlighter = highlighter
        self.overflow: Optional[OverflowMethod] = overflow
        self.width = width
        super().__init__()

    def render(self, task: Task) -> Text:
        """Render the column."""
        formatted = self.text_format.format(task=task)
        if self.markup:
            text = Text.from_markup(formatted, style=self.style, justify=self.justify)
        else:
            text = Text(formatted, style=self.style, justify=self.justify)
        if self.highlighter:
            self.highlighter.highlight(text)

        text.truncate(max_width=self.width, overflow=self.overflow, pad=True)
        return text


class BaseProgressBar(ABC):
    """
    Abstract base class for progress bars.

    Provides:
    - Rich Progress instance with the application theme
    - Context manager support (__enter__/__exit__)
    - Manual start/stop control

    Subclasses must implement:
    - _get_status_text(): Return formatted status string
    - update(): Record one completed item
    """

    def __init__(
        self,
        total: int,
        description: str,
        status_width: int = 25
    ):
        """
        Args:
            total: Total number of items to process.
            description: Description to show on the left (e.g., a playlist id).
            status_width: Width of the status column.
        """
        self.total = total
        self.description = description
        self.completed = 0

        self.console = get_console()

        self.progress = Progress(
            SizedTextColumn(
                "[white]{task.description}",
                overflow="ellipsis",
                width=20,
            ),
            SizedTextColumn(
                "{task.fields[status]}",
                width=status_width,
                style="white",
            ),
            BarColumn(bar_width=40, finished_style="green"),
            "[progress.percentage]{task.percentage:>3.0f}%",
            console=self.console,
            transient=False,
            refresh_per_second=10,
        )

        self.task_id: Optional[TaskID] = None
        self._started = False

    def __enter__(self) -> "BaseProgressBar":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    def start(self) -> None:
        """Start the progress bar (can be called manually)."""
        if not self._started:
            self.console.push_theme(PROGRESS_THEME)
            self.progress.start()
            self.task_id = self.progress.add_task(
                description=self.description,
                total=self.total,
                status=self._get_status_text(),
            )
            self._started = True

    def stop(self) -> None:
        """Stop the progress bar."""
        if self._started:
            self.progress.stop()
            self.console.pop_theme()
            self._started = False

    def _update_progress(self) -> None:
        if self.task_id is not None:
            self.progress.update(
                self.task_id,
                completed=self.completed,
                status=self._get_status_text(),
            )

    @abstractmethod
    def _get_status_text(self) -> str:
        """Return the status text with Rich markup."""

    @abstractmethod
    def update(self, *args, **kwargs) -> None:
        """Record one completed item."""


class SyncProgressBar(BaseProgressBar):
    """
    Progress bar for the per-video phase of a playlist sync.

    Displays:
    - Description (the playlist id)
    - Status: ✓ synced, ✗ failed
    - Progress bar
    - Percentage

    Example:
        PLrAXtmErZgOei…     ✓ 45  ✗ 2        ━━━━━━━━━━━━━━━━━  47%
    """

    def __init__(self, total: int, description: str = "Syncing"):
        super().__init__(total=total, description=description)
        self.synced = 0
        self.failed = 0

    def _get_status_text(self) -> str:
        return f"[green]✓ {self.synced}[/green]  [red]✗ {self.failed}[/red]"

    def update(self, success: bool) -> None:
        """
        Record one finished video.

        Args:
            success: Whether the record and all thumbnails were written.
        """
        self.completed += 1
        if success:
            self.synced += 1
        else:
            self.failed += 1

        self._update_progress()


__all__ = [
    "PROGRESS_THEME",
    "SizedTextColumn",
    "BaseProgressBar",
    "SyncProgressBar",
]
