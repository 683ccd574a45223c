"""
Utility functions for yt-playlist-downloader.

This module provides common utility functions used across the application:
    - Directory creation helper
    - Playlist id extraction from YouTube URLs
    - Threading utilities for parallel processing

Usage:
    from yt_playlist_downloader.utils import (
        ensure_directory,
        extract_playlist_id,
        run_in_parallel
    )
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Iterable, TypeVar
from urllib.parse import parse_qs, urlparse

from tqdm import tqdm


# Type variable for generic parallel processing
T = TypeVar("T")
R = TypeVar("R")


def ensure_directory(path: Path) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Path to the directory.

    Returns:
        The same path (for chaining).

    Raises:
        OSError: If directory cannot be created (permissions, path is a file, etc.)

    Example:
        videos_dir = ensure_directory(Path("~/YouTube/videos").expanduser())
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def run_in_parallel(
    func: Callable[[T], R],
    items: Iterable[T],
    num_threads: int = 4,
    description: str = "Processing",
    show_progress: bool = True
) -> list[tuple[T, R | Exception]]:
    """
    Run a function on multiple items in parallel.

    Every item is processed; a failure of one item never prevents the
    others from running.

    Args:
        func: Function to call for each item. Takes one argument.
        items: Iterable of items to process.
        num_threads: Number of parallel threads.
        description: Description for the progress bar.
        show_progress: Whether to show tqdm progress bar.

    Returns:
        List of (item, result) tuples in INPUT order, where result is either
        the return value or the Exception raised by the call.

    Example:
        results = run_in_parallel(fetch, urls, num_threads=4, show_progress=False)

        for url, result in results:
            if isinstance(result, Exception):
                print(f"Failed: {url} - {result}")
    """
    items_list = list(items)
    results: list[R | Exception | None] = [None] * len(items_list)

    if not items_list:
        return []

    with ThreadPoolExecutor(max_workers=max(1, num_threads)) as executor:
        future_to_index = {
            executor.submit(func, item): index
            for index, item in enumerate(items_list)
        }

        iterator = as_completed(future_to_index)
        if show_progress:
            iterator = tqdm(
                iterator,
                total=len(items_list),
                desc=description,
                unit="item"
            )

        for future in iterator:
            index = future_to_index[future]
            try:
                results[index] = future.result()
            except Exception as e:
                results[index] = e

    return list(zip(items_list, results))


def extract_playlist_id(url_or_id: str) -> str:
    """
    Extract a YouTube playlist id from a URL or return the id as-is.

    Handles:
        - https://www.youtube.com/playlist?list=ID
        - https://www.youtube.com/watch?v=VIDEO&list=ID
        - https://music.youtube.com/playlist?list=ID
        - Just the ID

    Args:
        url_or_id: Playlist URL or bare id.

    Returns:
        The playlist id.

    Raises:
        ValueError: If the value is empty, or is a URL without a 'list' parameter.

    Examples:
        extract_playlist_id("https://www.youtube.com/playlist?list=PLabc")
        # Returns: "PLabc"

        extract_playlist_id("PLabc")
        # Returns: "PLabc"
    """
    value = url_or_id.strip()
    if not value:
        raise ValueError("Empty playlist id")

    if "://" not in value and not value.startswith(("www.", "youtube.com", "music.youtube.com")):
        return value

    if "://" not in value:
        value = f"https://{value}"

    query = parse_qs(urlparse(value).query)
    playlist_ids = query.get("list")
    if not playlist_ids or not playlist_ids[0].strip():
        raise ValueError(f"Not a playlist URL: {url_or_id}")
    return playlist_ids[0].strip()
