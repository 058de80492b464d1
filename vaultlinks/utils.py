"""Utility functions for vaultlinks."""

import os
import re
from pathlib import Path
from typing import Generator, List, Optional, Tuple

from slugify import slugify


MARKDOWN_EXTENSIONS = [".md", ".markdown"]


def slugify_path(path_str: str) -> str:
    """Normalize a reference into a lookup slug.

    Every ``/`` separated segment is slugified on its own, so nested targets
    such as ``2024/My Post`` keep their structure (``2024/my-post``). Empty
    segments are dropped. The result is stable under repeated application.

    Args:
        path_str: Title, slug or path to normalize

    Returns:
        Slugified path string
    """
    slugified_parts = [slugify(part) for part in path_str.split("/") if part.strip()]
    return "/".join(part for part in slugified_parts if part)


def slugify_anchor(anchor: str) -> str:
    """Heading slug for a ``#fragment``."""
    return slugify(anchor)


def split_anchor(target: str) -> Tuple[str, Optional[str]]:
    """Split ``link#anchor`` at the first ``#``.

    Returns:
        Tuple of (link, anchor); anchor is None when there is no ``#``
    """
    link, sep, anchor = target.partition("#")
    if not sep:
        return target, None
    return link, anchor


def yield_files(
    dir_path: Path,
    extensions: Optional[List[str]] = None,
    recursive: bool = True,
    excludes: Optional[List[str]] = None,
) -> Generator[Path, None, None]:
    """Yield files from a directory in a stable (sorted) order.

    Args:
        dir_path: Directory path to scan
        extensions: List of file extensions to include (e.g., ['.md'])
        recursive: Whether to scan recursively
        excludes: List of regex patterns matched against entry names

    Yields:
        Path objects for each matching file
    """
    if excludes is None:
        excludes = []

    with os.scandir(dir_path) as it:
        entries = sorted(it, key=lambda e: e.name)

    for entry in entries:
        if _should_exclude_path(entry.name, excludes):
            continue

        if entry.is_file():
            file_path = Path(entry.path)
            if extensions is None or file_path.suffix.lower() in extensions:
                yield file_path
        elif entry.is_dir() and recursive:
            yield from yield_files(Path(entry.path), extensions, recursive, excludes)


def _should_exclude_path(name: str, exclude_patterns: List[str]) -> bool:
    return any(re.search(pattern, name) for pattern in exclude_patterns)
