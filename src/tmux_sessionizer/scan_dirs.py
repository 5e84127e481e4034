# =============================================================================
# Directory Discovery
# =============================================================================

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator

from loguru import logger

from .config_loader import SearchPath

PRUNED_DIR_NAME = ".git"


def _walk(directory: str, remaining: int) -> Iterator[str]:
    """Pre-order walk yielding subdirectories up to ``remaining`` levels down."""
    try:
        with os.scandir(directory) as it:
            entries = list(it)
    except OSError as e:
        logger.debug(
            "Skipping unreadable directory",
            operation="scan_search_path",
            directory=directory,
            error=str(e)
        )
        return

    for entry in entries:
        if entry.name == PRUNED_DIR_NAME:
            continue
        try:
            if not entry.is_dir(follow_symlinks=False):
                continue
        except OSError:
            continue
        yield entry.path
        if remaining > 1:
            yield from _walk(entry.path, remaining - 1)


def scan_search_path(search_path: SearchPath, default_depth: int) -> Iterator[str]:
    """
    Yield directories below one search root.

    The root itself is never yielded. Directories named ``.git`` are neither
    yielded nor descended into. Missing roots yield nothing.

    Args:
        search_path: Root and optional depth override
        default_depth: Depth used when the search path carries none

    Yields:
        Absolute directory paths, at most ``depth`` levels below the root
    """
    root = search_path.root.expanduser()
    depth = search_path.effective_depth(default_depth)

    if not root.is_dir():
        logger.debug(
            "Search path does not exist",
            operation="scan_search_path",
            status="skip",
            directory=str(root)
        )
        return

    yield from _walk(str(root), depth)


def iter_search_paths(search_paths: Iterable[SearchPath], default_depth: int) -> Iterator[str]:
    """Chain every search root in configured order."""
    for search_path in search_paths:
        yield from scan_search_path(search_path, default_depth)
