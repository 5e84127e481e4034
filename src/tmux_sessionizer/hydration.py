# =============================================================================
# Session Hydration
# =============================================================================

from __future__ import annotations

import shlex
from pathlib import Path

from loguru import logger

from .config_loader import HYDRATION_FILE
from .tmux import Multiplexer


def find_hydration_file(
    directory: str | Path,
    file_name: str = HYDRATION_FILE,
    home: Path | None = None,
) -> Path | None:
    """Project-local setup file first, then the one in the home directory."""
    local = Path(directory).expanduser() / file_name
    if local.is_file():
        return local

    global_file = (home or Path.home()) / file_name
    if global_file.is_file():
        return global_file

    return None


def hydrate(
    mux: Multiplexer,
    target: str,
    directory: str | Path | None,
    file_name: str = HYDRATION_FILE,
    session_command: str | None = None,
    home: Path | None = None,
) -> bool:
    """
    Source a setup file into a freshly created session or window.

    Skipped entirely when a session command is in effect, or when there is
    no directory to look in.

    Returns:
        True if a source command was sent
    """
    if session_command:
        logger.debug(
            "Hydration skipped - session command in effect",
            operation="hydrate",
            status="skip",
            target=target
        )
        return False

    if directory is None:
        return False

    setup_file = find_hydration_file(directory, file_name, home)
    if setup_file is None:
        logger.debug(
            "No hydration file found",
            operation="hydrate",
            status="skip",
            target=target,
            directory=str(directory)
        )
        return False

    mux.send_keys(target, f"source {shlex.quote(str(setup_file))}")
    logger.info(
        "Session hydrated",
        operation="hydrate",
        status="success",
        target=target,
        setup_file=str(setup_file)
    )
    return True
