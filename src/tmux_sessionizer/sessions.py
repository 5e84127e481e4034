# =============================================================================
# Session Discovery and Resolution
# =============================================================================

from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass

from loguru import logger

from .config_loader import Config
from .hydration import hydrate
from .tmux import Multiplexer

SESSION_TAG = "[TMUX] "


@dataclass(frozen=True)
class SessionContext:
    """Where the launcher runs, relative to tmux. Computed once per run."""

    session_name: str | None
    in_client: bool


@dataclass(frozen=True)
class SessionTarget:
    name: str
    directory: str | None


def current_session_context(mux: Multiplexer) -> SessionContext | None:
    """
    Describe the caller's tmux context.

    Returns:
        None when there is neither an enclosing client nor a running server
    """
    in_client = mux.in_client()
    if not in_client and not mux.server_running():
        return None

    return SessionContext(session_name=mux.current_session(), in_client=in_client)


def iter_session_candidates(mux: Multiplexer, context: SessionContext | None) -> Iterator[str]:
    """Yield tagged live session names, minus the caller's own session."""
    own = context.session_name if context is not None and context.in_client else None
    for name in mux.list_sessions():
        if name == own:
            continue
        yield f"{SESSION_TAG}{name}"


def derive_session_name(path: str) -> str:
    """Final path component with dots replaced - tmux rejects them in names."""
    base = os.path.basename(os.path.normpath(path)) or path
    return base.replace(".", "_")


def parse_selection(selection: str) -> SessionTarget:
    if selection.startswith(SESSION_TAG):
        return SessionTarget(name=selection[len(SESSION_TAG):], directory=None)
    return SessionTarget(name=derive_session_name(selection), directory=selection)


def switch_to(mux: Multiplexer, context: SessionContext | None, target: str) -> None:
    """Switch the enclosing client, or attach a new one when outside tmux."""
    if context is not None and context.in_client:
        mux.switch_client(target)
    else:
        mux.attach_session(target)
    logger.info(
        "Switched to target",
        operation="switch_to",
        status="success",
        target=target,
        in_client=bool(context and context.in_client)
    )


def _create_session(mux: Multiplexer, target: SessionTarget, config: Config) -> None:
    mux.new_session(target.name, target.directory)
    logger.info(
        "Session created",
        operation="resolve_session",
        status="created",
        session=target.name,
        directory=target.directory
    )
    hydrate(mux, target.name, target.directory, file_name=config.hydration_file)


def resolve_session(
    selection: str,
    mux: Multiplexer,
    context: SessionContext | None,
    config: Config,
) -> SessionTarget:
    """
    Ensure a session exists for the selection, then attach or switch to it.

    Creates and hydrates at most one session; an existing session is only
    switched to.
    """
    target = parse_selection(selection)

    logger.debug(
        "Resolving selection",
        operation="resolve_session",
        status="started",
        selection=selection,
        session=target.name
    )

    if context is None or not mux.has_session(target.name):
        _create_session(mux, target, config)

    switch_to(mux, context, target.name)
    return target
