# =============================================================================
# Session Command Binding (windows and split panes)
# =============================================================================

from __future__ import annotations

import os

from loguru import logger

from .config_loader import Config
from .errors import PreconditionError
from .hydration import hydrate
from .pane_cache import PaneCache, PaneKey, SplitMode
from .sessions import SessionContext, switch_to
from .tmux import Multiplexer


def session_window_target(session: str, slot: int, offset: int) -> str:
    """``work`` + slot 2 -> ``work:71`` with the default offset."""
    return f"{session}:{offset + slot}"


def _bind_window(
    mux: Multiplexer,
    context: SessionContext,
    session: str,
    slot: int,
    command: str,
    config: Config,
) -> bool:
    index = config.session_window_offset + slot
    target = session_window_target(session, slot, config.session_window_offset)

    if index in mux.list_windows(session):
        logger.info(
            "Session command window already open",
            operation="bind_session_command",
            status="reused",
            target=target
        )
        switch_to(mux, context, target)
        return False

    mux.new_window(target, command)
    hydrate(mux, target, None, file_name=config.hydration_file, session_command=command)
    mux.select_window(target)
    logger.info(
        "Session command window created",
        operation="bind_session_command",
        status="created",
        target=target,
        command=command
    )
    switch_to(mux, context, target)
    return True


def _bind_split(
    mux: Multiplexer,
    cache: PaneCache,
    context: SessionContext,
    session: str,
    slot: int,
    split: SplitMode,
    command: str,
    cwd: str,
) -> bool:
    key = PaneKey(slot, split)
    live_panes = mux.list_panes()
    cache.garbage_collect(live_panes)

    pane_id = cache.lookup(key)
    if pane_id is not None and pane_id in live_panes:
        mux.select_pane(pane_id)
        logger.info(
            "Session command pane already open",
            operation="bind_session_command",
            status="reused",
            pane_id=pane_id,
            slot=slot,
            split=split.value
        )
        switch_to(mux, context, session)
        return False

    pane_id = mux.split_window(session, split is SplitMode.VERTICAL, cwd, command)
    cache.store(key, pane_id)
    logger.info(
        "Session command pane created",
        operation="bind_session_command",
        status="created",
        pane_id=pane_id,
        slot=slot,
        split=split.value,
        command=command
    )
    switch_to(mux, context, session)
    return True


def bind_session_command(
    mux: Multiplexer,
    cache: PaneCache,
    context: SessionContext | None,
    slot: int,
    split: SplitMode,
    command: str,
    config: Config,
    cwd: str | None = None,
) -> bool:
    """
    Bring up the window or pane bound to a session command.

    Reuses a live window/pane for the slot instead of spawning the command
    again. Window mode never touches the pane cache.

    Returns:
        True if a window or pane was created

    Raises:
        PreconditionError: no tmux context to bind against
    """
    if context is None or not context.session_name:
        raise PreconditionError("session commands need a running tmux session")

    session = context.session_name
    if split is SplitMode.NONE:
        return _bind_window(mux, context, session, slot, command, config)
    return _bind_split(mux, cache, context, session, slot, split, command, cwd or os.getcwd())
