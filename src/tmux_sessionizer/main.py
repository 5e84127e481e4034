# =============================================================================
# Launcher Entry Point
# =============================================================================

from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from uuid import uuid4

from loguru import logger

from .config_loader import Config
from .errors import ConfigurationError
from .logging_config import trace_id_var
from .pane_cache import PaneCache, SplitMode
from .panes import bind_session_command
from .scan_dirs import iter_search_paths
from .selector import FZF_COMMAND, aggregate_candidates, select_candidate
from .sessions import current_session_context, iter_session_candidates, resolve_session
from .tmux import TMUX_BIN, Multiplexer
from .tool_check import require_tools


@dataclass(frozen=True)
class LaunchOptions:
    target: str | None = None
    session_index: int | None = None
    split: SplitMode = SplitMode.NONE


def validate_options(options: LaunchOptions, config: Config) -> str | None:
    """
    Check the session-command arguments against the configured table.

    Returns:
        The command bound to the requested slot, or None outside slot mode

    Raises:
        ConfigurationError: split flag without slot, no table, slot out of range
    """
    if options.session_index is None:
        if options.split is not SplitMode.NONE:
            raise ConfigurationError("--vsplit/--hsplit require -s/--session INDEX")
        return None

    if not config.session_commands:
        raise ConfigurationError("no session_commands configured")

    count = len(config.session_commands)
    if not 0 <= options.session_index < count:
        raise ConfigurationError(
            f"session index {options.session_index} out of range (0-{count - 1})"
        )
    return config.session_commands[options.session_index]


def run(
    options: LaunchOptions,
    config: Config,
    mux: Multiplexer,
    matcher: Sequence[str] = FZF_COMMAND,
    check_tools: Callable[..., None] = require_tools,
) -> str | None:
    """
    Run one launcher invocation.

    Flow:
    1. Session-command mode: bind the slot's window/pane and stop
    2. Otherwise list sessions + scan search paths, pick one, attach

    Returns:
        The selection acted on, or None when the user cancelled
    """
    trace_id_var.set(str(uuid4()))
    command = validate_options(options, config)

    needs_matcher = command is None and not options.target
    check_tools(TMUX_BIN, *((matcher[0],) if needs_matcher else ()))

    context = current_session_context(mux)
    logger.debug(
        "Launcher starting",
        operation="main",
        status="started",
        session=context.session_name if context else None,
        in_client=bool(context and context.in_client),
        session_index=options.session_index,
        split=options.split.value
    )

    # =========================================================================
    # Session-Command Mode
    # =========================================================================

    if command is not None:
        bind_session_command(
            mux,
            PaneCache(config.pane_cache_path),
            context,
            options.session_index,
            options.split,
            command,
            config,
            cwd=os.getcwd(),
        )
        return command

    # =========================================================================
    # Discovery + Selection
    # =========================================================================

    candidates = aggregate_candidates(
        iter_session_candidates(mux, context),
        iter_search_paths(config.search_paths, config.max_depth),
    )
    selection = select_candidate(candidates, explicit=options.target, command=matcher)
    if selection is None:
        logger.info(
            "Nothing selected",
            operation="main",
            status="cancelled"
        )
        return None

    resolve_session(selection, mux, context, config)
    return selection
