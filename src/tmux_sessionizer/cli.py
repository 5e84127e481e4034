"""Command line interface for tmux-sessionizer."""

from __future__ import annotations

import os
from pathlib import Path

import click
from loguru import logger

from . import __version__
from .config_loader import default_config_path, load_config_from_path
from .errors import ConfigurationError, SessionizerError
from .logging_config import LOG_MODES, setup_logger
from .main import LaunchOptions, run
from .pane_cache import SplitMode
from .sessions import SESSION_TAG
from .tmux import TmuxClient


def normalize_target(target: str | None) -> str | None:
    """Expand ~ and anchor relative paths; tagged sessions pass through."""
    if not target or target.startswith(SESSION_TAG):
        return target
    return os.path.abspath(os.path.expanduser(target))


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("target", required=False)
@click.option(
    "-s", "--session", "session_index", type=int, default=None,
    help="Run the configured session command with this index."
)
@click.option(
    "--vsplit", "split", flag_value=SplitMode.VERTICAL.value,
    help="Open the session command in a side-by-side split."
)
@click.option(
    "--hsplit", "split", flag_value=SplitMode.HORIZONTAL.value,
    help="Open the session command in a stacked split."
)
@click.option(
    "-c", "--config", "config_path", type=click.Path(path_type=Path, dir_okay=False),
    default=None, help="Configuration file (TOML)."
)
@click.option(
    "--log", "log_mode", type=click.Choice(LOG_MODES), default=None,
    help="Log verbosely to stderr (echo) or to the log file (file)."
)
@click.version_option(__version__, "-v", "--version", prog_name="tmux-sessionizer")
def main(target, session_index, split, config_path, log_mode):
    """Pick a project directory or tmux session and switch to it.

    TARGET skips the fuzzy finder and opens that directory directly.
    """
    setup_logger(log_mode)

    result = load_config_from_path(config_path or default_config_path())
    if result.is_err():
        raise click.ClickException(str(ConfigurationError(result.error.message)))
    config = result.value

    setup_logger(log_mode or config.log_mode, config.log_file)

    options = LaunchOptions(
        target=normalize_target(target),
        session_index=session_index,
        split=SplitMode(split) if split else SplitMode.NONE,
    )

    try:
        run(options, config, TmuxClient())
    except SessionizerError as e:
        logger.error(
            "Launcher failed",
            operation="main",
            status="failed",
            reported=True,
            error=str(e),
            error_type=type(e).__name__
        )
        raise click.ClickException(str(e)) from e


if __name__ == "__main__":
    main()
