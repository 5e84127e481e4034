# =============================================================================
# Candidate Selection (fzf bridge)
# =============================================================================

from __future__ import annotations

import itertools
import subprocess
from collections.abc import Iterable, Iterator, Sequence

from loguru import logger

from .errors import MissingToolError, SelectorError

FZF_COMMAND = ("fzf",)

# fzf: 1 = no match, 130 = interrupted with Ctrl-C / Esc
CANCEL_EXIT_CODES = (1, 130)


def aggregate_candidates(
    session_candidates: Iterable[str],
    directory_candidates: Iterable[str],
) -> Iterator[str]:
    """Sessions first, then directories. No deduplication."""
    return itertools.chain(session_candidates, directory_candidates)


def _feed(stdin, candidates: Iterable[str]) -> int:
    """Stream candidates to the matcher until it stops reading."""
    sent = 0
    try:
        for candidate in candidates:
            stdin.write(candidate + "\n")
            sent += 1
    except BrokenPipeError:
        # Matcher already picked or exited
        pass
    finally:
        try:
            stdin.close()
        except BrokenPipeError:
            pass
    return sent


def run_matcher(candidates: Iterable[str], command: Sequence[str] = FZF_COMMAND) -> str | None:
    """
    Pipe candidates into an interactive matcher and read one line back.

    Returns:
        The chosen line, or None when the user cancelled

    Raises:
        MissingToolError: matcher binary not found
        SelectorError: matcher failed for any reason other than a cancel
    """
    logger.debug(
        "Starting fuzzy matcher",
        operation="run_matcher",
        status="started",
        command=list(command)
    )

    try:
        proc = subprocess.Popen(
            list(command),
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            text=True
        )
    except FileNotFoundError as e:
        raise MissingToolError(command[0]) from e

    sent = _feed(proc.stdin, candidates)
    output = proc.stdout.read()
    proc.stdout.close()
    returncode = proc.wait()

    if returncode in CANCEL_EXIT_CODES:
        logger.info(
            "Selection cancelled",
            operation="run_matcher",
            status="cancelled",
            returncode=returncode,
            metrics={"candidates": sent}
        )
        return None
    if returncode != 0:
        raise SelectorError(f"{command[0]} exited with status {returncode}")

    # Only the line terminator goes; names may carry significant spaces
    selection = output.splitlines()[0] if output else ""
    if not selection.strip():
        return None

    logger.info(
        "Candidate selected",
        operation="run_matcher",
        status="success",
        selection=selection,
        metrics={"candidates": sent}
    )
    return selection


def select_candidate(
    candidates: Iterable[str],
    explicit: str | None = None,
    command: Sequence[str] = FZF_COMMAND,
) -> str | None:
    """Use an explicit target verbatim, else ask the matcher."""
    if explicit:
        logger.debug(
            "Using explicit target",
            operation="select_candidate",
            status="explicit",
            selection=explicit
        )
        return explicit
    return run_matcher(candidates, command)
