# =============================================================================
# tmux Control Surface
# =============================================================================

from __future__ import annotations

import os
import subprocess
from typing import Protocol

from loguru import logger

from .errors import MultiplexerError

TMUX_BIN = "tmux"

# tmux stderr fragments meaning "nothing to list" rather than a failure
_NO_SERVER_MARKERS = ("no server running", "error connecting to", "no current")


class Multiplexer(Protocol):
    """Operations the launcher needs from a terminal multiplexer."""

    def server_running(self) -> bool: ...
    def in_client(self) -> bool: ...
    def current_session(self) -> str | None: ...
    def list_sessions(self) -> list[str]: ...
    def has_session(self, name: str) -> bool: ...
    def list_panes(self) -> set[str]: ...
    def list_windows(self, session: str) -> set[int]: ...
    def new_session(self, name: str, start_dir: str | None) -> None: ...
    def new_window(self, target: str, command: str) -> None: ...
    def split_window(self, target: str, vertical: bool, cwd: str, command: str) -> str: ...
    def select_window(self, target: str) -> None: ...
    def select_pane(self, pane_id: str) -> None: ...
    def switch_client(self, target: str) -> None: ...
    def attach_session(self, target: str) -> None: ...
    def send_keys(self, target: str, keys: str) -> None: ...


class TmuxClient:
    """Multiplexer backed by the tmux command line."""

    def __init__(self, binary: str = TMUX_BIN, env: dict[str, str] | None = None):
        self.binary = binary
        self.env = env if env is not None else os.environ

    def _run(self, args: list[str], capture: bool = True) -> subprocess.CompletedProcess:
        logger.debug(
            "Running tmux command",
            operation="tmux",
            args=args
        )
        return subprocess.run(
            [self.binary, *args],
            capture_output=capture,
            text=True,
            check=False
        )

    def _query(self, args: list[str], strict: bool = False) -> list[str]:
        """
        Run a listing command; an absent server lists nothing.

        Args:
            strict: raise on any other failure instead of listing nothing

        Raises:
            MultiplexerError: strict query failed with a server present
        """
        result = self._run(args)
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            if any(marker in stderr for marker in _NO_SERVER_MARKERS):
                return []
            if strict:
                raise MultiplexerError(args, result.returncode, stderr)
            logger.warning(
                "tmux query failed",
                operation="tmux",
                status="failed",
                args=args,
                returncode=result.returncode,
                stderr=stderr
            )
            return []
        return [line for line in result.stdout.splitlines() if line]

    def _mutate(self, args: list[str]) -> str:
        result = self._run(args)
        if result.returncode != 0:
            logger.error(
                "tmux command failed",
                operation="tmux",
                status="failed",
                reported=True,
                args=args,
                returncode=result.returncode,
                stderr=result.stderr
            )
            raise MultiplexerError(args, result.returncode, result.stderr or "")
        return result.stdout or ""

    def server_running(self) -> bool:
        return self._run(["list-sessions"]).returncode == 0

    def in_client(self) -> bool:
        return bool(self.env.get("TMUX"))

    def current_session(self) -> str | None:
        lines = self._query(["display-message", "-p", "#S"])
        return lines[0] if lines else None

    def list_sessions(self) -> list[str]:
        return self._query(["list-sessions", "-F", "#{session_name}"])

    def has_session(self, name: str) -> bool:
        return name in self.list_sessions()

    def list_panes(self) -> set[str]:
        # Feeds cache garbage collection: a failed listing must not read as "no panes"
        return set(self._query(["list-panes", "-a", "-F", "#{pane_id}"], strict=True))

    def list_windows(self, session: str) -> set[int]:
        indices = self._query(["list-windows", "-t", f"={session}", "-F", "#{window_index}"])
        return {int(index) for index in indices if index.isdigit()}

    def new_session(self, name: str, start_dir: str | None) -> None:
        args = ["new-session", "-d", "-s", name]
        if start_dir:
            args += ["-c", start_dir]
        self._mutate(args)

    def new_window(self, target: str, command: str) -> None:
        self._mutate(["new-window", "-d", "-t", target, command])

    def split_window(self, target: str, vertical: bool, cwd: str, command: str) -> str:
        # tmux names the axis of the divider: -h places panes side by side
        flag = "-h" if vertical else "-v"
        output = self._mutate([
            "split-window", flag, "-t", target, "-c", cwd,
            "-P", "-F", "#{pane_id}", command
        ])
        return output.strip()

    def select_window(self, target: str) -> None:
        self._mutate(["select-window", "-t", target])

    def select_pane(self, pane_id: str) -> None:
        self._mutate(["select-pane", "-t", pane_id])

    def switch_client(self, target: str) -> None:
        self._mutate(["switch-client", "-t", target])

    def attach_session(self, target: str) -> None:
        # Hands the terminal to tmux until the client detaches
        result = self._run(["attach-session", "-t", target], capture=False)
        if result.returncode != 0:
            raise MultiplexerError(["attach-session", "-t", target], result.returncode)

    def send_keys(self, target: str, keys: str) -> None:
        self._mutate(["send-keys", "-t", target, keys, "C-m"])
