"""Shared fixtures: an in-memory tmux and a quiet logger."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest
from loguru import logger

from tmux_sessionizer.config_loader import Config, SearchPath


@dataclass
class FakeMultiplexer:
    """Records every mutation; state is plain dicts and sets."""

    sessions: dict[str, str | None] = field(default_factory=dict)
    windows: dict[str, set[int]] = field(default_factory=dict)
    panes: set[str] = field(default_factory=set)
    client: bool = False
    current: str | None = None
    running: bool = True
    calls: list[tuple] = field(default_factory=list)
    next_pane: int = 100

    def server_running(self) -> bool:
        return self.running

    def in_client(self) -> bool:
        return self.client

    def current_session(self) -> str | None:
        return self.current

    def list_sessions(self) -> list[str]:
        return list(self.sessions)

    def has_session(self, name: str) -> bool:
        return name in self.sessions

    def list_panes(self) -> set[str]:
        return set(self.panes)

    def list_windows(self, session: str) -> set[int]:
        return set(self.windows.get(session, set()))

    def new_session(self, name: str, start_dir: str | None) -> None:
        self.calls.append(("new_session", name, start_dir))
        self.sessions[name] = start_dir
        self.windows.setdefault(name, {0})
        self.running = True

    def new_window(self, target: str, command: str) -> None:
        self.calls.append(("new_window", target, command))
        session, index = target.rsplit(":", 1)
        self.windows.setdefault(session, set()).add(int(index))

    def split_window(self, target: str, vertical: bool, cwd: str, command: str) -> str:
        pane_id = f"%{self.next_pane}"
        self.next_pane += 1
        self.calls.append(("split_window", target, vertical, cwd, command))
        self.panes.add(pane_id)
        return pane_id

    def select_window(self, target: str) -> None:
        self.calls.append(("select_window", target))

    def select_pane(self, pane_id: str) -> None:
        self.calls.append(("select_pane", pane_id))

    def switch_client(self, target: str) -> None:
        self.calls.append(("switch_client", target))

    def attach_session(self, target: str) -> None:
        self.calls.append(("attach_session", target))

    def send_keys(self, target: str, keys: str) -> None:
        self.calls.append(("send_keys", target, keys))

    def called(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]


@pytest.fixture(autouse=True)
def quiet_logger():
    logger.remove()
    yield
    logger.remove()


@pytest.fixture
def mux() -> FakeMultiplexer:
    return FakeMultiplexer()


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config(
        search_paths=(SearchPath(tmp_path / "projects"),),
        max_depth=1,
        session_commands=("nvim .", "lazygit", "htop"),
        pane_cache_path=tmp_path / "cache" / "panes.cache",
    )
