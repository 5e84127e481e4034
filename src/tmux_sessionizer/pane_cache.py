# =============================================================================
# Pane Cache (slot + split mode -> live pane id)
# =============================================================================

from __future__ import annotations

import errno
import fcntl
import os
import tempfile
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from loguru import logger

FIELD_SEPARATOR = ":"


class SplitMode(Enum):
    NONE = "window"
    VERTICAL = "vsplit"
    HORIZONTAL = "hsplit"


@dataclass(frozen=True)
class PaneKey:
    slot: int
    split: SplitMode


def atomic_write_file(path: Path, content: str) -> None:
    """
    Write file atomically using temp file → fsync → rename pattern.

    Args:
        path: Target file path
        content: Content to write

    Raises:
        OSError: If write fails (including disk full - errno.ENOSPC)
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    # Temp file in the same directory so the rename stays on one filesystem
    temp_fd, temp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp"
    )

    try:
        with os.fdopen(temp_fd, "w") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        os.replace(temp_path, path)

    except OSError as e:
        try:
            os.unlink(temp_path)
        except OSError:
            pass

        if e.errno == errno.ENOSPC:
            raise OSError(f"Disk full - cannot write to {path}") from e
        raise


def parse_entry(line: str) -> tuple[PaneKey, str]:
    """
    Parse one ``slot:splitTag:paneId`` record.

    Raises:
        ValueError: malformed record
    """
    parts = line.split(FIELD_SEPARATOR)
    if len(parts) != 3:
        raise ValueError(f"expected 3 fields, got {len(parts)}")
    slot_text, tag, pane_id = parts
    if not slot_text.isdigit():
        raise ValueError(f"invalid slot index {slot_text!r}")
    if not pane_id:
        raise ValueError("empty pane id")
    return PaneKey(int(slot_text), SplitMode(tag)), pane_id


def format_entry(key: PaneKey, pane_id: str) -> str:
    if FIELD_SEPARATOR in pane_id:
        raise ValueError(f"pane id must not contain {FIELD_SEPARATOR!r}: {pane_id!r}")
    return FIELD_SEPARATOR.join((str(key.slot), key.split.value, pane_id))


class PaneCache:
    """File-backed mapping from PaneKey to a tmux pane id."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")

    @contextmanager
    def _locked(self) -> Iterator[None]:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.lock_path, "a") as lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def _read(self) -> dict[PaneKey, str]:
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.touch()
            logger.debug(
                "Pane cache initialized",
                operation="pane_cache",
                status="created",
                path=str(self.path)
            )
            return {}

        entries: dict[PaneKey, str] = {}
        for line_number, line in enumerate(self.path.read_text().splitlines(), start=1):
            line = line.strip()
            if not line:
                continue
            try:
                key, pane_id = parse_entry(line)
            except ValueError as e:
                logger.warning(
                    "Skipping malformed pane cache line",
                    operation="pane_cache",
                    status="skip",
                    path=str(self.path),
                    line_number=line_number,
                    error=str(e)
                )
                continue
            # Later lines win, so a key never maps to two ids
            entries[key] = pane_id
        return entries

    def _write(self, entries: dict[PaneKey, str]) -> None:
        lines = [format_entry(key, pane_id) for key, pane_id in entries.items()]
        atomic_write_file(self.path, "".join(line + "\n" for line in lines))

    def entries(self) -> dict[PaneKey, str]:
        with self._locked():
            return self._read()

    def lookup(self, key: PaneKey) -> str | None:
        with self._locked():
            return self._read().get(key)

    def store(self, key: PaneKey, pane_id: str) -> None:
        """Replace any entry for key with pane_id."""
        with self._locked():
            entries = self._read()
            entries.pop(key, None)
            entries[key] = pane_id
            self._write(entries)
        logger.debug(
            "Pane cached",
            operation="pane_cache",
            status="stored",
            slot=key.slot,
            split=key.split.value,
            pane_id=pane_id
        )

    def garbage_collect(self, live_pane_ids: Iterable[str]) -> int:
        """
        Drop entries whose pane is no longer alive.

        Returns:
            Number of entries removed
        """
        live = set(live_pane_ids)
        with self._locked():
            entries = self._read()
            kept = {key: pane_id for key, pane_id in entries.items() if pane_id in live}
            removed = len(entries) - len(kept)
            if removed:
                self._write(kept)

        if removed:
            logger.debug(
                "Stale pane cache entries purged",
                operation="pane_cache",
                status="purged",
                metrics={"removed": removed, "kept": len(kept)}
            )
        return removed
