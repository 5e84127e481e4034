# =============================================================================
# Error Handling Types (Result + exception taxonomy)
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar('T')


class ErrorType(Enum):
    FILE_NOT_FOUND = "file_not_found"
    PARSE_ERROR = "parse_error"
    VALIDATION_ERROR = "validation_error"


@dataclass
class Error:
    error_type: ErrorType
    message: str
    context: dict = field(default_factory=dict)
    original_exception: Exception | None = None


@dataclass
class Result(Generic[T]):
    success: bool
    value: T | None = None
    error: Error | None = None

    @staticmethod
    def ok(value: T) -> 'Result[T]':
        return Result(success=True, value=value)

    @staticmethod
    def err(error: Error) -> 'Result[T]':
        return Result(success=False, error=error)

    def is_ok(self) -> bool:
        return self.success

    def is_err(self) -> bool:
        return not self.success


class SessionizerError(Exception):
    """Base class for every fatal condition reported to the user."""


class MissingToolError(SessionizerError):
    """A required external binary (tmux, fzf) is not on PATH."""

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"{tool} is not installed or not on PATH")


class ConfigurationError(SessionizerError):
    """Invalid command line or configuration; raised before any mutation."""


class PreconditionError(SessionizerError):
    """The multiplexer is not in a state the requested operation needs."""


class MultiplexerError(SessionizerError):
    """A tmux control command failed."""

    def __init__(self, args: list[str], returncode: int, stderr: str = ""):
        self.command = args
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or f"exit status {returncode}"
        super().__init__(f"tmux {' '.join(args)} failed: {detail}")


class SelectorError(SessionizerError):
    """The fuzzy matcher exited abnormally (a cancel is not an error)."""
