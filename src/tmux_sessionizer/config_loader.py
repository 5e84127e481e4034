# =============================================================================
# Configuration Loading
# =============================================================================

from __future__ import annotations

import os
import re
import time
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

import platformdirs
from loguru import logger

from .errors import Error, ErrorType, Result
from .logging_config import APP_NAME, LOG_MODES

CONFIG_DIR = Path(platformdirs.user_config_dir(appname=APP_NAME))
CONFIG_PATH = CONFIG_DIR / "tmux-sessionizer.toml"
CONFIG_ENV_VAR = "TMUX_SESSIONIZER_CONFIG"

# Session-command windows live above the indices a user normally opens by hand
SESSION_WINDOW_OFFSET = 69

HYDRATION_FILE = ".tmux-sessionizer"

# Portable defaults - scan the home directory one level deep
DEFAULT_CONFIG = {
    "search_paths": ["~/"],
    "extra_search_paths": [],
    "max_depth": 1,
    "session_commands": [],
    "session_window_offset": SESSION_WINDOW_OFFSET,
    "hydration_file": HYDRATION_FILE,
    "pane_cache": None,
    "logging": {
        "mode": None,
        "file": None,
    },
}

# "~/work:3" -> root "~/work", depth 3
_SEARCH_PATH_PATTERN = re.compile(r"^(?P<root>[^:]+):(?P<depth>\d+)$")


@dataclass(frozen=True)
class SearchPath:
    root: Path
    depth: int | None = None

    def effective_depth(self, default_depth: int) -> int:
        return self.depth if self.depth is not None else default_depth


@dataclass(frozen=True)
class Config:
    search_paths: tuple[SearchPath, ...] = ()
    max_depth: int = 1
    session_commands: tuple[str, ...] = ()
    session_window_offset: int = SESSION_WINDOW_OFFSET
    hydration_file: str = HYDRATION_FILE
    pane_cache_path: Path = field(
        default_factory=lambda: Path(platformdirs.user_cache_dir(appname=APP_NAME)) / "panes.cache"
    )
    log_mode: str | None = None
    log_file: Path | None = None


def default_config_path() -> Path:
    """Config location: $TMUX_SESSIONIZER_CONFIG, else the XDG config dir."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return CONFIG_PATH


def extract_toml_error_context(error: tomllib.TOMLDecodeError, file_path: Path) -> dict:
    """
    Extract line context from TOML parse error.

    Args:
        error: The TOMLDecodeError exception
        file_path: Path to the TOML file

    Returns:
        Dict with line_number, line_content, and formatted_message
    """
    error_str = str(error)
    line_number = getattr(error, "lineno", None)
    line_content = None

    if line_number is None:
        # Older interpreters only carry the position in the message
        line_match = re.search(r'line\s+(\d+)', error_str, re.IGNORECASE)
        if line_match:
            line_number = int(line_match.group(1))

    if line_number and file_path.exists():
        try:
            with open(file_path, "r") as f:
                lines = f.readlines()
                if 0 < line_number <= len(lines):
                    line_content = lines[line_number - 1].rstrip()
        except OSError:
            pass

    if line_number:
        formatted = f"Error on line {line_number}"
        if line_content:
            display_line = line_content[:50] + "..." if len(line_content) > 50 else line_content
            formatted += f": {display_line}"
        formatted += f"\n\nDetails: {error_str}"
    else:
        formatted = f"TOML parse error: {error_str}"

    return {
        "line_number": line_number,
        "line_content": line_content,
        "formatted_message": formatted,
        "raw_error": error_str
    }


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dictionary."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _validate_depth(value, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"{where}: depth must be a positive integer, got {value!r}")
    return value


def parse_search_path(entry) -> SearchPath:
    """
    Parse one search path entry.

    Accepted forms:
        "~/projects"                       - inherits max_depth
        "~/projects:2"                     - explicit depth
        {path = "~/projects", depth = 2}   - table form

    Raises:
        ValueError: entry is neither form or carries an invalid depth
    """
    if isinstance(entry, str):
        match = _SEARCH_PATH_PATTERN.match(entry)
        if match:
            depth = _validate_depth(int(match.group("depth")), entry)
            return SearchPath(root=Path(match.group("root")).expanduser(), depth=depth)
        if not entry:
            raise ValueError("empty search path")
        return SearchPath(root=Path(entry).expanduser())

    if isinstance(entry, dict) and isinstance(entry.get("path"), str):
        depth = entry.get("depth")
        if depth is not None:
            depth = _validate_depth(depth, entry["path"])
        return SearchPath(root=Path(entry["path"]).expanduser(), depth=depth)

    raise ValueError(f"invalid search path entry: {entry!r}")


def build_config(raw: dict) -> Config:
    """
    Turn a merged TOML document into an immutable Config.

    Raises:
        ValueError: any field fails validation
    """
    entries = list(raw.get("search_paths") or []) + list(raw.get("extra_search_paths") or [])
    search_paths = tuple(parse_search_path(entry) for entry in entries)

    max_depth = _validate_depth(raw.get("max_depth"), "max_depth")

    commands = raw.get("session_commands") or []
    if not isinstance(commands, list) or not all(isinstance(c, str) for c in commands):
        raise ValueError("session_commands must be a list of strings")

    offset = raw.get("session_window_offset")
    if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
        raise ValueError(f"session_window_offset must be a non-negative integer, got {offset!r}")

    hydration_file = raw.get("hydration_file")
    if not isinstance(hydration_file, str) or not hydration_file:
        raise ValueError("hydration_file must be a non-empty string")

    logging_section = raw.get("logging") or {}
    if not isinstance(logging_section, dict):
        raise ValueError("logging must be a table")
    log_mode = logging_section.get("mode")
    if log_mode is not None and log_mode not in LOG_MODES:
        raise ValueError(f"logging.mode must be one of {', '.join(LOG_MODES)}, got {log_mode!r}")
    log_file = logging_section.get("file")

    kwargs = {}
    if raw.get("pane_cache"):
        kwargs["pane_cache_path"] = Path(raw["pane_cache"]).expanduser()

    return Config(
        search_paths=search_paths,
        max_depth=max_depth,
        session_commands=tuple(commands),
        session_window_offset=offset,
        hydration_file=hydration_file,
        log_mode=log_mode,
        log_file=Path(log_file).expanduser() if log_file else None,
        **kwargs,
    )


def load_config_from_path(config_path: Path) -> Result[Config]:
    """
    Load configuration from a TOML file with defaults fallback.

    A missing file is not an error: the defaults apply.

    Args:
        config_path: Path to the TOML file

    Returns:
        Result[Config]: Ok with the merged config, or Err with error details
    """
    start_time = time.perf_counter()
    logger.debug(
        "Loading config from path",
        operation="load_config_from_path",
        status="started",
        config_path=str(config_path)
    )

    user_config = {}
    if config_path.exists():
        try:
            with open(config_path, "rb") as f:
                user_config = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            error_context = extract_toml_error_context(e, config_path)
            logger.error(
                "Invalid TOML syntax in configuration file",
                operation="load_config_from_path",
                status="failed",
                reported=True,
                file=str(config_path),
                line_number=error_context["line_number"],
                line_content=error_context["line_content"],
                error=error_context["formatted_message"]
            )
            return Result.err(Error(
                error_type=ErrorType.PARSE_ERROR,
                message=error_context["formatted_message"],
                context={"config_path": str(config_path), "line_number": error_context["line_number"]},
                original_exception=e
            ))
        except OSError as e:
            return Result.err(Error(
                error_type=ErrorType.FILE_NOT_FOUND,
                message=f"Cannot read config file {config_path}: {e}",
                context={"config_path": str(config_path)},
                original_exception=e
            ))
    else:
        logger.debug(
            "Config file does not exist, using defaults",
            operation="load_config_from_path",
            status="default",
            config_path=str(config_path)
        )

    try:
        config = build_config(deep_merge(DEFAULT_CONFIG, user_config))
    except (ValueError, TypeError) as e:
        logger.error(
            "Invalid configuration value",
            operation="load_config_from_path",
            status="failed",
            reported=True,
            config_path=str(config_path),
            error=str(e)
        )
        return Result.err(Error(
            error_type=ErrorType.VALIDATION_ERROR,
            message=f"{config_path}: {e}",
            context={"config_path": str(config_path)},
            original_exception=e
        ))

    duration_ms = int((time.perf_counter() - start_time) * 1000)
    logger.debug(
        "Config loaded successfully",
        operation="load_config_from_path",
        status="success",
        config_path=str(config_path),
        metrics={
            "search_paths": len(config.search_paths),
            "session_commands": len(config.session_commands),
            "duration_ms": duration_ms
        }
    )
    return Result.ok(config)
