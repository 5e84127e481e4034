# =============================================================================
# Structured Logging Setup (JSONL format)
# =============================================================================

from __future__ import annotations

import json
import sys
import traceback
from contextvars import ContextVar
from pathlib import Path

import platformdirs
from loguru import logger

APP_NAME = "tmux-sessionizer"
LOG_MODES = ("echo", "file")

# Correlation ID for one launcher run
trace_id_var: ContextVar[str | None] = ContextVar('trace_id', default=None)


def json_sink(message):
    """JSONL sink - writes to stderr."""
    record = message.record
    log_entry = {
        "timestamp": record["time"].strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
        "level": record["level"].name.lower(),
        "component": record["function"],
        "operation": record["extra"].get("operation", "unknown"),
        "operation_status": record["extra"].get("status", None),
        "trace_id": record["extra"].get("trace_id") or trace_id_var.get(),
        "message": record["message"],
        "context": {k: v for k, v in record["extra"].items()
                    if k not in ("operation", "status", "trace_id", "metrics")},
        "metrics": record["extra"].get("metrics", {}),
        "error": None
    }

    if record["exception"]:
        exc_type, exc_value, exc_tb = record["exception"]
        tb_lines = []
        if exc_tb:
            tb_lines = traceback.format_tb(exc_tb)

        log_entry["error"] = {
            "type": exc_type.__name__ if exc_type else "Unknown",
            "message": str(exc_value) if exc_value else "Unknown error",
            "traceback_lines": tb_lines
        }

    sys.stderr.write(json.dumps(log_entry, default=str) + "\n")


def default_log_file() -> Path:
    # macOS: ~/Library/Logs/tmux-sessionizer/
    # Linux: ~/.local/state/tmux-sessionizer/log/
    return Path(platformdirs.user_log_dir(appname=APP_NAME)) / "tmux-sessionizer.jsonl"


def _unreported(record) -> bool:
    return not record["extra"].get("reported")


def setup_logger(mode: str | None = None, log_file: Path | None = None):
    """
    Configure Loguru for the launcher.

    Args:
        mode: None (warnings only on stderr), "echo" (everything on stderr)
            or "file" (everything to a rotated JSONL file)
        log_file: Override for the file sink location

    Returns:
        The configured logger
    """
    logger.remove()

    # Errors tagged reported=True reach the user as the CLI's own message
    logger.add(
        json_sink,
        level="DEBUG" if mode == "echo" else "WARNING",
        filter=None if mode == "echo" else _unreported
    )

    if mode == "file":
        target = log_file or default_log_file()
        target.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(target),
            format="{message}",
            serialize=True,
            rotation="10 MB",
            retention="7 days",
            compression="gz",
            level="DEBUG"
        )

    return logger
