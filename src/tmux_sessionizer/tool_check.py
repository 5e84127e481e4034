# =============================================================================
# External Tool Detection
# =============================================================================

from __future__ import annotations

import shutil

from loguru import logger

from .errors import MissingToolError


def find_tool(name: str) -> str | None:
    path = shutil.which(name)
    logger.debug(
        "Tool lookup",
        operation="find_tool",
        tool=name,
        path=path
    )
    return path


def require_tools(*names: str) -> None:
    """
    Fail fast when a required binary is missing.

    Raises:
        MissingToolError: for the first missing tool
    """
    for name in names:
        if find_tool(name) is None:
            logger.error(
                "Required tool missing",
                operation="require_tools",
                status="failed",
                reported=True,
                tool=name
            )
            raise MissingToolError(name)
