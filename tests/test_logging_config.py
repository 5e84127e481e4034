"""Tests for the stderr JSONL sink."""

import json

from loguru import logger

from tmux_sessionizer.logging_config import setup_logger


def stderr_entries(capsys):
    return [json.loads(line) for line in capsys.readouterr().err.splitlines() if line]


def test_default_mode_emits_warnings(capsys):
    setup_logger()

    logger.info("quiet", operation="test")
    logger.warning("loud", operation="test", status="failed")

    entries = stderr_entries(capsys)
    assert [entry["message"] for entry in entries] == ["loud"]
    assert entries[0]["operation"] == "test"
    assert entries[0]["operation_status"] == "failed"


def test_default_mode_skips_reported_errors(capsys):
    setup_logger()

    logger.error("Launcher failed", operation="main", status="failed", reported=True)

    assert capsys.readouterr().err == ""


def test_echo_mode_keeps_reported_errors(capsys):
    setup_logger("echo")

    logger.debug("detail", operation="test")
    logger.error("Launcher failed", operation="main", status="failed", reported=True)

    messages = [entry["message"] for entry in stderr_entries(capsys)]
    assert messages == ["detail", "Launcher failed"]
