"""Tests for logging bootstrap."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from mcpland.logging_utils import configure_logging


def test_configure_logging_installs_single_rich_handler():
    configure_logging()
    configure_logging()
    logger = logging.getLogger("mcpland")
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], RichHandler)
    assert logger.level == logging.INFO
    assert logger.propagate is False


def test_verbose_logs_debug():
    configure_logging(verbose=True)
    assert logging.getLogger("mcpland").level == logging.DEBUG


def test_third_party_loggers_quietened():
    configure_logging()
    assert logging.getLogger("LiteLLM").level == logging.WARNING
    assert logging.getLogger("httpx").level == logging.WARNING
