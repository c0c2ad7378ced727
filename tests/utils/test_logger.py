"""Tests for the application logger."""

from __future__ import annotations

import logging.handlers

from bunny_todo.utils.logger import get_logger


def test_singleton_with_rotating_file_handler(isolated_log_dir):
    logger = get_logger()
    assert get_logger() is logger
    assert logger.propagate is False
    handlers = [
        h for h in logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)
    ]
    assert len(handlers) == 1


def test_messages_reach_the_log_file(isolated_log_dir):
    logger = get_logger()
    logger.info("hello from the tests")
    for handler in logger.handlers:
        handler.flush()
    log_file = isolated_log_dir / "bunny_todo.log"
    assert "hello from the tests" in log_file.read_text(encoding="utf-8")
