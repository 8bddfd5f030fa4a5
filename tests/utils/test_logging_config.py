"""Tests for logging configuration."""

import logging

import pytest

from slung_load.utils.logging_config import LOG_FILE_NAME, SOLVER_LOGGER, setup_logging


@pytest.fixture
def restore_root_logger():
    """Fixture restoring root logger handlers and level after a test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


def test_setup_logging_console_only(restore_root_logger):
    """Test console-only logging setup."""
    log_file = setup_logging(log_level=logging.DEBUG)

    assert log_file is None
    assert logging.getLogger().level == logging.DEBUG


def test_setup_logging_with_file(tmp_path, restore_root_logger):
    """Test that a log file is created in the requested directory."""
    log_dir = tmp_path / "logs"

    log_file = setup_logging(log_dir=log_dir, log_level=logging.INFO)
    logging.getLogger("slung_load.test").info("hello planner")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert log_file == log_dir / LOG_FILE_NAME
    assert log_file.exists()
    assert "hello planner" in log_file.read_text()


def test_setup_logging_quiets_solver(restore_root_logger):
    """Test that solver chatter stays below WARNING."""
    setup_logging(log_level=logging.DEBUG)

    assert logging.getLogger(SOLVER_LOGGER).level == logging.WARNING


def test_setup_logging_solver_level(restore_root_logger):
    """Test that the solver level can be raised but never drops below the planner level."""
    setup_logging(log_level=logging.INFO, solver_log_level=logging.ERROR)
    assert logging.getLogger(SOLVER_LOGGER).level == logging.ERROR

    setup_logging(log_level=logging.ERROR, solver_log_level=logging.DEBUG)
    assert logging.getLogger(SOLVER_LOGGER).level == logging.ERROR


def test_setup_logging_replaces_handlers(tmp_path, restore_root_logger):
    """Test that a second call does not stack handlers."""
    setup_logging(log_dir=tmp_path)
    setup_logging(log_dir=tmp_path)

    file_handlers = [
        h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)
    ]
    assert len(file_handlers) == 1
