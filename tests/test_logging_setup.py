"""Tests for the CLI logging bootstrap."""

import logging

import pytest

import membuddy.io.logging_setup


@pytest.fixture(autouse=True)
def _reset_logging():
    membuddy.io.logging_setup.reset()
    yield
    membuddy.io.logging_setup.reset()


def test_defaults_to_warning(tmp_path, monkeypatch):
    monkeypatch.delenv("MEMBUDDY_LOG_LEVEL", raising=False)
    monkeypatch.setenv("MEMBUDDY_LOG_FILE", str(tmp_path / "run.log"))

    runtime = membuddy.io.logging_setup.configure()

    assert runtime.level_name == "WARNING"
    assert runtime.file_path == str(tmp_path / "run.log")
    assert logging.getLogger("membuddy").level == logging.WARNING


def test_level_from_env_and_file_written(tmp_path, monkeypatch):
    log_file = tmp_path / "logs" / "run.log"
    monkeypatch.setenv("MEMBUDDY_LOG_LEVEL", "debug")
    monkeypatch.setenv("MEMBUDDY_LOG_FILE", str(log_file))

    runtime = membuddy.io.logging_setup.configure()
    logging.getLogger("membuddy.core.walker").debug("hello from walker")
    for handler in logging.getLogger("membuddy").handlers:
        handler.flush()

    assert runtime.level == logging.DEBUG
    assert "hello from walker" in log_file.read_text()


def test_unknown_level_falls_back_to_warning(tmp_path, monkeypatch):
    monkeypatch.setenv("MEMBUDDY_LOG_LEVEL", "chatty")
    monkeypatch.setenv("MEMBUDDY_LOG_FILE", str(tmp_path / "run.log"))
    assert membuddy.io.logging_setup.configure().level == logging.WARNING


def test_default_file_lands_in_log_dir(tmp_path, monkeypatch):
    monkeypatch.delenv("MEMBUDDY_LOG_FILE", raising=False)
    monkeypatch.setenv("MEMBUDDY_LOG_DIR", str(tmp_path))

    runtime = membuddy.io.logging_setup.configure()

    assert runtime.file_path.startswith(str(tmp_path))
    assert runtime.file_path.endswith(".log")
    assert "membuddy-" in runtime.file_path


def test_configure_is_idempotent(tmp_path, monkeypatch):
    monkeypatch.setenv("MEMBUDDY_LOG_FILE", str(tmp_path / "run.log"))
    first = membuddy.io.logging_setup.configure()
    second = membuddy.io.logging_setup.configure()
    assert first is second
    assert len(logging.getLogger("membuddy").handlers) == 2


def test_reset_restores_propagation(tmp_path, monkeypatch):
    monkeypatch.setenv("MEMBUDDY_LOG_FILE", str(tmp_path / "run.log"))
    first = membuddy.io.logging_setup.configure()
    membuddy.io.logging_setup.reset()
    logger = logging.getLogger("membuddy")
    assert logger.handlers == []
    assert logger.propagate is True
    assert membuddy.io.logging_setup.configure() is not first
