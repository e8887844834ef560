"""Tests for logging configuration and the server runner."""

import logging

import pytest

import main as runner
from foodmanager.app_logging import configure_logging
from foodmanager.config import get_settings


@pytest.fixture
def package_logger():
    logger = logging.getLogger("foodmanager")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    logger.handlers.clear()
    yield logger
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


def test_configure_logging_keeps_one_handler(package_logger) -> None:
    configure_logging("INFO")
    configure_logging("DEBUG")

    assert len(package_logger.handlers) == 1
    assert package_logger.level == logging.DEBUG
    assert package_logger.propagate is False


def test_configure_logging_reads_level_from_settings(package_logger, settings, monkeypatch) -> None:
    monkeypatch.setenv("FOODMANAGER_LOG_LEVEL", "warning")
    get_settings.cache_clear()

    configure_logging()

    assert package_logger.level == logging.WARNING


def test_configure_logging_rejects_unknown_level(package_logger) -> None:
    with pytest.raises(ValueError):
        configure_logging("LOUD")


def test_runner_uses_settings(package_logger, settings, monkeypatch) -> None:
    monkeypatch.setenv("FOODMANAGER_HOST", "127.0.0.1")
    monkeypatch.setenv("FOODMANAGER_PORT", "9001")
    monkeypatch.setenv("FOODMANAGER_RELOAD", "false")
    get_settings.cache_clear()
    calls = []
    monkeypatch.setattr(runner.uvicorn, "run", lambda target, **kwargs: calls.append((target, kwargs)))

    runner.main()

    assert calls == [
        ("main:app", {"host": "127.0.0.1", "port": 9001, "reload": False, "log_level": "info"}),
    ]


def test_runner_falls_back_when_reload_is_blocked(package_logger, settings, monkeypatch) -> None:
    monkeypatch.setenv("FOODMANAGER_RELOAD", "true")
    get_settings.cache_clear()
    reloads = []

    def fake_run(target, **kwargs):
        reloads.append(kwargs["reload"])
        if kwargs["reload"]:
            raise PermissionError("watcher blocked")

    monkeypatch.setattr(runner.uvicorn, "run", fake_run)

    runner.main()

    assert reloads == [True, False]
