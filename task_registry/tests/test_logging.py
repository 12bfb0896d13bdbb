import logging

import pytest
import structlog

from task_registry.logging_config import setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.parametrize("log_format", ["dev", "json"])
def test_setup_logging_installs_structlog_formatter(monkeypatch, restore_logging, log_format):
    monkeypatch.setenv("TASK_REGISTRY_LOG_FORMAT", log_format)
    monkeypatch.setenv("TASK_REGISTRY_LOG_LEVEL", "debug")

    setup_logging()

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)
    assert root.level == logging.DEBUG


def test_unknown_level_falls_back_to_info(monkeypatch, restore_logging):
    monkeypatch.setenv("TASK_REGISTRY_LOG_LEVEL", "chatty")

    setup_logging()

    assert logging.getLogger().level == logging.INFO
