# File: tests/infrastructure/test_logging_setup.py
# Purpose: Logging setup and the redaction processor
import logging

import pytest

from shell_agent.infrastructure.logging import get_logger, setup_logging
from shell_agent.infrastructure.logging.formatters import SensitiveDataFilter, redact_event


@pytest.fixture()
def restore_root_logger():
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def test_file_logging_creates_log_files(tmp_path, restore_root_logger):
    setup_logging(log_level="DEBUG", log_dir=str(tmp_path / "logs"), app_name="shell_agent_test")
    get_logger("tests").error("something_failed", reason="test")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert (tmp_path / "logs" / "shell_agent_test.log").exists()
    error_log = tmp_path / "logs" / "shell_agent_test_error.log"
    assert "something_failed" in error_log.read_text(encoding="utf-8")


def test_console_only_logging(restore_root_logger):
    setup_logging(log_level="INFO")

    handlers = logging.getLogger().handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], logging.StreamHandler)


class TestRedaction:
    def test_redact_event_processor(self):
        event = redact_event(None, "info", {"event": "login", "password": "hunter2", "user": "bob"})

        assert event == {"event": "login", "password": "***REDACTED***", "user": "bob"}

    def test_nested_structures(self):
        data = {"items": [{"token": "t"}, {"name": "n"}], "count": 2}

        assert SensitiveDataFilter.redact(data) == {
            "items": [{"token": "***REDACTED***"}, {"name": "n"}],
            "count": 2,
        }
