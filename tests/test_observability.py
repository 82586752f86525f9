"""
Tests for observability — severity-tagged console logging.
"""

from __future__ import annotations

import logging

import pytest

from provisioner.core.observability.logging_config import (
    SUCCESS,
    SeverityTagFormatter,
    _parse_level,
    attach_log_file,
    log_success,
    setup_logging,
)


def _record(level: int, msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord("provisioner.test", level, __file__, 1, msg, None, None)


class TestSeverityTagFormatter:
    @pytest.mark.parametrize("level, tag", [
        (logging.INFO, "[INFO]"),
        (SUCCESS, "[SUCCESS]"),
        (logging.WARNING, "[WARN]"),
        (logging.ERROR, "[ERROR]"),
    ])
    def test_tags(self, level, tag):
        formatter = SeverityTagFormatter("%(message)s", color=False)
        assert formatter.format(_record(level)) == f"{tag} hello"

    def test_color(self):
        formatter = SeverityTagFormatter("%(message)s", color=True)
        line = formatter.format(_record(logging.ERROR))
        assert "\x1b[" in line
        assert line.endswith(" hello")


class TestParseLevel:
    @pytest.mark.parametrize("name, level", [
        ("DEBUG", logging.DEBUG),
        ("info", logging.INFO),
        ("SUCCESS", SUCCESS),
        ("warning", logging.WARNING),
        (None, logging.INFO),
        ("LOUD", logging.INFO),
    ])
    def test_names(self, name, level):
        assert _parse_level(name) == level


class TestSetupLogging:
    def test_console_level(self):
        setup_logging(level="WARNING", color=False)
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "install.log"
        setup_logging(level="WARNING", log_file=str(log_file), log_file_level="DEBUG", color=False)

        logger = logging.getLogger("provisioner.test")
        logger.debug("only in the file")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert logging.getLogger().level == logging.DEBUG
        assert "only in the file" in log_file.read_text()

    def test_success_level(self, caplog):
        logger = logging.getLogger("provisioner.test")
        with caplog.at_level(logging.INFO):
            log_success(logger, "Build %s", "completed")
        assert caplog.records[-1].levelno == SUCCESS
        assert caplog.records[-1].getMessage() == "Build completed"

    def test_attach_log_file_later(self, tmp_path):
        log_file = tmp_path / "install.log"
        setup_logging(level="INFO", color=False)
        assert not log_file.exists()

        attach_log_file(str(log_file))
        logging.getLogger("provisioner.test").info("after the root check")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert len(logging.getLogger().handlers) == 2
        assert "after the root check" in log_file.read_text()
