"""Unit tests for logging configuration and structured events."""

from __future__ import annotations

import json
import logging
import logging.handlers

import pytest

from fundscope.data_pipeline.logging_utils import log_event
from fundscope.observability import JsonLogFormatter, configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        configured = type(handler) is logging.StreamHandler or isinstance(handler, logging.handlers.RotatingFileHandler)
        if configured and handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


class TestJsonLogFormatter:
    def test_payload(self):
        record = logging.LogRecord("fundscope.test", logging.WARNING, __file__, 1, "hello %s", ("x",), None)
        payload = json.loads(JsonLogFormatter().format(record))
        assert payload["level"] == "WARNING"
        assert payload["logger"] == "fundscope.test"
        assert payload["message"] == "hello x"


class TestConfigureLogging:
    def test_level(self):
        configure_logging("debug")
        assert logging.getLogger().level == logging.DEBUG

    def test_json_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "fundscope.log"
        configure_logging("INFO", json_format=True, log_file=str(log_file))
        logging.getLogger("fundscope.test").info("written")
        for handler in logging.getLogger().handlers:
            handler.flush()

        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        assert json.loads(line)["message"] == "written"


class TestLogEvent:
    def test_structured_payload(self, caplog):
        logger = logging.getLogger("fundscope.test.events")
        with caplog.at_level(logging.INFO, logger="fundscope.test.events"):
            log_event(logger, "fetch_complete", count=3)
        assert json.loads(caplog.records[-1].getMessage()) == {"event": "fetch_complete", "count": 3}

    def test_disabled_level_is_skipped(self, caplog):
        logger = logging.getLogger("fundscope.test.quiet")
        with caplog.at_level(logging.WARNING, logger="fundscope.test.quiet"):
            log_event(logger, "noise", logging.DEBUG)
        assert caplog.records == []
