"""Tests for logging setup and contextual records."""

from __future__ import annotations

import logging
from pathlib import Path

import orjson
import pytest

from sievepath.core.logging import (
    JSONFormatter,
    get_contextual_logger,
    get_logger,
    setup_logging,
)


@pytest.fixture
def package_logger():
    target = logging.getLogger("sievepath")
    level, handlers = target.level, list(target.handlers)
    yield target
    for handler in target.handlers:
        if handler not in handlers:
            handler.close()
    target.setLevel(level)
    target.handlers[:] = handlers


class TestLogging:
    def test_logger_names_are_prefixed(self):
        assert get_logger("extract.resolver").name == "sievepath.extract.resolver"
        assert get_logger().name == "sievepath"

    def test_json_formatter_includes_context(self):
        record = logging.LogRecord("sievepath.x", logging.WARNING, __file__, 1, "msg %s", ("one",), None)
        record.field = "price"
        record.url = "https://example.com"
        data = orjson.loads(JSONFormatter().format(record))

        assert data["message"] == "msg one"
        assert data["level"] == "WARNING"
        assert data["field"] == "price"
        assert data["url"] == "https://example.com"
        assert "engine" not in data

    def test_contextual_logger_attaches_extra(self, caplog):
        log = get_contextual_logger("service", field="title", engine=None, url="https://example.com")
        with caplog.at_level(logging.INFO, logger="sievepath.service"):
            log.info("hello", extra={"transform": "regex"})

        record = caplog.records[-1]
        assert record.field == "title"
        assert record.url == "https://example.com"
        assert record.transform == "regex"
        assert not hasattr(record, "engine")

    def test_with_context_extends(self):
        log = get_contextual_logger("service", url="https://example.com").with_context(field="name")
        assert log.context == {"url": "https://example.com", "field": "name"}

    def test_setup_logging_writes_json_file(self, tmp_path: Path, package_logger):
        log_file = tmp_path / "logs" / "run.jsonl"
        setup_logging("DEBUG", log_file=log_file, rich_console=False)

        get_contextual_logger("fetch.http", url="https://example.com").debug("fetched")
        for handler in package_logger.handlers:
            handler.flush()

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert orjson.loads(lines[-1])["url"] == "https://example.com"

    def test_setup_logging_replaces_handlers(self, package_logger):
        setup_logging("INFO", rich_console=False)
        setup_logging("WARNING", rich_console=False)
        assert len(package_logger.handlers) == 1
        assert package_logger.level == logging.WARNING

    def test_unknown_level(self, package_logger):
        with pytest.raises(ValueError):
            setup_logging("CHATTY")
