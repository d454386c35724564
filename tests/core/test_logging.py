"""Tests for fieldspine.core.logging module."""

import json

import structlog

from fieldspine.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


def _last_json_line(capsys) -> dict:
    out = capsys.readouterr().out.strip().splitlines()
    return json.loads(out[-1])


class TestConfigureLogging:
    def teardown_method(self):
        clear_context()
        structlog.reset_defaults()

    def test_json_output_is_ecs_compatible(self, capsys):
        configure_logging(level="INFO", json_format=True, service="fieldspine-test")
        get_logger("fieldspine.test").info("fields_resolved", pattern="logs-*", field_count=3)

        event = _last_json_line(capsys)
        assert event["event"] == "fields_resolved"
        assert event["pattern"] == "logs-*"
        assert event["field_count"] == 3
        assert event["log.level"] == "info"
        assert event["service.name"] == "fieldspine-test"
        assert event["log.logger"] == "fieldspine.test"
        assert "@timestamp" in event

    def test_logger_created_before_configure(self, capsys):
        log = get_logger("fieldspine.early")
        configure_logging(level="INFO", json_format=True)
        log.info("cache_hit", cache_key="fields-1")

        event = _last_json_line(capsys)
        assert event["event"] == "cache_hit"
        assert event["log.logger"] == "fieldspine.early"

    def test_level_filtering(self, capsys):
        configure_logging(level="WARNING", json_format=True)
        get_logger("fieldspine.test").debug("cache_miss", cache_key="k")
        assert capsys.readouterr().out == ""

    def test_bound_context_is_included(self, capsys):
        configure_logging(level="INFO", json_format=True)
        bind_context(pattern="valid")
        get_logger("fieldspine.test").info("cache_cleared")
        assert _last_json_line(capsys)["pattern"] == "valid"

    def test_log_context_unbinds_on_exit(self, capsys):
        configure_logging(level="INFO", json_format=True)
        log = get_logger("fieldspine.test")
        with LogContext(cache_key="fields-1"):
            log.info("inside")
            assert _last_json_line(capsys)["cache_key"] == "fields-1"
        log.info("outside")
        assert "cache_key" not in _last_json_line(capsys)
