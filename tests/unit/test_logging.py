"""Unit tests for structured logging setup."""

from __future__ import annotations

import json

import pytest
import structlog

from fs_object_store.infrastructure.logging import SERVICE_NAME, get_logger, setup_logging


@pytest.fixture(autouse=True)
def restore_structlog():
    yield
    structlog.reset_defaults()


@pytest.mark.unit
class TestLogging:
    """Test logger configuration and event context."""

    def test_json_events_carry_service_context(self, capsys):
        logger = setup_logging(level="info", log_format="json", environment="staging")
        logger.info("object_put", bucket="b", key="k")

        event = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert event["event"] == "object_put"
        assert event["service"] == SERVICE_NAME
        assert event["environment"] == "staging"
        assert event["bucket"] == "b"
        assert event["level"] == "info"
        assert "timestamp" in event

    def test_level_filters_events(self, capsys):
        logger = setup_logging(level="warning")
        logger.info("hidden")
        logger.warning("shown")
        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out

    def test_bound_context_wins_over_defaults(self, capsys):
        setup_logging(level="info", environment="production")
        get_logger("replication", environment="dr-site").info("mirror_failed")
        event = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert event["environment"] == "dr-site"
