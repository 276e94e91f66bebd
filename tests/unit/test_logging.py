"""Unit tests for gigtrail.utils.logging."""

from __future__ import annotations

import io
import sys

import pytest

from gigtrail.utils.logging import configure_logging, get_logger


class TestConfigureLogging:
    def test_follows_replaced_stderr(self, monkeypatch: pytest.MonkeyPatch) -> None:
        configure_logging(log_level="INFO")
        logger = get_logger("gigtrail.tests")

        first = io.StringIO()
        monkeypatch.setattr(sys, "stderr", first)
        logger.warning("first_stream_event")
        assert "first_stream_event" in first.getvalue()
        first.close()

        second = io.StringIO()
        monkeypatch.setattr(sys, "stderr", second)
        logger.warning("second_stream_event")

        assert "second_stream_event" in second.getvalue()

    def test_level_filters_below_threshold(self, monkeypatch: pytest.MonkeyPatch) -> None:
        stream = io.StringIO()
        monkeypatch.setattr(sys, "stderr", stream)
        try:
            configure_logging(log_level="WARNING")
            logger = get_logger("gigtrail.tests")
            logger.info("quiet_event")
            logger.error("loud_event")
        finally:
            configure_logging(log_level="INFO")

        output = stream.getvalue()
        assert "quiet_event" not in output
        assert "loud_event" in output
