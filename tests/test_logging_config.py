"""Tests for src/logging_config.py."""

from __future__ import annotations

import logging

import structlog

from src.logging_config import configure_logging


class TestConfigureLogging:
    """Test configure_logging."""

    def test_configures_structlog(self):
        configure_logging("info")
        assert structlog.is_configured()

    def test_quiets_sql_echo_outside_debug(self):
        configure_logging("warning")
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
