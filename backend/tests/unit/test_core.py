"""
Unit tests for the core settings and the fetch trace logger.
"""

import logging

import pytest
from pydantic import ValidationError

from avrisk.core.config import Settings
from avrisk.core.logging import FLOW_SYMBOLS, SyncLogger, get_logger


class TestSettings:

    def test_unknown_timezone_rejected(self):
        with pytest.raises(ValidationError, match="Unknown timezone"):
            Settings(_env_file=None, dashboard_timezone="Mars/Olympus")

    def test_rms_configured_needs_both_credentials(self):
        assert not Settings(
            _env_file=None,
            current_rms_subdomain="acme",
            current_rms_auth_token=None,
        ).rms_configured
        assert Settings(
            _env_file=None,
            current_rms_subdomain="acme",
            current_rms_auth_token="secret",
        ).rms_configured

    def test_timezone_property(self):
        config = Settings(_env_file=None, dashboard_timezone="Europe/London")

        assert config.timezone.key == "Europe/London"


class TestSyncLogger:

    def test_get_logger_is_cached(self):
        assert get_logger("avrisk.test") is get_logger("avrisk.test")

    def test_fetch_summary(self, caplog):
        caplog.set_level(logging.DEBUG)
        sync_logger = SyncLogger()

        sync_logger.fetch_start(scope="2026-03-10..open", page_size=50)
        sync_logger.page_received(page=1, rows=50, accumulated=50, total=None)
        sync_logger.fetch_end(loaded=48, skipped=2, pages=2, truncated=True)

        text = caplog.text
        assert "Scope: 2026-03-10..open | Page size: 50" in text
        assert f"[PAGE 1] {FLOW_SYMBOLS['arrow']} 50 rows | 50/?" in text
        assert "48 loaded, 2 skipped" in text
        assert "(truncated at ceiling)" in text
        assert all(record.name == "sync.current_rms" for record in caplog.records)

    def test_fallback_is_a_warning(self, caplog):
        caplog.set_level(logging.DEBUG)

        SyncLogger().fallback(RuntimeError("down"))

        assert caplog.records[-1].levelno == logging.WARNING
        assert "RuntimeError: down" in caplog.records[-1].getMessage()
