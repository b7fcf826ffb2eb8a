"""
Pytest configuration and shared fixtures.

This module provides common fixtures for testing the AV risk dashboard.
All fixtures use mocks or httpx.MockTransport to avoid real calls to
Current RMS.

Usage:
    async def test_example(mock_rms_client, test_container):
        # mock_rms_client is an AsyncMock CurrentRMSClient
        # test_container has it wired into the OpportunityService
        pass
"""

import os
from datetime import datetime, timezone

# Settings are read at import time; keep tests on demo-capable defaults
os.environ.setdefault("APP_ENV", "development")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.pop("CURRENT_RMS_SUBDOMAIN", None)
os.environ.pop("CURRENT_RMS_AUTH_TOKEN", None)

import pytest
from unittest.mock import AsyncMock, MagicMock

from risk_engine.paginated_fetch import PageResult


NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# RECORD FIXTURES
# =============================================================================


@pytest.fixture
def raw_record():
    """
    Factory fixture for wire-shaped Current RMS opportunity records.

    Usage:
        def test_example(raw_record):
            record = raw_record(1, score=3.5, reviewed="Yes")
    """

    def _create_record(
        record_id: int = 1,
        subject: str = "Conference AV",
        starts_at: str | None = "2026-03-15T09:00:00Z",
        charge_total="1000.00",
        cost_total="400.00",
        score=None,
        reviewed="",
        mitigation=0,
        last_updated: str = "",
        updated_at: str = "2026-03-01T10:00:00Z",
        factors: dict | None = None,
        notes: str = "",
    ) -> dict:
        custom_fields = {
            "risk_score": score if score is not None else "",
            "risk_reviewed": reviewed,
            "risk_mitigation_plan": mitigation,
            "risk_mitigation_notes": notes,
            "risk_last_updated": last_updated,
        }
        for key, value in (factors or {}).items():
            custom_fields[f"risk_{key}"] = value
        return {
            "id": record_id,
            "subject": subject,
            "starts_at": starts_at,
            "charge_total": charge_total,
            "cost_total": cost_total,
            "owner": {"name": "Dana Whitfield"},
            "organisation": {"name": "Northlight Live"},
            "updated_at": updated_at,
            "custom_fields": custom_fields,
        }

    return _create_record


@pytest.fixture
def all_threes():
    """Complete selection with every factor at the midpoint."""
    from risk_engine.factor_catalog import default_selection

    return default_selection()


@pytest.fixture
def sample_records(raw_record):
    """
    One record per tier plus an unscored one, all within the 0-30 window.

    Usage:
        def test_example(sample_records):
            assert len(sample_records) == 5
    """
    return [
        raw_record(1, subject="Gala", score=1.5, reviewed="Yes", mitigation=2,
                   last_updated="2026-03-05T10:00:00Z"),
        raw_record(2, subject="Launch", score=2.5, mitigation=1,
                   last_updated="2026-03-05T10:00:00Z"),
        raw_record(3, subject="Festival", score=3.5, reviewed="Yes",
                   last_updated="2026-02-20T10:00:00Z"),
        raw_record(4, subject="Arena", score=4.5, charge_total="5000", cost_total="2500",
                   last_updated="2026-03-05T10:00:00Z"),
        raw_record(5, subject="Graduation"),
    ]


# =============================================================================
# RMS CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def page_fetcher():
    """
    Factory for async page fetchers serving a fixed list of records.

    Usage:
        async def test_example(page_fetcher):
            fetcher = page_fetcher(records, page_size=50, report_total=True)
            page = await fetcher(1)
    """

    def _create_fetcher(records: list, page_size: int, report_total: bool = True):
        calls: list[int] = []

        async def _fetch(page: int) -> PageResult:
            calls.append(page)
            start = (page - 1) * page_size
            return PageResult(
                page=page,
                items=records[start:start + page_size],
                total_count=len(records) if report_total else None,
            )

        _fetch.calls = calls
        return _fetch

    return _create_fetcher


@pytest.fixture
def mock_rms_client(sample_records):
    """
    AsyncMock that simulates CurrentRMSClient.

    Serves `sample_records` as a single listing page and echoes PATCH
    payloads back.

    Usage:
        async def test_example(mock_rms_client):
            mock_rms_client.list_opportunities.side_effect = UpstreamServiceError("down")
    """
    client = AsyncMock()
    client.configured = True

    async def _list(page: int, per_page: int, date_range=None) -> PageResult:
        start = (page - 1) * per_page
        return PageResult(
            page=page,
            items=sample_records[start:start + per_page],
            total_count=len(sample_records),
        )

    client.list_opportunities.side_effect = _list
    client.update_opportunity.return_value = {}
    return client


# =============================================================================
# SERVICE / CONTAINER FIXTURES
# =============================================================================


@pytest.fixture
def test_settings():
    """Settings with the credentials unset and a small page size."""
    from avrisk.core.config import Settings

    return Settings(
        _env_file=None,
        current_rms_subdomain=None,
        current_rms_auth_token=None,
        rms_page_size=2,
        demo_fallback_enabled=True,
    )


@pytest.fixture
def opportunity_service(mock_rms_client, test_settings):
    """
    OpportunityService over a fresh state, a mocked client and a fixed clock.

    Usage:
        async def test_example(opportunity_service):
            await opportunity_service.ensure_loaded()
    """
    from avrisk.services.opportunity_service import OpportunityService
    from avrisk.state import create_initial_state

    return OpportunityService(
        client=mock_rms_client,
        state=create_initial_state(),
        config=test_settings,
        clock=lambda: NOW,
    )


@pytest.fixture
def test_container(opportunity_service):
    """
    Process container with the mocked OpportunityService installed.

    Usage:
        def test_example(test_container):
            service = test_container.opportunity_service
    """
    from avrisk.services.container import get_container, reset_container

    reset_container()
    container = get_container()
    container.override_rms_client(opportunity_service.client)
    container.override_opportunity_service(opportunity_service)
    yield container
    reset_container()


# =============================================================================
# LOGGER FIXTURES
# =============================================================================


@pytest.fixture
def mock_sync_logger():
    """
    Mock SyncLogger for asserting on fetch tracing.

    Usage:
        def test_example(mock_sync_logger):
            mock_sync_logger.fallback.assert_called_once()
    """
    logger = MagicMock()
    logger.fetch_start = MagicMock()
    logger.page_received = MagicMock()
    logger.fetch_end = MagicMock()
    logger.fallback = MagicMock()
    return logger


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
