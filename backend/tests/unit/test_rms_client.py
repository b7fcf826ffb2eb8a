"""
Unit tests for CurrentRMSClient.

Requests are served by httpx.MockTransport; nothing leaves the process.
"""

import json
from datetime import date

import httpx
import pytest

from avrisk.core.exceptions import (
    InvalidUpstreamShapeError,
    RMSConfigurationError,
    UpstreamServiceError,
)
from avrisk.services.rms_client import CurrentRMSClient, clean_subdomain
from risk_engine.date_range_resolver import DateRange


def _client(handler, subdomain="acme.current-rms.com", token="secret") -> CurrentRMSClient:
    return CurrentRMSClient(
        subdomain=subdomain,
        auth_token=token,
        base_url="https://api.current-rms.com/api/v1",
        transport=httpx.MockTransport(handler),
    )


class TestCall:
    """Tests for the generic authenticated call."""

    @pytest.mark.asyncio
    async def test_headers_and_subdomain(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json={"ok": True})

        data = await _client(handler).call("members")

        request = seen["request"]
        assert data == {"ok": True}
        assert request.url.path == "/api/v1/members"
        assert request.headers["X-SUBDOMAIN"] == "acme"
        assert request.headers["X-AUTH-TOKEN"] == "secret"
        assert request.url.params["subdomain"] == "acme"

    @pytest.mark.asyncio
    async def test_body_sent_for_patch(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={})

        await _client(handler).call("opportunities/1", "PATCH", body={"a": 1})

        assert seen == {"method": "PATCH", "body": {"a": 1}}

    @pytest.mark.asyncio
    async def test_error_message_from_server(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(422, json={"errors": ["Subject can't be blank"]})

        with pytest.raises(UpstreamServiceError) as exc_info:
            await _client(handler).call("opportunities/1", "PATCH", body={})

        assert exc_info.value.status_code == 422
        assert exc_info.value.upstream_message == "Subject can't be blank"

    @pytest.mark.asyncio
    async def test_error_message_from_text_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="Internal failure")

        with pytest.raises(UpstreamServiceError) as exc_info:
            await _client(handler).call("opportunities")

        assert exc_info.value.upstream_message == "Internal failure"

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UpstreamServiceError) as exc_info:
            await _client(handler).call("opportunities")

        assert exc_info.value.status_code is None
        assert "connection refused" in exc_info.value.upstream_message

    @pytest.mark.asyncio
    async def test_empty_success_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(204)

        assert await _client(handler).call("opportunities/1", "DELETE") == {}

    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        client = _client(handler, token=None)

        assert not client.configured
        with pytest.raises(RMSConfigurationError):
            await client.call("opportunities")

    def test_clean_subdomain(self):
        assert clean_subdomain("acme.current-rms.com") == "acme"
        assert clean_subdomain(" acme ") == "acme"


class TestListOpportunities:
    """Tests for the listing page adapter."""

    @pytest.mark.asyncio
    async def test_page_with_total(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(
                200,
                json={"opportunities": [{"id": 1}, {"id": 2}], "meta": {"total_row_count": "130"}},
            )

        window = DateRange(start=date(2026, 3, 10), end=date(2026, 4, 9))
        page = await _client(handler).list_opportunities(page=2, per_page=50, date_range=window)

        assert page.page == 2
        assert [item["id"] for item in page.items] == [1, 2]
        assert page.total_count == 130
        assert seen["params"]["page"] == "2"
        assert seen["params"]["per_page"] == "50"
        assert seen["params"]["q[starts_at_gteq]"] == "2026-03-10"
        assert seen["params"]["q[starts_at_lteq]"] == "2026-04-09"

    @pytest.mark.asyncio
    async def test_missing_total(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"opportunities": []})

        page = await _client(handler).list_opportunities(page=1, per_page=50)

        assert page.total_count is None

    @pytest.mark.asyncio
    async def test_missing_opportunities_array(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"members": []})

        with pytest.raises(InvalidUpstreamShapeError) as exc_info:
            await _client(handler).list_opportunities(page=1, per_page=50)

        assert exc_info.value.missing_key == "opportunities"

    @pytest.mark.asyncio
    async def test_non_object_entries(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"opportunities": [{"id": 1}, "oops"]})

        with pytest.raises(InvalidUpstreamShapeError) as exc_info:
            await _client(handler).list_opportunities(page=1, per_page=50)

        assert exc_info.value.endpoint == "opportunities"


class TestUpdateOpportunity:

    @pytest.mark.asyncio
    async def test_patch_path(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            return httpx.Response(200, json={"opportunity": {"id": 7}})

        data = await _client(handler).update_opportunity(7, {"opportunity": {"custom_fields": {}}})

        assert seen == {"method": "PATCH", "path": "/api/v1/opportunities/7"}
        assert data["opportunity"]["id"] == 7
