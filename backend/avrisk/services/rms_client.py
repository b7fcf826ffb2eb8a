"""
Current RMS API client.

Thin async wrapper over the Current RMS REST API: injects the subdomain
and auth token headers, forwards the call and turns failures into
UpstreamServiceError carrying the server-supplied message.
"""

from typing import Any, Literal

import httpx

from avrisk.core.config import Settings, settings
from avrisk.core.exceptions import (
    InvalidUpstreamShapeError,
    RMSConfigurationError,
    UpstreamServiceError,
)
from avrisk.core.logging import get_logger
from risk_engine.date_range_resolver import DateRange
from risk_engine.paginated_fetch import PageResult

logger = get_logger(__name__)

HttpMethod = Literal["GET", "POST", "PATCH", "PUT", "DELETE"]

_BODY_METHODS = {"POST", "PATCH", "PUT"}

OPPORTUNITIES_ENDPOINT = "opportunities"


def clean_subdomain(subdomain: str) -> str:
    """Accepts either `acme` or `acme.current-rms.com`."""
    return subdomain.replace(".current-rms.com", "").strip()


def _error_message(response: httpx.Response) -> str:
    """Best-effort extraction of the server-supplied error text."""
    try:
        data = response.json()
    except ValueError:
        text = response.text.strip()
        return text[:200] if text else response.reason_phrase or "Current RMS API error"

    if isinstance(data, dict):
        errors = data.get("errors")
        if isinstance(errors, list) and errors:
            return "; ".join(str(e) for e in errors)
        if isinstance(errors, dict) and errors:
            return "; ".join(f"{k}: {v}" for k, v in errors.items())
        for key in ("error", "message"):
            if data.get(key):
                return str(data[key])
    return "Current RMS API error"


class CurrentRMSClient:
    """
    Async client for the Current RMS v1 API.

    Usage:
        client = CurrentRMSClient.from_settings()
        page = await client.list_opportunities(page=1, per_page=50)
    """

    def __init__(
        self,
        subdomain: str | None,
        auth_token: str | None,
        base_url: str = "https://api.current-rms.com/api/v1",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._subdomain = clean_subdomain(subdomain) if subdomain else None
        self._auth_token = auth_token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "CurrentRMSClient":
        return cls(
            subdomain=config.current_rms_subdomain,
            auth_token=config.current_rms_auth_token,
            base_url=config.current_rms_base_url,
            timeout=config.rms_timeout_seconds,
        )

    @property
    def configured(self) -> bool:
        return bool(self._subdomain and self._auth_token)

    def _headers(self) -> dict[str, str]:
        return {
            "X-SUBDOMAIN": self._subdomain or "",
            "X-AUTH-TOKEN": self._auth_token or "",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def call(
        self,
        endpoint: str,
        method: HttpMethod = "GET",
        body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Forward one request to Current RMS and return its JSON body.

        Raises:
            RMSConfigurationError: If credentials are not configured.
            UpstreamServiceError: On non-2xx responses or transport failures.
            InvalidUpstreamShapeError: If a 2xx body is not a JSON object.
        """
        if not self.configured:
            raise RMSConfigurationError()

        method = method.upper()  # type: ignore[assignment]
        endpoint = endpoint.strip("/")
        query = {"subdomain": self._subdomain, **(params or {})}
        json_body = body if body is not None and method in _BODY_METHODS else None

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.request(
                    method,
                    f"{self._base_url}/{endpoint}",
                    params=query,
                    json=json_body,
                    headers=self._headers(),
                )
        except httpx.HTTPError as e:
            logger.error(f"Current RMS transport error on {method} {endpoint}: {e}")
            raise UpstreamServiceError(
                str(e) or type(e).__name__,
                endpoint=endpoint,
                details=type(e).__name__,
            ) from e

        if not response.is_success:
            message = _error_message(response)
            logger.error(f"Current RMS {method} {endpoint} failed [{response.status_code}]: {message}")
            raise UpstreamServiceError(message, status_code=response.status_code, endpoint=endpoint)

        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            raise InvalidUpstreamShapeError("Response body is not JSON", endpoint=endpoint) from e
        if not isinstance(data, dict):
            raise InvalidUpstreamShapeError("Response body is not a JSON object", endpoint=endpoint)
        return data

    async def list_opportunities(
        self,
        page: int,
        per_page: int,
        date_range: DateRange | None = None,
    ) -> PageResult:
        """
        Fetch one page of the opportunity listing.

        Raises:
            InvalidUpstreamShapeError: If the `opportunities` array is missing
                or holds anything other than objects.
        """
        params: dict[str, Any] = {"page": page, "per_page": per_page}
        if date_range is not None:
            params.update(date_range.to_query_params())

        data = await self.call(OPPORTUNITIES_ENDPOINT, "GET", params=params)

        items = data.get("opportunities")
        if not isinstance(items, list):
            raise InvalidUpstreamShapeError(
                "Listing response without an opportunities array",
                endpoint=OPPORTUNITIES_ENDPOINT,
                missing_key="opportunities",
            )
        if not all(isinstance(item, dict) for item in items):
            raise InvalidUpstreamShapeError(
                "Listing contains entries that are not objects",
                endpoint=OPPORTUNITIES_ENDPOINT,
            )

        meta = data.get("meta")
        total_count = None
        if isinstance(meta, dict):
            try:
                total_count = max(0, int(meta.get("total_row_count")))
            except (TypeError, ValueError):
                total_count = None

        return PageResult(page=page, items=items, total_count=total_count)

    async def get_opportunity(self, opportunity_id: int) -> dict[str, Any]:
        data = await self.call(f"{OPPORTUNITIES_ENDPOINT}/{opportunity_id}", "GET")
        record = data.get("opportunity")
        if not isinstance(record, dict):
            raise InvalidUpstreamShapeError(
                "Response without an opportunity object",
                endpoint=f"{OPPORTUNITIES_ENDPOINT}/{opportunity_id}",
                missing_key="opportunity",
            )
        return record

    async def update_opportunity(self, opportunity_id: int, payload: dict[str, Any]) -> dict[str, Any]:
        """PATCH one opportunity; no concurrency check against updated_at."""
        return await self.call(f"{OPPORTUNITIES_ENDPOINT}/{opportunity_id}", "PATCH", body=payload)
