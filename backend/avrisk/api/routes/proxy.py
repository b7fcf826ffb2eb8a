"""Authenticated passthrough to the Current RMS API."""

from fastapi import APIRouter

from avrisk.core.logging import get_logger
from avrisk.schemas import ProxyRequest
from avrisk.services import get_container

logger = get_logger(__name__)
router = APIRouter()


@router.post("/current-rms")
async def current_rms_proxy(request: ProxyRequest) -> dict:
    """Forwards one call with the server-side credentials injected."""
    logger.info(f"[PROXY] {request.method} {request.endpoint}")
    return await get_container().rms_client.call(request.endpoint, request.method, body=request.body)
