"""Application services: Current RMS access, dashboard state and assessments."""

from avrisk.services.container import DependencyContainer, get_container, reset_container
from avrisk.services.opportunity_service import LoadOutcome, OpportunityService
from avrisk.services.rms_client import CurrentRMSClient


def get_opportunity_service() -> OpportunityService:
    return get_container().opportunity_service


__all__ = [
    "CurrentRMSClient",
    "DependencyContainer",
    "LoadOutcome",
    "OpportunityService",
    "get_container",
    "get_opportunity_service",
    "reset_container",
]
