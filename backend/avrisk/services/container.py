"""
Dependency Injection Container.

Holds the process-wide dashboard state and the services built around it:
the Current RMS client and the OpportunityService that owns the loaded
collection.

Example:
    from avrisk.services.container import get_container

    service = get_container().opportunity_service
    view = service.get_view(filters)
"""

from functools import lru_cache
from typing import Optional

from avrisk.core.config import Settings, settings
from avrisk.services.opportunity_service import OpportunityService
from avrisk.services.rms_client import CurrentRMSClient
from avrisk.state import DashboardState, create_initial_state


class DependencyContainer:
    """
    Centralized container for application dependencies.

    Services are created lazily and cached. Tests swap the RMS client
    through `override_rms_client`, which also rebuilds the service.
    """

    def __init__(self, config: Settings = settings) -> None:
        self.config = config
        self._rms_client: Optional[CurrentRMSClient] = None
        self._state: Optional[DashboardState] = None
        self._opportunity_service: Optional[OpportunityService] = None

    @property
    def rms_client(self) -> CurrentRMSClient:
        if self._rms_client is None:
            self._rms_client = CurrentRMSClient.from_settings(self.config)
        return self._rms_client

    @property
    def state(self) -> DashboardState:
        if self._state is None:
            self._state = create_initial_state()
        return self._state

    @property
    def opportunity_service(self) -> OpportunityService:
        if self._opportunity_service is None:
            self._opportunity_service = OpportunityService(
                client=self.rms_client,
                state=self.state,
                config=self.config,
            )
        return self._opportunity_service

    def reset(self) -> None:
        """Drops every cached service and the loaded collection."""
        self._rms_client = None
        self._state = None
        self._opportunity_service = None

    def override_rms_client(self, client) -> None:
        """
        Replace the Current RMS client, e.g. with a mock.

        The dashboard state starts over so no data from the previous
        client survives.
        """
        self._rms_client = client
        self._state = None
        self._opportunity_service = None

    def override_opportunity_service(self, service: OpportunityService) -> None:
        self._opportunity_service = service
        self._state = service.state


@lru_cache(maxsize=1)
def get_container() -> DependencyContainer:
    """Singleton DependencyContainer of the process."""
    return DependencyContainer()


def reset_container() -> None:
    """Clears the singleton so the next call builds a fresh container."""
    get_container.cache_clear()
