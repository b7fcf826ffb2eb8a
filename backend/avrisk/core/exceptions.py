"""
Custom exceptions for the AV risk dashboard.

This module provides a hierarchy of exceptions for consistent error handling
across the application. All exceptions inherit from RiskDashboardError.

Example:
    try:
        page = await client.list_opportunities(page=1, per_page=50)
    except UpstreamServiceError as e:
        logger.error(f"Listing failed: {e}")
"""

from typing import Optional


class RiskDashboardError(Exception):
    """
    Base exception class for all dashboard errors.

    All custom exceptions in the application layer should inherit from
    this class to enable consistent error handling and logging.

    Attributes:
        message: Human-readable description of the error.
        details: Optional additional context for debugging.
    """

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable description of the error.
            details: Optional additional context for debugging.
        """
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation with optional details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class UpstreamServiceError(RiskDashboardError):
    """
    Exception raised when a Current RMS call fails.

    Covers non-2xx responses and transport failures (connection errors,
    timeouts). The server-supplied message is kept so it can be shown
    to the user verbatim.

    Attributes:
        status_code: HTTP status returned by the upstream, None on transport failure.
        endpoint: The RMS endpoint that was called.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        endpoint: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        """
        Initialize upstream service error.

        Args:
            message: Server-supplied or transport error message.
            status_code: HTTP status returned by the upstream, if any.
            endpoint: The RMS endpoint that was called.
            details: Optional additional context for debugging.
        """
        self.status_code = status_code
        self.endpoint = endpoint
        self.upstream_message = message

        enhanced_message = f"[CurrentRMS] {message}"
        if endpoint:
            enhanced_message = f"{enhanced_message} (endpoint: {endpoint})"
        if status_code is not None:
            enhanced_message = f"{enhanced_message} (status: {status_code})"

        super().__init__(enhanced_message, details)


class InvalidUpstreamShapeError(RiskDashboardError):
    """
    Exception raised when a listing response lacks the expected structure.

    Treated as fatal for the fetch it occurred in.

    Attributes:
        endpoint: The RMS endpoint that returned the payload.
        missing_key: The key that was expected but not found.
    """

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        missing_key: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        self.endpoint = endpoint
        self.missing_key = missing_key

        enhanced_message = f"[CurrentRMS] {message}"
        if missing_key:
            enhanced_message = f"{enhanced_message} (missing: {missing_key})"

        super().__init__(enhanced_message, details)


class RMSConfigurationError(RiskDashboardError):
    """Exception raised when Current RMS credentials are not configured."""

    def __init__(self, message: str = "Missing Current RMS API credentials", details: Optional[str] = None) -> None:
        super().__init__(message, details)


class OpportunityNotFoundError(RiskDashboardError):
    """
    Exception raised when an opportunity id is unknown.

    Attributes:
        opportunity_id: The id that was looked up.
    """

    def __init__(self, opportunity_id: int, details: Optional[str] = None) -> None:
        self.opportunity_id = opportunity_id
        super().__init__(f"Opportunity {opportunity_id} not found", details)
