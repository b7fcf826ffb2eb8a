"""Base exception shared by every risk engine component."""


class RiskEngineError(Exception):
    """Base exception for risk engine errors."""
    pass
