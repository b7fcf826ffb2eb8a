"""
Risk Engine

Deterministic scoring and filtering core for the AV risk dashboard.
Every subpackage splits its pydantic models and exceptions (definition.py)
from its logic (impl.py).
"""

from .errors import RiskEngineError

__all__ = ["RiskEngineError"]
