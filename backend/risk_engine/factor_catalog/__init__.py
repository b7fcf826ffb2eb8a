"""
Factor Catalog

Fixed set of weighted qualitative risk factors scored per opportunity.
"""

from .definition import (
    FactorDefinition,
    RiskBand,
    ScaleLevel,
    UnknownFactorError,
)

from .impl import (
    FACTORS,
    default_selection,
    factor_keys,
    get_factor,
    list_factors,
    total_weight,
)

__all__ = [
    # Models
    "FactorDefinition",
    "RiskBand",
    "ScaleLevel",
    # Exceptions
    "UnknownFactorError",
    # Functions
    "default_selection",
    "factor_keys",
    "get_factor",
    "list_factors",
    "total_weight",
    # Constants
    "FACTORS",
]
