"""
Score Calculator

Weighted risk score, tier and approval routing for a factor selection.
"""

from .definition import (
    ApprovalAuthority,
    InvalidSelectionError,
    RiskAssessment,
    RiskTier,
    TierThreshold,
)

from .impl import (
    RiskScoreCalculator,
    approval_for_tier,
    compute,
    tier_for_score,
    tier_thresholds,
    TIER_APPROVALS,
    TIER_UPPER_BOUNDS,
)

__all__ = [
    # Classes
    "RiskScoreCalculator",
    # Models
    "ApprovalAuthority",
    "RiskAssessment",
    "RiskTier",
    "TierThreshold",
    # Exceptions
    "InvalidSelectionError",
    # Functions
    "approval_for_tier",
    "compute",
    "tier_for_score",
    "tier_thresholds",
    # Constants
    "TIER_APPROVALS",
    "TIER_UPPER_BOUNDS",
]
