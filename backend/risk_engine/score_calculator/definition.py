"""
Score Calculator - Data Definitions

Pydantic models for the weighted risk score, its tier and the
approval authority it routes to.
"""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..errors import RiskEngineError


class RiskTier(str, Enum):
    """
    Risk tiers derived from the weighted score.

    - LOW: score <= 2.0
    - MEDIUM: score <= 3.0
    - HIGH: score <= 4.0
    - CRITICAL: anything above 4.0
    - UNSCORED: no score recorded (absent or 0), outside the four tiers
    """
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"
    UNSCORED = "UNSCORED"


class ApprovalAuthority(str, Enum):
    """Escalating roles that must sign off a project at each tier."""
    PROJECT_MANAGER = "Project Manager"
    SENIOR_MANAGER = "Senior Manager"
    OPERATIONS_DIRECTOR = "Operations Director"
    EXECUTIVE = "Executive Approval Required"


class TierThreshold(BaseModel):
    """Upper bound (inclusive) of a tier and its approver, for display."""

    model_config = ConfigDict(frozen=True)

    tier: RiskTier
    upper_bound: Optional[float] = Field(
        default=None,
        description="Inclusive upper bound; None for the open-ended top tier.",
    )
    approval: ApprovalAuthority


class RiskAssessment(BaseModel):
    """
    Result of scoring one factor selection.

    Carries no hidden state: identical selections always yield
    identical assessments.
    """

    model_config = ConfigDict(frozen=True)

    score: float = Field(..., ge=0, description="Weighted mean of the factor values, 2 decimals.")
    tier: RiskTier
    approval: ApprovalAuthority
    selection: Dict[str, int] = Field(
        default_factory=dict,
        description="Normalized selection the score was computed from.",
    )

    def to_summary(self) -> str:
        """One-line summary for logs."""
        return f"Score: {self.score:.2f} | Tier: {self.tier.value} | Approval: {self.approval.value}"


# Custom Exceptions

class InvalidSelectionError(RiskEngineError):
    """
    The factor selection cannot be scored.

    Raised when a catalog factor is missing, a value is not on the
    factor's scale, or an unknown factor is supplied.
    """

    def __init__(self, reason: str, factor_key: Optional[str] = None):
        self.reason = reason
        self.factor_key = factor_key
        prefix = f"[{factor_key}] " if factor_key else ""
        super().__init__(f"Invalid factor selection: {prefix}{reason}")
