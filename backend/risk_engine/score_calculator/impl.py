"""
Score Calculator - Implementation

Deterministic project risk scoring with:
- Weighted mean of the factor values on the 1..5 scale
- Tier thresholds closed on the upper bound
- Approval routing derived from the tier, never from the raw score
"""

import logging
from numbers import Real
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..factor_catalog import FACTORS, FactorDefinition
from .definition import (
    ApprovalAuthority,
    InvalidSelectionError,
    RiskAssessment,
    RiskTier,
    TierThreshold,
)

logger = logging.getLogger(__name__)


# Inclusive upper bound of each tier, lowest first. Scores above the
# last bound are CRITICAL.
TIER_UPPER_BOUNDS: Tuple[Tuple[float, RiskTier], ...] = (
    (2.0, RiskTier.LOW),
    (3.0, RiskTier.MEDIUM),
    (4.0, RiskTier.HIGH),
)

TIER_APPROVALS: Dict[RiskTier, ApprovalAuthority] = {
    RiskTier.LOW: ApprovalAuthority.PROJECT_MANAGER,
    RiskTier.MEDIUM: ApprovalAuthority.SENIOR_MANAGER,
    RiskTier.HIGH: ApprovalAuthority.OPERATIONS_DIRECTOR,
    RiskTier.CRITICAL: ApprovalAuthority.EXECUTIVE,
}

SCORE_DECIMALS = 2


def tier_for_score(score: Optional[float]) -> RiskTier:
    """
    Maps a stored or computed score to its tier.

    An absent score, or one that is not positive, is UNSCORED.
    """
    if score is None or score <= 0:
        return RiskTier.UNSCORED
    for upper, tier in TIER_UPPER_BOUNDS:
        if score <= upper:
            return tier
    return RiskTier.CRITICAL


def approval_for_tier(tier: RiskTier) -> Optional[ApprovalAuthority]:
    """Approval authority for a tier; None for UNSCORED."""
    return TIER_APPROVALS.get(tier)


def tier_thresholds() -> List[TierThreshold]:
    """Thresholds in display order, with the approver for each tier."""
    thresholds = [
        TierThreshold(tier=tier, upper_bound=upper, approval=TIER_APPROVALS[tier])
        for upper, tier in TIER_UPPER_BOUNDS
    ]
    thresholds.append(
        TierThreshold(
            tier=RiskTier.CRITICAL,
            upper_bound=None,
            approval=TIER_APPROVALS[RiskTier.CRITICAL],
        )
    )
    return thresholds


class RiskScoreCalculator:
    """
    Weighted-mean risk calculator over a factor catalog.

    Usage:
        calculator = RiskScoreCalculator()
        result = calculator.compute({
            "project_novelty": 3,
            "technical_complexity": 4,
            ...
        })

        print(result.to_summary())

    Raises:
        InvalidSelectionError: If the selection is incomplete or off-scale
    """

    def __init__(self, factors: Iterable[FactorDefinition] = FACTORS):
        """
        Initialize the calculator.

        Args:
            factors: Catalog to score against (default: the fixed catalog).
        """
        self.factors: Tuple[FactorDefinition, ...] = tuple(factors)
        if not self.factors:
            raise ValueError("A calculator needs at least one factor")
        self._by_key = {f.key: f for f in self.factors}
        self._total_weight = sum(f.weight for f in self.factors)

    def validate_selection(self, selection: Mapping[str, object]) -> Dict[str, int]:
        """
        Checks a selection against the catalog and returns it normalized.

        Raises:
            InvalidSelectionError: On missing, unknown or off-scale factors.
        """
        if not isinstance(selection, Mapping):
            raise InvalidSelectionError(
                f"expected a mapping of factor keys, got {type(selection).__name__}"
            )

        unknown = sorted(set(selection) - set(self._by_key))
        if unknown:
            raise InvalidSelectionError(f"unknown factors: {', '.join(map(str, unknown))}")

        normalized: Dict[str, int] = {}
        for factor in self.factors:
            if factor.key not in selection:
                raise InvalidSelectionError("missing selection", factor_key=factor.key)

            raw = selection[factor.key]
            value = _as_scale_value(raw)
            if value is None or factor.level_for(value) is None:
                raise InvalidSelectionError(
                    f"value {raw!r} is not on the scale {factor.values}",
                    factor_key=factor.key,
                )
            normalized[factor.key] = value

        return normalized

    def compute(self, selection: Mapping[str, object]) -> RiskAssessment:
        """
        Score a complete factor selection.

        Args:
            selection: Factor key to chosen scale value, for every factor.

        Returns:
            RiskAssessment with score, tier and approval authority.

        Raises:
            InvalidSelectionError: If the selection cannot be scored.
        """
        normalized = self.validate_selection(selection)

        weighted = sum(normalized[f.key] * f.weight for f in self.factors)
        score = round(weighted / self._total_weight, SCORE_DECIMALS)
        tier = tier_for_score(score)

        logger.debug(f"Computed risk score {score:.2f} ({tier.value})")

        return RiskAssessment(
            score=score,
            tier=tier,
            approval=TIER_APPROVALS[tier],
            selection=normalized,
        )


def _as_scale_value(raw: object) -> Optional[int]:
    """Integer view of a selection value; None when it is not integral."""
    if isinstance(raw, bool) or not isinstance(raw, Real):
        return None
    if isinstance(raw, int):
        return raw
    as_float = float(raw)
    if not as_float.is_integer():
        return None
    return int(as_float)


_default_calculator = RiskScoreCalculator()


# Convenience function
def compute(selection: Mapping[str, object]) -> RiskAssessment:
    """
    Score a selection against the fixed catalog.

    Convenience function for simple use cases.
    """
    return _default_calculator.compute(selection)
