"""
Unit tests for the risk score calculator.

Covers the weighted mean, tier bounds, approval routing and selection
validation.
"""

import itertools
import random

import pytest

from risk_engine.factor_catalog import FACTORS, factor_keys
from risk_engine.score_calculator import (
    ApprovalAuthority,
    InvalidSelectionError,
    RiskScoreCalculator,
    RiskTier,
    approval_for_tier,
    compute,
    tier_for_score,
    tier_thresholds,
)


def _selection(*values: int) -> dict:
    return dict(zip(factor_keys(), values))


class TestCompute:
    """Tests for the weighted mean score."""

    def test_all_threes_is_medium(self, all_threes):
        result = compute(all_threes)

        assert result.score == 3.0
        assert result.tier == RiskTier.MEDIUM
        assert result.approval == ApprovalAuthority.SENIOR_MANAGER
        assert result.approval.value == "Senior Manager"

    def test_all_ones_is_low(self):
        result = compute(_selection(*[1] * 8))

        assert result.score == 1.0
        assert result.tier == RiskTier.LOW
        assert result.approval == ApprovalAuthority.PROJECT_MANAGER

    def test_all_fives_is_critical(self):
        result = compute(_selection(*[5] * 8))

        assert result.score == 5.0
        assert result.tier == RiskTier.CRITICAL
        assert result.approval.value == "Executive Approval Required"

    def test_mean_rounded_to_two_decimals(self):
        # (6 * 1 + 5 + 4) / 8 = 1.875
        selection = _selection(1, 5, 1, 1, 4, 1, 1, 1)

        result = compute(selection)

        assert result.score == 1.88
        assert result.tier == RiskTier.LOW
        assert result.approval == ApprovalAuthority.PROJECT_MANAGER

    def test_score_within_scale_bounds(self):
        rng = random.Random(7)
        for _ in range(200):
            selection = {key: rng.randint(1, 5) for key in factor_keys()}
            assert 1.0 <= compute(selection).score <= 5.0

    def test_pure_and_order_independent(self):
        selection = _selection(2, 4, 3, 5, 1, 2, 4, 3)
        reversed_selection = dict(reversed(list(selection.items())))

        assert compute(selection) == compute(selection)
        assert compute(selection) == compute(reversed_selection)

    def test_selection_is_normalized(self):
        selection = _selection(*[3.0] * 8)

        assert compute(selection).selection == {key: 3 for key in factor_keys()}

    def test_summary(self, all_threes):
        assert compute(all_threes).to_summary() == "Score: 3.00 | Tier: MEDIUM | Approval: Senior Manager"


class TestSelectionValidation:
    """Tests for InvalidSelectionError cases."""

    def test_missing_factor(self, all_threes):
        del all_threes["budget_size"]

        with pytest.raises(InvalidSelectionError) as exc_info:
            compute(all_threes)
        assert exc_info.value.factor_key == "budget_size"

    @pytest.mark.parametrize("value", [0, 6, 2.5, "3", None, True])
    def test_off_scale_values(self, all_threes, value):
        all_threes["team_experience"] = value

        with pytest.raises(InvalidSelectionError) as exc_info:
            compute(all_threes)
        assert exc_info.value.factor_key == "team_experience"

    def test_unknown_factor(self, all_threes):
        all_threes["weather"] = 3

        with pytest.raises(InvalidSelectionError, match="weather"):
            compute(all_threes)

    def test_not_a_mapping(self):
        with pytest.raises(InvalidSelectionError):
            compute([3] * 8)

    def test_calculator_needs_factors(self):
        with pytest.raises(ValueError):
            RiskScoreCalculator(factors=[])

    def test_custom_catalog(self):
        calculator = RiskScoreCalculator(factors=FACTORS[:2])
        result = calculator.compute({"project_novelty": 5, "technical_complexity": 5})

        assert result.score == 5.0


class TestTiers:
    """Tests for tier_for_score() and approval routing."""

    @pytest.mark.parametrize(
        "score, tier",
        [
            (1.0, RiskTier.LOW),
            (2.0, RiskTier.LOW),
            (2.01, RiskTier.MEDIUM),
            (3.0, RiskTier.MEDIUM),
            (3.01, RiskTier.HIGH),
            (4.0, RiskTier.HIGH),
            (4.01, RiskTier.CRITICAL),
            (5.0, RiskTier.CRITICAL),
        ],
    )
    def test_upper_bounds_are_closed(self, score, tier):
        assert tier_for_score(score) == tier

    @pytest.mark.parametrize("score", [None, 0, 0.0, -1.0])
    def test_absent_or_zero_is_unscored(self, score):
        assert tier_for_score(score) == RiskTier.UNSCORED

    def test_unscored_has_no_approval(self):
        assert approval_for_tier(RiskTier.UNSCORED) is None

    def test_approval_escalates_with_tier(self):
        ordered = [RiskTier.LOW, RiskTier.MEDIUM, RiskTier.HIGH, RiskTier.CRITICAL]
        approvals = [approval_for_tier(t) for t in ordered]

        assert approvals == list(ApprovalAuthority)

    def test_thresholds_for_display(self):
        thresholds = tier_thresholds()

        assert [t.upper_bound for t in thresholds] == [2.0, 3.0, 4.0, None]
        assert thresholds[-1].tier == RiskTier.CRITICAL

    def test_tier_is_monotonic_in_score(self):
        order = {RiskTier.LOW: 0, RiskTier.MEDIUM: 1, RiskTier.HIGH: 2, RiskTier.CRITICAL: 3}
        scores = [round(1 + i * 0.01, 2) for i in range(401)]

        for lower, higher in itertools.pairwise(scores):
            assert order[tier_for_score(lower)] <= order[tier_for_score(higher)]
