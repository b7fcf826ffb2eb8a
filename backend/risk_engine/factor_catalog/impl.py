"""
Factor Catalog - Implementation

Static definition of the eight AV production risk factors. This module is
the single source of truth for scale semantics and weights: the score
calculator and the API both read from here.
"""

from types import MappingProxyType
from typing import Dict, Mapping, Tuple

from .definition import FactorDefinition, RiskBand, ScaleLevel, UnknownFactorError


_BANDS = (
    RiskBand.LOW,
    RiskBand.LOW_MEDIUM,
    RiskBand.MEDIUM,
    RiskBand.MEDIUM_HIGH,
    RiskBand.HIGH,
)


def _scale(*labels: str) -> list[ScaleLevel]:
    """Builds a 1..5 linear scale from five labels, lowest risk first."""
    return [
        ScaleLevel(value=i + 1, label=label, risk_band=band)
        for i, (label, band) in enumerate(zip(labels, _BANDS))
    ]


FACTORS: Tuple[FactorDefinition, ...] = (
    FactorDefinition(
        key="project_novelty",
        label="Project Type Familiarity",
        description="How familiar is the team with this type of production?",
        scale=_scale(
            "Routine/Repeated",
            "Similar to past",
            "Some new elements",
            "Significantly novel",
            "Entirely new territory",
        ),
        weight=1.0,
    ),
    FactorDefinition(
        key="technical_complexity",
        label="Technical Complexity",
        description="System integration, equipment sophistication, setup complexity",
        scale=_scale(
            "Dry-hire",
            "Low complexity",
            "Multiple departments",
            "Highly complex",
            "Bleeding edge/Experimental",
        ),
        weight=1.0,
    ),
    FactorDefinition(
        key="resource_utilization",
        label="Resource Utilization",
        description="Percentage of available equipment/crew committed",
        scale=_scale(
            "0% utilization",
            "1-24% utilization",
            "25-49% utilization",
            "50-74% utilization",
            "75%+ utilization",
        ),
        weight=1.0,
    ),
    FactorDefinition(
        key="client_sophistication",
        label="Client Experience Level",
        description="Client familiarity with AV production processes",
        scale=_scale(
            "Highly experienced",
            "Experienced",
            "Moderate experience",
            "Limited experience",
            "First-time client",
        ),
        weight=1.0,
    ),
    FactorDefinition(
        key="budget_size",
        label="Budget Scale",
        description="Project budget relative to typical projects",
        scale=_scale("<$5k", "$5k-$10k", "$10k-$40k", "$40k-$100k", "$100k+"),
        weight=1.0,
    ),
    FactorDefinition(
        key="timeframe_constraint",
        label="Timeline Pressure",
        description="Prep time available vs. required",
        scale=_scale(
            "Ample time (>2x needed)",
            "Comfortable (1.5x needed)",
            "Standard timeline",
            "Tight timeline",
            "Rush/Emergency",
        ),
        weight=1.0,
    ),
    FactorDefinition(
        key="team_experience",
        label="Team Capability",
        description="Assigned team experience with similar projects",
        scale=_scale(
            "Expert team",
            "Experienced team",
            "Competent team",
            "Learning team",
            "Inexperienced team",
        ),
        weight=1.0,
    ),
    FactorDefinition(
        key="equipment_availability",
        label="Sub-hire Availability",
        description="Access to external equipment/crew if needed",
        scale=_scale(
            "Highly available",
            "Good sub-hire options",
            "Limited sub-hire options",
            "Interstate sub-hire only",
            "No sub-hire available",
        ),
        weight=1.0,
    ),
)

_BY_KEY: Mapping[str, FactorDefinition] = MappingProxyType({f.key: f for f in FACTORS})


def list_factors() -> Tuple[FactorDefinition, ...]:
    """Returns the ordered catalog. Stable for the process lifetime."""
    return FACTORS


def factor_keys() -> Tuple[str, ...]:
    return tuple(f.key for f in FACTORS)


def get_factor(key: str) -> FactorDefinition:
    """
    Look up a factor by key.

    Raises:
        UnknownFactorError: If the key is not part of the catalog.
    """
    try:
        return _BY_KEY[key]
    except KeyError:
        raise UnknownFactorError(key) from None


def total_weight() -> float:
    return sum(f.weight for f in FACTORS)


def default_selection() -> Dict[str, int]:
    """Midpoint of every factor scale, the starting point of a new assessment."""
    return {f.key: f.midpoint for f in FACTORS}
