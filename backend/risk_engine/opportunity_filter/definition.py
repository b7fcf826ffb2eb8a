"""
Opportunity Filter - Data Definitions

Filter selections applied by the dashboard and the tiered, aggregated
view the pipeline produces.
"""

from datetime import date
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..date_range_resolver import DateRange, DateRangeSelector
from ..opportunity_normalizer import Opportunity
from ..score_calculator import RiskTier


class ReviewedFilter(str, Enum):
    REVIEWED = "reviewed"
    NOT_REVIEWED = "not_reviewed"
    ALL = "all"


class MitigationFilter(str, Enum):
    """Mitigation plan filter; INCOMPLETE keeps NONE and PARTIAL plans."""
    NONE = "none"
    PARTIAL = "partial"
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"
    ALL = "all"


# Display order of the five mutually exclusive buckets
BUCKET_ORDER = (
    RiskTier.CRITICAL,
    RiskTier.HIGH,
    RiskTier.MEDIUM,
    RiskTier.LOW,
    RiskTier.UNSCORED,
)


class DashboardFilters(BaseModel):
    """
    Every filter selection of the dashboard in one struct.

    A view is fully re-derivable from (collection, DashboardFilters, today).
    """

    model_config = ConfigDict(frozen=True)

    date_range: DateRangeSelector = DateRangeSelector.NEXT_30
    custom_start: Optional[date] = None
    custom_end: Optional[date] = None
    reviewed: ReviewedFilter = ReviewedFilter.ALL
    mitigation: MitigationFilter = MitigationFilter.ALL
    needs_reassessment: bool = False


class BucketSummary(BaseModel):
    """One risk tier bucket with its aggregates."""

    tier: RiskTier
    opportunities: List[Opportunity] = Field(default_factory=list)
    count: int = Field(default=0, ge=0)
    total_value: float = Field(default=0.0, description="Sum of charge totals.")
    total_cost: float = Field(default=0.0, description="Sum of estimated costs.")


class TieredBuckets(BaseModel):
    """
    Filtered opportunities partitioned into the five tier buckets.

    Every surviving opportunity appears in exactly one bucket.
    """

    date_range: DateRange
    buckets: Dict[RiskTier, BucketSummary]
    count: int = Field(default=0, ge=0)
    total_value: float = 0.0
    total_cost: float = 0.0

    def bucket(self, tier: RiskTier) -> BucketSummary:
        return self.buckets[tier]

    def all_opportunities(self) -> List[Opportunity]:
        """Surviving opportunities in bucket display order."""
        return [op for tier in BUCKET_ORDER for op in self.buckets[tier].opportunities]
