"""
Opportunity Filter

Date, review, mitigation and reassessment filters with tier bucketing
and value aggregation.
"""

from .definition import (
    BUCKET_ORDER,
    BucketSummary,
    DashboardFilters,
    MitigationFilter,
    ReviewedFilter,
    TieredBuckets,
)

from .impl import (
    apply,
    derive_view,
    matches_date,
    matches_mitigation,
    matches_reviewed,
    needs_reassessment,
)

__all__ = [
    # Models
    "BucketSummary",
    "DashboardFilters",
    "MitigationFilter",
    "ReviewedFilter",
    "TieredBuckets",
    # Functions
    "apply",
    "derive_view",
    "matches_date",
    "matches_mitigation",
    "matches_reviewed",
    "needs_reassessment",
    # Constants
    "BUCKET_ORDER",
]
