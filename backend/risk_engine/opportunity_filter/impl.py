"""
Opportunity Filter - Implementation

Stateless filter pipeline over a loaded opportunity collection:

1. Date window on the start instant (no start instant: dropped)
2. Tier derivation from the stored score (0 or absent: UNSCORED)
3. Review status
4. Mitigation plan status
5. Needs reassessment (optional)

followed by a stable partition into tier buckets with count, value and
cost aggregates per bucket and overall.
"""

import logging
from datetime import date, datetime, tzinfo
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..date_range_resolver import DateRange, resolve
from ..opportunity_normalizer import MitigationStatus, Opportunity
from ..score_calculator import RiskTier, tier_for_score
from .definition import (
    BUCKET_ORDER,
    BucketSummary,
    DashboardFilters,
    MitigationFilter,
    ReviewedFilter,
    TieredBuckets,
)

logger = logging.getLogger(__name__)


_MITIGATION_MATCHES: Dict[MitigationFilter, Tuple[MitigationStatus, ...]] = {
    MitigationFilter.NONE: (MitigationStatus.NONE,),
    MitigationFilter.PARTIAL: (MitigationStatus.PARTIAL,),
    MitigationFilter.COMPLETE: (MitigationStatus.COMPLETE,),
    MitigationFilter.INCOMPLETE: (MitigationStatus.NONE, MitigationStatus.PARTIAL),
    MitigationFilter.ALL: tuple(MitigationStatus),
}


# =============================================================================
# PREDICATES
# =============================================================================


def matches_date(opportunity: Opportunity, date_range: DateRange, tz: Optional[tzinfo] = None) -> bool:
    return date_range.contains(opportunity.starts_at, tz)


def matches_reviewed(opportunity: Opportunity, reviewed_filter: ReviewedFilter) -> bool:
    if reviewed_filter == ReviewedFilter.REVIEWED:
        return opportunity.risk.reviewed
    if reviewed_filter == ReviewedFilter.NOT_REVIEWED:
        return not opportunity.risk.reviewed
    return True


def matches_mitigation(opportunity: Opportunity, mitigation_filter: MitigationFilter) -> bool:
    return opportunity.risk.mitigation_plan in _MITIGATION_MATCHES[mitigation_filter]


def needs_reassessment(opportunity: Opportunity) -> bool:
    """
    True when the external record changed after its risk was last written.

    An opportunity without a recorded risk update always needs one.
    """
    last_assessed = opportunity.risk.last_updated
    if last_assessed is None:
        return True
    updated_at = opportunity.updated_at
    return updated_at is not None and updated_at > last_assessed


# =============================================================================
# PIPELINE
# =============================================================================


def apply(
    opportunities: Iterable[Opportunity],
    date_range: DateRange,
    reviewed_filter: Union[ReviewedFilter, str] = ReviewedFilter.ALL,
    mitigation_filter: Union[MitigationFilter, str] = MitigationFilter.ALL,
    needs_reassessment_only: bool = False,
    tz: Optional[tzinfo] = None,
) -> TieredBuckets:
    """
    Filter a collection and partition it into tier buckets.

    Args:
        opportunities: Normalized collection; input order is preserved
            inside each bucket.
        date_range: Inclusive window on the start instant.
        reviewed_filter: reviewed, not_reviewed or all.
        mitigation_filter: none, partial, complete, incomplete or all.
        needs_reassessment_only: Keep only opportunities whose external
            data changed after their last assessment.
        tz: Timezone of the calendar days in `date_range`.

    Returns:
        TieredBuckets with the five buckets and overall aggregates.
    """
    reviewed_filter = ReviewedFilter(reviewed_filter)
    mitigation_filter = MitigationFilter(mitigation_filter)

    buckets: Dict[RiskTier, BucketSummary] = {}
    grouped: Dict[RiskTier, List[Opportunity]] = {tier: [] for tier in BUCKET_ORDER}
    seen = 0

    for opportunity in opportunities:
        seen += 1
        # Step 1: date window
        if not matches_date(opportunity, date_range, tz):
            continue
        # Step 2: tier from score, never from a stored label
        tier = tier_for_score(opportunity.risk.score)
        # Step 3: review status
        if not matches_reviewed(opportunity, reviewed_filter):
            continue
        # Step 4: mitigation plan
        if not matches_mitigation(opportunity, mitigation_filter):
            continue
        # Step 5: needs reassessment
        if needs_reassessment_only and not needs_reassessment(opportunity):
            continue
        grouped[tier].append(opportunity)

    total_count = 0
    total_value = 0.0
    total_cost = 0.0
    for tier in BUCKET_ORDER:
        members = grouped[tier]
        value = sum(op.charge_total for op in members)
        cost = sum(op.cost_total for op in members)
        buckets[tier] = BucketSummary(
            tier=tier,
            opportunities=members,
            count=len(members),
            total_value=round(value, 2),
            total_cost=round(cost, 2),
        )
        total_count += len(members)
        total_value += value
        total_cost += cost

    logger.debug(
        f"Filtered {seen} opportunities to {total_count} "
        f"(reviewed={reviewed_filter.value}, mitigation={mitigation_filter.value}, "
        f"reassess={needs_reassessment_only})"
    )

    return TieredBuckets(
        date_range=date_range,
        buckets=buckets,
        count=total_count,
        total_value=round(total_value, 2),
        total_cost=round(total_cost, 2),
    )


def derive_view(
    opportunities: Iterable[Opportunity],
    filters: DashboardFilters,
    today: Union[date, datetime],
    tz: Optional[tzinfo] = None,
) -> TieredBuckets:
    """Resolve the date window from the filters and run the pipeline."""
    date_range = resolve(
        filters.date_range,
        today,
        custom_start=filters.custom_start,
        custom_end=filters.custom_end,
        tz=tz,
    )
    return apply(
        opportunities,
        date_range,
        reviewed_filter=filters.reviewed,
        mitigation_filter=filters.mitigation,
        needs_reassessment_only=filters.needs_reassessment,
        tz=tz,
    )
