"""Builds API responses from engine views and the dashboard state."""

from avrisk.schemas import BucketView, DashboardMeta, DashboardResponse, PageProgress
from avrisk.state import DashboardState
from risk_engine.opportunity_filter import BUCKET_ORDER, DashboardFilters, TieredBuckets


def build_dashboard_meta(state: DashboardState) -> DashboardMeta:
    return DashboardMeta(
        source=state["source"],
        generation=state["generation"],
        loaded_at=state["loaded_at"],
        notice=state["notice"],
        truncated=state["truncated"],
    )


def build_dashboard_response(
    view: TieredBuckets,
    filters: DashboardFilters,
    state: DashboardState,
) -> DashboardResponse:
    """Flattens the tiered view into buckets in display order."""
    buckets = [
        BucketView(
            tier=tier,
            count=view.bucket(tier).count,
            total_value=view.bucket(tier).total_value,
            total_cost=view.bucket(tier).total_cost,
            opportunities=view.bucket(tier).opportunities,
        )
        for tier in BUCKET_ORDER
    ]
    return DashboardResponse(
        filters=filters,
        date_range=view.date_range,
        buckets=buckets,
        count=view.count,
        total_value=view.total_value,
        total_cost=view.total_cost,
        meta=build_dashboard_meta(state),
    )


def build_page_progress(view: TieredBuckets, loaded: int, total_count: int | None) -> PageProgress:
    return PageProgress(
        loaded=loaded,
        total_count=total_count,
        counts={tier: view.bucket(tier).count for tier in BUCKET_ORDER},
    )
