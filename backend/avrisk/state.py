"""
Dashboard state (DashboardState) and related helpers.

The loaded collection is the only mutable state of the dashboard. It is
replaced wholesale on every fetch; a single opportunity is replaced only
after its assessment was stored upstream. Views are derived from it by
pure functions, never kept in sync incrementally.
"""

from datetime import datetime
from typing import Literal, TypedDict

from risk_engine.date_range_resolver import DateRange
from risk_engine.opportunity_normalizer import Opportunity

DataSource = Literal["none", "current_rms", "demo"]


class DashboardState(TypedDict):
    opportunities: list[Opportunity]
    # Date window the collection was fetched for
    scope: DateRange | None
    # Bumped on every change, used to key memoized views
    generation: int
    source: DataSource
    loaded_at: datetime | None
    # Failure notice shown to the user, cleared by the next live load
    notice: str | None
    truncated: bool


def create_initial_state() -> DashboardState:
    """Creates an empty, never-loaded dashboard state."""
    return {
        "opportunities": [],
        "scope": None,
        "generation": 0,
        "source": "none",
        "loaded_at": None,
        "notice": None,
        "truncated": False,
    }


def has_live_data(state: DashboardState) -> bool:
    return state["source"] == "current_rms"


def is_loaded(state: DashboardState) -> bool:
    return state["source"] != "none"


def replace_collection(
    state: DashboardState,
    opportunities: list[Opportunity],
    scope: DateRange,
    source: DataSource,
    loaded_at: datetime,
    notice: str | None = None,
    truncated: bool = False,
) -> None:
    """Discards the previous collection and installs a freshly fetched one."""
    state["opportunities"] = list(opportunities)
    state["scope"] = scope
    state["source"] = source
    state["loaded_at"] = loaded_at
    state["notice"] = notice
    state["truncated"] = truncated
    state["generation"] += 1


def find_opportunity(state: DashboardState, opportunity_id: int) -> Opportunity | None:
    for opportunity in state["opportunities"]:
        if opportunity.id == opportunity_id:
            return opportunity
    return None


def replace_opportunity(state: DashboardState, updated: Opportunity) -> None:
    """Swaps in the stored version of one opportunity, appending it if absent."""
    opportunities = list(state["opportunities"])
    for index, opportunity in enumerate(opportunities):
        if opportunity.id == updated.id:
            opportunities[index] = updated
            break
    else:
        opportunities.append(updated)
    state["opportunities"] = opportunities
    state["generation"] += 1
