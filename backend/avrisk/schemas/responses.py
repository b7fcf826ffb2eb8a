from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from risk_engine.date_range_resolver import DateRange
from risk_engine.factor_catalog import FactorDefinition
from risk_engine.opportunity_filter import DashboardFilters
from risk_engine.opportunity_normalizer import Opportunity
from risk_engine.score_calculator import ApprovalAuthority, RiskAssessment, RiskTier, TierThreshold


class FactorCatalogResponse(BaseModel):
    factors: list[FactorDefinition]
    thresholds: list[TierThreshold]
    approval_roles: list[ApprovalAuthority]
    default_selection: dict[str, int]
    total_weight: float


class BucketView(BaseModel):
    tier: RiskTier
    count: int
    total_value: float
    total_cost: float
    opportunities: list[Opportunity] = Field(default_factory=list)


class DashboardMeta(BaseModel):
    source: Literal["none", "current_rms", "demo"]
    generation: int
    loaded_at: datetime | None = None
    notice: str | None = Field(default=None, description="Failure notice of the last load attempt")
    truncated: bool = False


class DashboardResponse(BaseModel):
    filters: DashboardFilters
    date_range: DateRange
    buckets: list[BucketView]
    count: int
    total_value: float
    total_cost: float
    meta: DashboardMeta


class PageProgress(BaseModel):
    """Partial view published while a streamed load is running."""

    loaded: int
    total_count: int | None = None
    counts: dict[RiskTier, int]


class OpportunityDetailResponse(BaseModel):
    opportunity: Opportunity
    form_selection: dict[str, int] = Field(description="Stored factor values merged over the defaults")
    approval: ApprovalAuthority | None = None
    needs_reassessment: bool


class AssessmentResponse(BaseModel):
    opportunity: Opportunity
    assessment: RiskAssessment
