from avrisk.schemas.requests import AssessmentRequest, ProxyRequest, ScoreRequest
from avrisk.schemas.responses import (
    AssessmentResponse,
    BucketView,
    DashboardMeta,
    DashboardResponse,
    FactorCatalogResponse,
    OpportunityDetailResponse,
    PageProgress,
)

__all__ = [
    "AssessmentRequest",
    "AssessmentResponse",
    "BucketView",
    "DashboardMeta",
    "DashboardResponse",
    "FactorCatalogResponse",
    "OpportunityDetailResponse",
    "PageProgress",
    "ProxyRequest",
    "ScoreRequest",
]
