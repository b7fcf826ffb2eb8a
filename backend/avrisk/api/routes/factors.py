"""Factor catalog and score preview endpoints."""

from fastapi import APIRouter

from avrisk.core.logging import get_logger
from avrisk.schemas import FactorCatalogResponse, ScoreRequest
from avrisk.services import get_opportunity_service
from risk_engine.factor_catalog import default_selection, list_factors, total_weight
from risk_engine.score_calculator import ApprovalAuthority, RiskAssessment, tier_thresholds

logger = get_logger(__name__)
router = APIRouter()


@router.get("/factors", response_model=FactorCatalogResponse)
async def get_factors() -> FactorCatalogResponse:
    """Returns the factor catalog with tier thresholds and approvers."""
    return FactorCatalogResponse(
        factors=list(list_factors()),
        thresholds=tier_thresholds(),
        approval_roles=list(ApprovalAuthority),
        default_selection=default_selection(),
        total_weight=total_weight(),
    )


@router.post("/assessments/score", response_model=RiskAssessment)
async def preview_score(request: ScoreRequest) -> RiskAssessment:
    """Scores a selection without storing anything."""
    return get_opportunity_service().score_preview(request.factors)
