from typing import Any, Literal

from pydantic import BaseModel, Field

from risk_engine.opportunity_normalizer import MitigationStatus


class ScoreRequest(BaseModel):
    factors: dict[str, Any] = Field(..., description="Factor key to selected scale value")


class AssessmentRequest(BaseModel):
    factors: dict[str, Any] = Field(..., description="Factor key to selected scale value")
    reviewed: bool = False
    mitigation_plan: MitigationStatus = MitigationStatus.NONE
    mitigation_notes: str = Field(default="", max_length=5000)


class ProxyRequest(BaseModel):
    endpoint: str = Field(..., min_length=1, max_length=500)
    method: Literal["GET", "POST", "PATCH", "PUT", "DELETE"] = "GET"
    body: dict[str, Any] | None = None
