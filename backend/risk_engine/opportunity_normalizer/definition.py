"""
Opportunity Normalizer - Data Definitions

Internal opportunity shape produced from external RMS records, and the
risk workflow sub-record stored in the RMS custom fields.
"""

from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, computed_field

from ..score_calculator import RiskTier, tier_for_score


UNTITLED_SUBJECT = "Untitled Opportunity"
UNASSIGNED_OWNER = "Unassigned"

REVIEWED_WIRE_VALUE = "Yes"
NOT_REVIEWED_WIRE_VALUE = ""


class MitigationStatus(IntEnum):
    """Progress of the risk mitigation plan (stored as 0/1/2 upstream)."""
    NONE = 0
    PARTIAL = 1
    COMPLETE = 2


class RiskRecord(BaseModel):
    """Risk workflow fields of one opportunity."""

    score: Optional[float] = Field(
        default=None,
        description="Last computed risk score; None when never scored.",
    )
    factors: Dict[str, int] = Field(
        default_factory=dict,
        description="Last factor selection, keyed by factor key.",
    )
    reviewed: bool = False
    mitigation_plan: MitigationStatus = MitigationStatus.NONE
    mitigation_notes: str = ""
    last_updated: Optional[datetime] = Field(
        default=None,
        description="Instant the risk fields were last written.",
    )


class Opportunity(BaseModel):
    """
    A sales or booking record of the external RMS, normalized.

    The risk tier is always re-derived from the stored score; a stored
    tier label is never read back.
    """

    id: int
    subject: str = UNTITLED_SUBJECT
    starts_at: Optional[datetime] = None
    charge_total: float = 0.0
    cost_total: float = 0.0
    owner_name: str = UNASSIGNED_OWNER
    organisation_name: str = ""
    updated_at: Optional[datetime] = None
    risk: RiskRecord = Field(default_factory=RiskRecord)

    @computed_field
    @property
    def tier(self) -> RiskTier:
        return tier_for_score(self.risk.score)

    def to_record(self) -> Dict[str, Any]:
        """
        Serializes back to the external record shape.

        normalize(op.to_record()) == op for every normalized opportunity.
        """
        custom_fields: Dict[str, Any] = {
            "risk_score": self.risk.score if self.risk.score is not None else "",
            "risk_level": self.tier.value if self.tier != RiskTier.UNSCORED else "",
            "risk_reviewed": REVIEWED_WIRE_VALUE if self.risk.reviewed else NOT_REVIEWED_WIRE_VALUE,
            "risk_mitigation_plan": int(self.risk.mitigation_plan),
            "risk_mitigation_notes": self.risk.mitigation_notes,
            "risk_last_updated": format_instant(self.risk.last_updated),
        }
        for key, value in self.risk.factors.items():
            custom_fields[f"risk_{key}"] = value

        return {
            "id": self.id,
            "subject": self.subject,
            "starts_at": format_instant(self.starts_at),
            "charge_total": self.charge_total,
            "cost_total": self.cost_total,
            "owner": {"name": self.owner_name},
            "organisation": {"name": self.organisation_name},
            "updated_at": format_instant(self.updated_at),
            "custom_fields": custom_fields,
        }


def format_instant(value: Optional[datetime]) -> str:
    """ISO-8601 UTC text for an instant, empty string when absent."""
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
