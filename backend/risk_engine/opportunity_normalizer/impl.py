"""
Opportunity Normalizer - Implementation

Tolerance layer between the schemaless RMS custom-field store and the
internal Opportunity shape. Each heterogeneous wire field has exactly one
canonicalization function; all of them are total (they never raise).

Features:
- Numeric-like strings coerced to numbers
- Reviewed flag variants collapsed to a boolean
- Mitigation plan status accepted as number, digit string or name
- ISO-8601 instants parsed to UTC datetimes
- Outbound PATCH payload for a saved assessment
"""

import logging
import math
from datetime import date, datetime, timezone
from numbers import Real
from typing import Any, Dict, Mapping, Optional, Union

from ..factor_catalog import FACTORS, FactorDefinition
from ..score_calculator import RiskAssessment
from .definition import (
    NOT_REVIEWED_WIRE_VALUE,
    REVIEWED_WIRE_VALUE,
    UNASSIGNED_OWNER,
    UNTITLED_SUBJECT,
    MitigationStatus,
    Opportunity,
    RiskRecord,
    format_instant,
)

logger = logging.getLogger(__name__)


_REVIEWED_STRINGS = {"yes", "true", "1"}

_MITIGATION_NAMES = {status.name.lower(): status for status in MitigationStatus}


# =============================================================================
# FIELD CANONICALIZERS
# =============================================================================


def coerce_reviewed(value: Any) -> bool:
    """
    Reviewed flag to boolean.

    "Yes", True, "true", 1 and "1" are true (strings ignore case and
    surrounding whitespace). Everything else, including None and "", is false.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, Real):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in _REVIEWED_STRINGS
    return False


def _parse_number(value: Any) -> Optional[float]:
    """Finite float view of a numeric-like value, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Real):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def coerce_number(value: Any, default: float = 0.0) -> float:
    """Numeric-like value to float; default when absent or unparsable."""
    number = _parse_number(value)
    return default if number is None else number


def coerce_score(value: Any) -> Optional[float]:
    """Stored risk score to float; None when absent or unparsable."""
    return _parse_number(value)


def coerce_mitigation(value: Any) -> MitigationStatus:
    """Mitigation plan status from 0/1/2, "0"/"1"/"2" or none/partial/complete."""
    if isinstance(value, MitigationStatus):
        return value
    if isinstance(value, str) and value.strip().lower() in _MITIGATION_NAMES:
        return _MITIGATION_NAMES[value.strip().lower()]
    number = _parse_number(value)
    if number is None or not number.is_integer():
        return MitigationStatus.NONE
    try:
        return MitigationStatus(int(number))
    except ValueError:
        return MitigationStatus.NONE


def coerce_instant(value: Any) -> Optional[datetime]:
    """ISO-8601 text or datetime to an aware UTC datetime; naive values are UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.debug(f"Unparsable instant ignored: {value!r}")
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def coerce_factor_value(factor: FactorDefinition, value: Any) -> Optional[int]:
    """Stored factor value if it lies on the factor's scale, else None."""
    number = _parse_number(value)
    if number is None or not number.is_integer():
        return None
    as_int = int(number)
    return as_int if factor.level_for(as_int) is not None else None


def coerce_text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _nested_name(raw: Mapping[str, Any], *keys: str) -> Optional[str]:
    """First non-empty `<key>.name` among the given keys."""
    for key in keys:
        nested = raw.get(key)
        if isinstance(nested, Mapping):
            name = coerce_text(nested.get("name"))
        elif isinstance(nested, str):
            name = coerce_text(nested)
        else:
            continue
        if name:
            return name
    return None


# =============================================================================
# RECORD NORMALIZATION
# =============================================================================


def normalize(raw: Union[Mapping[str, Any], Opportunity]) -> Opportunity:
    """
    Map an external RMS record into the internal Opportunity shape.

    Idempotent: normalizing an already-normalized opportunity, or its
    to_record() output, yields an equal opportunity.

    Raises:
        ValueError: If the record is not a mapping or has no numeric id.
    """
    if isinstance(raw, Opportunity):
        raw = raw.to_record()
    if not isinstance(raw, Mapping):
        raise ValueError(f"Opportunity record must be a mapping, got {type(raw).__name__}")

    record_id = _parse_number(raw.get("id"))
    if record_id is None or not record_id.is_integer():
        raise ValueError(f"Opportunity record without a numeric id: {raw.get('id')!r}")

    custom_fields = raw.get("custom_fields")
    if not isinstance(custom_fields, Mapping):
        custom_fields = {}

    charge_source = raw.get("charge_total")
    if charge_source in (None, ""):
        charge_source = raw.get("charge")

    factors: Dict[str, int] = {}
    for factor in FACTORS:
        value = coerce_factor_value(factor, custom_fields.get(factor.custom_field))
        if value is not None:
            factors[factor.key] = value

    risk = RiskRecord(
        score=coerce_score(custom_fields.get("risk_score")),
        factors=factors,
        reviewed=coerce_reviewed(custom_fields.get("risk_reviewed")),
        mitigation_plan=coerce_mitigation(custom_fields.get("risk_mitigation_plan")),
        mitigation_notes=coerce_text(custom_fields.get("risk_mitigation_notes")),
        last_updated=coerce_instant(custom_fields.get("risk_last_updated")),
    )

    return Opportunity(
        id=int(record_id),
        subject=coerce_text(raw.get("subject"), UNTITLED_SUBJECT),
        starts_at=coerce_instant(raw.get("starts_at")),
        charge_total=coerce_number(charge_source),
        cost_total=coerce_number(raw.get("cost_total")),
        owner_name=_nested_name(raw, "owner", "opportunity_owner") or UNASSIGNED_OWNER,
        organisation_name=_nested_name(raw, "organisation") or "",
        updated_at=coerce_instant(raw.get("updated_at")),
        risk=risk,
    )


# =============================================================================
# OUTBOUND PAYLOAD
# =============================================================================


def build_assessment_payload(
    assessment: RiskAssessment,
    reviewed: bool,
    mitigation_plan: MitigationStatus,
    mitigation_notes: str,
    now: datetime,
) -> Dict[str, Any]:
    """
    PATCH body persisting an assessment into the RMS custom fields.

    Every risk field is written (full overwrite, not a partial patch) and
    risk_reviewed uses the two-value string encoding of the upstream schema.
    """
    custom_fields: Dict[str, Any] = {
        "risk_score": assessment.score,
        "risk_level": assessment.tier.value,
    }
    for factor in FACTORS:
        custom_fields[factor.custom_field] = assessment.selection[factor.key]
    custom_fields.update(
        {
            "risk_reviewed": REVIEWED_WIRE_VALUE if reviewed else NOT_REVIEWED_WIRE_VALUE,
            "risk_mitigation_plan": int(coerce_mitigation(mitigation_plan)),
            "risk_last_updated": format_instant(now),
            "risk_mitigation_notes": mitigation_notes or "",
        }
    )
    return {"opportunity": {"custom_fields": custom_fields}}


def apply_assessment_payload(opportunity: Opportunity, payload: Mapping[str, Any]) -> Opportunity:
    """Opportunity as it reads after the payload's custom fields are stored."""
    record = opportunity.to_record()
    record["custom_fields"].update(payload["opportunity"]["custom_fields"])
    return normalize(record)
