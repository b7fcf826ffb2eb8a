"""
Opportunity Normalizer

Canonicalizes external RMS opportunity records and builds the
custom-field payload written back when an assessment is saved.
"""

from .definition import (
    MitigationStatus,
    Opportunity,
    RiskRecord,
    UNASSIGNED_OWNER,
    UNTITLED_SUBJECT,
    format_instant,
)

from .impl import (
    apply_assessment_payload,
    build_assessment_payload,
    coerce_factor_value,
    coerce_instant,
    coerce_mitigation,
    coerce_number,
    coerce_reviewed,
    coerce_score,
    coerce_text,
    normalize,
)

__all__ = [
    # Models
    "MitigationStatus",
    "Opportunity",
    "RiskRecord",
    # Functions
    "apply_assessment_payload",
    "build_assessment_payload",
    "coerce_factor_value",
    "coerce_instant",
    "coerce_mitigation",
    "coerce_number",
    "coerce_reviewed",
    "coerce_score",
    "coerce_text",
    "format_instant",
    "normalize",
    # Constants
    "UNASSIGNED_OWNER",
    "UNTITLED_SUBJECT",
]
