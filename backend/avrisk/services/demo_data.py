"""
Demonstration dataset used when Current RMS is unconfigured or unreachable.

Records are wire-shaped (as returned by the listing endpoint) and dated
relative to the given day so every date window has content.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from risk_engine.factor_catalog import factor_keys
from risk_engine.opportunity_normalizer import MitigationStatus, format_instant
from risk_engine.score_calculator import compute


def _instant(day: date, hour: int = 9) -> str:
    return format_instant(datetime.combine(day, time(hour=hour), tzinfo=timezone.utc))


def _risk_fields(
    values: list[int] | None,
    reviewed: bool,
    mitigation: MitigationStatus,
    notes: str,
    assessed_at: str,
) -> dict[str, Any]:
    if values is None:
        return {}
    selection = dict(zip(factor_keys(), values))
    assessment = compute(selection)
    fields: dict[str, Any] = {f"risk_{key}": value for key, value in selection.items()}
    fields.update(
        {
            "risk_score": assessment.score,
            "risk_level": assessment.tier.value,
            "risk_reviewed": "Yes" if reviewed else "",
            "risk_mitigation_plan": int(mitigation),
            "risk_mitigation_notes": notes,
            "risk_last_updated": assessed_at,
        }
    )
    return fields


# (id, subject, days from today, charge, cost, owner, organisation,
#  factor values in catalog order or None, reviewed, mitigation, notes, stale)
_DEMO_ROWS = [
    (9001, "Arena Tour Opening Night", 5, 185000.0, 121000.0, "Dana Whitfield", "Northlight Live",
     [5, 5, 4, 4, 5, 5, 4, 4], True, MitigationStatus.PARTIAL, "Second rigging crew on standby.", False),
    (9002, "Corporate Product Launch", 12, 64000.0, 38500.0, "Sam Okafor", "Brightwave Tech",
     [4, 4, 3, 4, 4, 4, 3, 4], False, MitigationStatus.NONE, "", False),
    (9003, "Annual Charity Gala", 21, 22500.0, 13100.0, "Priya Raman", "Hope Foundation",
     [3, 3, 3, 3, 3, 3, 3, 3], True, MitigationStatus.COMPLETE, "Standard gala package.", False),
    (9004, "Hotel Ballroom Conference", 26, 9800.0, 5200.0, "Unassigned", "Grand Meridian",
     [1, 2, 1, 2, 1, 2, 1, 2], True, MitigationStatus.COMPLETE, "", False),
    (9005, "Festival Main Stage", 38, 142000.0, 96000.0, "Dana Whitfield", "Riverside Events",
     [4, 5, 4, 3, 4, 4, 4, 3], False, MitigationStatus.PARTIAL, "Weather contingency drafted.", True),
    (9006, "University Graduation", 47, 18200.0, 9900.0, "Sam Okafor", "Eastfield University",
     None, False, MitigationStatus.NONE, "", False),
    (9007, "Broadcast Studio Refit", 55, 73500.0, 51000.0, "Priya Raman", "Channel Nine Media",
     [3, 4, 3, 3, 3, 4, 3, 3], False, MitigationStatus.NONE, "", True),
    (9008, "Trade Show Pavilion", 68, 41000.0, 26800.0, "Leo Marchetti", "Expo Partners",
     [2, 2, 2, 3, 2, 2, 2, 2], True, MitigationStatus.NONE, "", False),
    (9009, "Stadium Halftime Show", 83, 260000.0, 198000.0, "Leo Marchetti", "National Sports League",
     [5, 5, 5, 5, 5, 5, 5, 5], False, MitigationStatus.NONE, "", False),
    (9010, "Museum Exhibition Opening", 120, 15400.0, 8700.0, "Unassigned", "City Museum Trust",
     None, False, MitigationStatus.NONE, "", False),
]


def demo_records(today: date) -> list[dict[str, Any]]:
    """
    Builds the demonstration listing anchored at `today`.

    Covers every tier (including unscored), both review states, all three
    mitigation states and assessments made stale by a later record update.
    """
    records: list[dict[str, Any]] = []
    for (
        record_id, subject, offset, charge, cost, owner, organisation,
        values, reviewed, mitigation, notes, stale,
    ) in _DEMO_ROWS:
        assessed_on = today - timedelta(days=14)
        updated_on = today - timedelta(days=3) if stale else today - timedelta(days=20)
        records.append(
            {
                "id": record_id,
                "subject": subject,
                "starts_at": _instant(today + timedelta(days=offset), hour=18),
                "charge_total": f"{charge:.2f}",
                "cost_total": f"{cost:.2f}",
                "owner": {"name": owner},
                "organisation": {"name": organisation},
                "updated_at": _instant(updated_on),
                "custom_fields": _risk_fields(values, reviewed, mitigation, notes, _instant(assessed_on)),
            }
        )
    return records
