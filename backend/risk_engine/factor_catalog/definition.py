"""
Factor Catalog - Data Definitions

Pydantic models describing the qualitative risk factors an assessor scores.
Each factor carries an ordered scale of discrete levels and a weight.
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..errors import RiskEngineError


class RiskBand(str, Enum):
    """Qualitative band shown next to each scale level."""
    LOW = "Low"
    LOW_MEDIUM = "Low-Med"
    MEDIUM = "Medium"
    MEDIUM_HIGH = "Med-High"
    HIGH = "High"


class ScaleLevel(BaseModel):
    """One selectable level of a factor scale."""

    model_config = ConfigDict(frozen=True)

    value: int = Field(..., description="Numeric value used by the score calculator.")
    label: str = Field(..., min_length=1, description="Human label shown in the assessment form.")
    risk_band: RiskBand = Field(..., description="Qualitative risk band of this level.")


class FactorDefinition(BaseModel):
    """
    A single weighted risk factor.

    Scale values are strictly increasing and the weight is positive;
    both are enforced on construction so the catalog cannot drift.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(
        ...,
        pattern=r"^[a-z][a-z_]*$",
        description="Stable identifier, also used for the risk_<key> custom field.",
    )
    label: str = Field(..., min_length=1)
    description: str = Field(default="")
    scale: List[ScaleLevel] = Field(..., min_length=2)
    weight: float = Field(..., gt=0)

    @field_validator("scale")
    @classmethod
    def validate_scale_order(cls, v: List[ScaleLevel]) -> List[ScaleLevel]:
        """Rejects scales whose values are not strictly increasing."""
        values = [level.value for level in v]
        if any(b <= a for a, b in zip(values, values[1:])):
            raise ValueError(f"Scale values must be strictly increasing, got {values}")
        return v

    @property
    def custom_field(self) -> str:
        """Name of the external custom field storing this factor."""
        return f"risk_{self.key}"

    @property
    def values(self) -> List[int]:
        return [level.value for level in self.scale]

    @property
    def min_value(self) -> int:
        return self.scale[0].value

    @property
    def max_value(self) -> int:
        return self.scale[-1].value

    @property
    def midpoint(self) -> int:
        """Middle level of the scale, used as the default selection."""
        return self.scale[len(self.scale) // 2].value

    def level_for(self, value: int) -> ScaleLevel | None:
        """Returns the scale level with the given value, if any."""
        for level in self.scale:
            if level.value == value:
                return level
        return None


class UnknownFactorError(RiskEngineError, KeyError):
    """The requested factor key is not part of the catalog."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Unknown risk factor: {key}")
