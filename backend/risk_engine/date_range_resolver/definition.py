"""
Date Range Resolver - Data Definitions

Named dashboard date filters and the concrete calendar window they
resolve to. Both bounds of a window are inclusive calendar days.
"""

from datetime import date, datetime, timezone, tzinfo
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DateRangeSelector(str, Enum):
    """Date filters offered by the dashboard."""
    NEXT_30 = "0-30"
    DAYS_30_60 = "30-60"
    DAYS_60_90 = "60-90"
    ALL = "all"
    CUSTOM = "custom"


class DateRange(BaseModel):
    """
    Calendar window [start, end], both bounds inclusive.

    An end of None means the window is open towards the future.
    """

    model_config = ConfigDict(frozen=True)

    start: date
    end: Optional[date] = Field(default=None, description="Inclusive last day; None for open-ended.")

    @model_validator(mode="after")
    def validate_bounds(self) -> "DateRange":
        if self.end is not None and self.end < self.start:
            raise ValueError(f"Range end {self.end} precedes start {self.start}")
        return self

    @property
    def is_open_ended(self) -> bool:
        return self.end is None

    def contains_day(self, day: date) -> bool:
        if day < self.start:
            return False
        return self.end is None or day <= self.end

    def contains(self, instant: Optional[datetime], tz: Optional[tzinfo] = None) -> bool:
        """
        Whether the instant's calendar day falls inside the window.

        The day is taken in `tz` (UTC when omitted); naive instants are
        read as UTC. An absent instant is never contained.
        """
        if instant is None:
            return False
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return self.contains_day(instant.astimezone(tz or timezone.utc).date())

    def covers(self, other: "DateRange") -> bool:
        """Whether every day of `other` is inside this window."""
        if other.start < self.start:
            return False
        if self.end is None:
            return True
        return other.end is not None and other.end <= self.end

    def to_query_params(self) -> Dict[str, str]:
        """RMS listing filter on starts_at, as local ISO dates."""
        params = {"q[starts_at_gteq]": self.start.isoformat()}
        if self.end is not None:
            params["q[starts_at_lteq]"] = self.end.isoformat()
        return params
