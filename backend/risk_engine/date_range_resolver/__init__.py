"""
Date Range Resolver

Named dashboard date filters resolved to inclusive calendar windows.
"""

from .definition import DateRange, DateRangeSelector

from .impl import (
    FALLBACK_SELECTOR,
    WINDOW_OFFSETS,
    as_calendar_day,
    resolve,
)

__all__ = [
    # Models
    "DateRange",
    "DateRangeSelector",
    # Functions
    "as_calendar_day",
    "resolve",
    # Constants
    "FALLBACK_SELECTOR",
    "WINDOW_OFFSETS",
]
