"""
Date Range Resolver - Implementation

Converts a named or custom dashboard filter into a concrete calendar
window anchored at the start of today's calendar day.

Policy: a custom range needs both bounds. With only one bound, or with
the start after the end, it is treated as unset and falls back to the
0-30 window rather than becoming half-open.
"""

import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Dict, Optional, Tuple, Union

from .definition import DateRange, DateRangeSelector

logger = logging.getLogger(__name__)


# Offsets in days from today for the fixed windows
WINDOW_OFFSETS: Dict[DateRangeSelector, Tuple[int, int]] = {
    DateRangeSelector.NEXT_30: (0, 30),
    DateRangeSelector.DAYS_30_60: (30, 60),
    DateRangeSelector.DAYS_60_90: (60, 90),
}

FALLBACK_SELECTOR = DateRangeSelector.NEXT_30

DayLike = Union[date, datetime]


def as_calendar_day(value: DayLike, tz: Optional[tzinfo] = None) -> date:
    """Calendar day of a date or instant; aware instants are read in `tz` when given."""
    if isinstance(value, datetime):
        if tz is not None and value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()
    return value


def resolve(
    selector: Union[DateRangeSelector, str],
    today: DayLike,
    custom_start: Optional[DayLike] = None,
    custom_end: Optional[DayLike] = None,
    tz: Optional[tzinfo] = None,
) -> DateRange:
    """
    Resolve a dashboard date filter to an inclusive window.

    Args:
        selector: One of 0-30, 30-60, 60-90, all, custom.
        today: Anchor instant or day.
        custom_start: First day of a custom range.
        custom_end: Last day of a custom range.
        tz: Timezone used to read `today` and custom instants as calendar days.

    Returns:
        DateRange with inclusive bounds; `all` has no end.

    Raises:
        ValueError: If the selector is not recognized.
    """
    selector = DateRangeSelector(selector)
    anchor = as_calendar_day(today, tz)

    if selector == DateRangeSelector.ALL:
        return DateRange(start=anchor, end=None)

    if selector == DateRangeSelector.CUSTOM:
        if custom_start is not None and custom_end is not None:
            start = as_calendar_day(custom_start, tz)
            end = as_calendar_day(custom_end, tz)
            if start <= end:
                return DateRange(start=start, end=end)
            logger.warning(f"Custom range {start} > {end}, falling back to {FALLBACK_SELECTOR.value}")
        elif custom_start is not None or custom_end is not None:
            logger.debug(f"Custom range with a single bound, falling back to {FALLBACK_SELECTOR.value}")
        selector = FALLBACK_SELECTOR

    first, last = WINDOW_OFFSETS[selector]
    return DateRange(
        start=anchor + timedelta(days=first),
        end=anchor + timedelta(days=last),
    )
