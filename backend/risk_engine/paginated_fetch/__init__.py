"""
Paginated Fetch

Sequential page-by-page accumulation against the RMS listing endpoint.
"""

from .definition import FetchResult, PageCallback, PageFetcher, PageResult

from .impl import MAX_PAGES, fetch_all, iter_pages, total_pages

__all__ = [
    # Models
    "FetchResult",
    "PageResult",
    # Types
    "PageCallback",
    "PageFetcher",
    # Functions
    "fetch_all",
    "iter_pages",
    "total_pages",
    # Constants
    "MAX_PAGES",
]
