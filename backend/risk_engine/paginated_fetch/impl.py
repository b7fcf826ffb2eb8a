"""
Paginated Fetch - Implementation

Drives the upstream page-based listing endpoint until exhaustion.

Pages are requested one at a time: whether page N+1 exists depends on
the total count reported with page N. A run stops when:
- a page comes back empty
- the page number reaches ceil(total_count / page_size)
- the safety ceiling of pages is reached (the result is marked truncated)
When the upstream reports no total count, the first short page ends the run.
"""

import copy
import inspect
import logging
import math
from enum import Enum
from typing import Any, AsyncIterator, Dict, List, Optional

from .definition import FetchResult, PageCallback, PageFetcher, PageResult

logger = logging.getLogger(__name__)


MAX_PAGES = 1000


class _Next(Enum):
    CONTINUE = "continue"
    DONE = "done"
    CEILING = "ceiling"


def total_pages(total_count: int, page_size: int) -> int:
    return math.ceil(total_count / page_size)


def _next_step(result: PageResult, page: int, page_size: int, max_pages: int) -> _Next:
    """Decide whether another page must be requested after `page`."""
    if result.total_count is not None:
        if page >= total_pages(result.total_count, page_size):
            return _Next.DONE
    elif len(result.items) < page_size:
        return _Next.DONE
    if page >= max_pages:
        return _Next.CEILING
    return _Next.CONTINUE


def _validate(page_size: int, max_pages: int) -> None:
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")
    if max_pages < 1:
        raise ValueError(f"max_pages must be positive, got {max_pages}")


async def iter_pages(
    fetcher: PageFetcher,
    page_size: int,
    max_pages: int = MAX_PAGES,
) -> AsyncIterator[PageResult]:
    """
    Yield non-empty pages in order, starting at page 1.

    Args:
        fetcher: Awaitable page loader, called with the 1-based page number.
        page_size: Rows per page requested from the upstream.
        max_pages: Safety ceiling against runaway pagination.
    """
    _validate(page_size, max_pages)
    page = 1
    while True:
        result = await fetcher(page)
        if not result.items:
            return
        yield result
        step = _next_step(result, page, page_size, max_pages)
        if step == _Next.CEILING:
            logger.warning(f"Pagination stopped at safety ceiling of {max_pages} pages")
            return
        if step == _Next.DONE:
            return
        page += 1


async def fetch_all(
    fetcher: PageFetcher,
    page_size: int,
    on_page: Optional[PageCallback] = None,
    max_pages: int = MAX_PAGES,
) -> FetchResult:
    """
    Fetch every page and accumulate the raw records.

    Args:
        fetcher: Awaitable page loader, called with the 1-based page number.
        page_size: Rows per page requested from the upstream.
        on_page: Optional callback receiving the records accumulated so far
            after each non-empty page. It cannot alter the final result.
        max_pages: Safety ceiling against runaway pagination.

    Returns:
        FetchResult with the pages, flattened items and run metadata.
    """
    pages: List[List[Dict[str, Any]]] = []
    items: List[Dict[str, Any]] = []
    total_count: Optional[int] = None
    last: Optional[PageResult] = None

    async for result in iter_pages(fetcher, page_size, max_pages):
        last = result
        if result.total_count is not None:
            total_count = result.total_count
        pages.append(list(result.items))
        items.extend(result.items)

        if on_page is not None:
            published = on_page(copy.deepcopy(items))
            if inspect.isawaitable(published):
                await published

    # The run either ended on its own decision after the last page, or
    # one more (empty) page was requested.
    step = _next_step(last, len(pages), page_size, max_pages) if last else _Next.CONTINUE
    pages_requested = len(pages) + (1 if step == _Next.CONTINUE else 0)

    logger.info(f"Fetched {len(items)} records in {pages_requested} page request(s)")

    return FetchResult(
        pages=pages,
        items=items,
        total_count=total_count,
        pages_requested=pages_requested,
        truncated=step == _Next.CEILING,
    )
