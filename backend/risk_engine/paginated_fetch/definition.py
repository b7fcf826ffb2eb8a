"""
Paginated Fetch - Data Definitions

One page returned by the upstream listing endpoint and the accumulated
result of walking every page.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from pydantic import BaseModel, Field


class PageResult(BaseModel):
    """A single listing page."""

    page: int = Field(..., ge=1)
    items: List[Dict[str, Any]] = Field(default_factory=list)
    total_count: Optional[int] = Field(
        default=None,
        ge=0,
        description="Total rows reported by the upstream; None when not reported.",
    )


class FetchResult(BaseModel):
    """Everything accumulated by a full pagination run."""

    pages: List[List[Dict[str, Any]]] = Field(default_factory=list)
    items: List[Dict[str, Any]] = Field(default_factory=list)
    total_count: Optional[int] = None
    pages_requested: int = Field(default=0, ge=0)
    truncated: bool = Field(
        default=False,
        description="True when the safety ceiling stopped the run before exhaustion.",
    )


PageFetcher = Callable[[int], Awaitable[PageResult]]

PageCallback = Callable[[List[Dict[str, Any]]], Union[Awaitable[None], None]]
