"""Dashboard endpoints: tiered view, streamed load, detail and assessment save."""

import asyncio
import json
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from avrisk.api.response_builder import (
    build_dashboard_response,
    build_page_progress,
)
from avrisk.core.logging import get_logger
from avrisk.schemas import (
    AssessmentRequest,
    AssessmentResponse,
    DashboardResponse,
    OpportunityDetailResponse,
)
from avrisk.services import get_opportunity_service
from risk_engine.date_range_resolver import DateRangeSelector
from risk_engine.opportunity_filter import (
    DashboardFilters,
    MitigationFilter,
    ReviewedFilter,
    needs_reassessment,
)
from risk_engine.opportunity_normalizer import Opportunity
from risk_engine.score_calculator import approval_for_tier

logger = get_logger(__name__)
router = APIRouter()


def dashboard_filters(
    date_range: DateRangeSelector = Query(DateRangeSelector.NEXT_30),
    start: Optional[date] = Query(None, description="First day of a custom range"),
    end: Optional[date] = Query(None, description="Last day of a custom range"),
    reviewed: ReviewedFilter = Query(ReviewedFilter.ALL),
    mitigation: MitigationFilter = Query(MitigationFilter.ALL),
    needs_reassessment: bool = Query(False),
) -> DashboardFilters:
    return DashboardFilters(
        date_range=date_range,
        custom_start=start,
        custom_end=end,
        reviewed=reviewed,
        mitigation=mitigation,
        needs_reassessment=needs_reassessment,
    )


def _sse_event(event_type: str, data: dict) -> str:
    """Formats a payload as an SSE event."""
    return f"event: {event_type}\ndata: {json.dumps(data, ensure_ascii=False)}\n\n"


@router.get("/opportunities", response_model=DashboardResponse)
async def list_opportunities(
    filters: DashboardFilters = Depends(dashboard_filters),
    refresh: bool = Query(False, description="Refetch from Current RMS"),
) -> DashboardResponse:
    """Loads the collection when needed and returns the tiered view."""
    service = get_opportunity_service()
    outcome = await service.ensure_loaded(filters, force=refresh)
    if outcome.notice:
        logger.warning(f"[DASHBOARD] {outcome.notice}")
    view = service.get_view(filters)
    return build_dashboard_response(view, filters, service.state)


@router.get("/opportunities/stream")
async def stream_opportunities(
    filters: DashboardFilters = Depends(dashboard_filters),
) -> StreamingResponse:
    """Refetches the collection, publishing a partial view after every page."""
    service = get_opportunity_service()

    async def _event_stream():
        queue: asyncio.Queue = asyncio.Queue()

        async def publish(partial: list[Opportunity], total_count: Optional[int]) -> None:
            await queue.put((partial, total_count))

        yield _sse_event("status", {"step": "fetch", "message": "Loading opportunities from Current RMS..."})
        task = asyncio.create_task(service.ensure_loaded(filters, force=True, on_progress=publish))
        try:
            while not task.done() or not queue.empty():
                getter = asyncio.ensure_future(queue.get())
                done, _ = await asyncio.wait({getter, task}, return_when=asyncio.FIRST_COMPLETED)
                if getter not in done:
                    getter.cancel()
                    continue
                partial, total_count = getter.result()
                progress = build_page_progress(service.preview_view(partial, filters), len(partial), total_count)
                yield _sse_event("page", json.loads(progress.model_dump_json()))

            outcome = task.result()
            response = build_dashboard_response(service.get_view(filters), filters, service.state)
            if outcome.notice:
                yield _sse_event("status", {"step": "notice", "message": outcome.notice})
            yield _sse_event("result", json.loads(response.model_dump_json()))
        except Exception as e:
            logger.error(f"[STREAM] Error: {e}", exc_info=True)
            yield _sse_event("error", {"detail": str(e)})
        finally:
            if not task.done():
                task.cancel()

    return StreamingResponse(
        _event_stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.get("/opportunities/{opportunity_id}", response_model=OpportunityDetailResponse)
async def get_opportunity(opportunity_id: int) -> OpportunityDetailResponse:
    """One opportunity with the values its assessment form starts from."""
    service = get_opportunity_service()
    opportunity = await service.get_opportunity(opportunity_id)
    return OpportunityDetailResponse(
        opportunity=opportunity,
        form_selection=service.form_selection(opportunity),
        approval=approval_for_tier(opportunity.tier),
        needs_reassessment=needs_reassessment(opportunity),
    )


@router.put("/opportunities/{opportunity_id}/assessment", response_model=AssessmentResponse)
async def save_assessment(opportunity_id: int, request: AssessmentRequest) -> AssessmentResponse:
    """Computes the assessment and stores every risk field in Current RMS."""
    service = get_opportunity_service()
    opportunity, assessment = await service.save_assessment(
        opportunity_id,
        request.factors,
        reviewed=request.reviewed,
        mitigation_plan=request.mitigation_plan,
        mitigation_notes=request.mitigation_notes,
    )
    return AssessmentResponse(opportunity=opportunity, assessment=assessment)
