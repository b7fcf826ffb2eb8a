"""
Opportunity service: loads the collection, derives views and saves assessments.

Owns the DashboardState of the process. The collection is fetched page by
page from Current RMS for a date scope (every future opportunity, or the
custom window when the user picks dates outside it) and replaced
wholesale. Views are pure recomputations memoized by
(generation, filters, today).
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Awaitable, Callable, Mapping, Optional

from avrisk.core.cache import ViewCache
from avrisk.core.config import Settings, settings
from avrisk.core.exceptions import (
    InvalidUpstreamShapeError,
    OpportunityNotFoundError,
    RMSConfigurationError,
    UpstreamServiceError,
)
from avrisk.core.logging import SyncLogger, get_logger
from avrisk.services.demo_data import demo_records
from avrisk.services.rms_client import CurrentRMSClient
from avrisk.state import (
    DashboardState,
    DataSource,
    find_opportunity,
    has_live_data,
    is_loaded,
    replace_collection,
    replace_opportunity,
)
from risk_engine.date_range_resolver import DateRange, DateRangeSelector, as_calendar_day, resolve
from risk_engine.factor_catalog import default_selection
from risk_engine.opportunity_filter import DashboardFilters, TieredBuckets, derive_view
from risk_engine.opportunity_normalizer import (
    MitigationStatus,
    Opportunity,
    apply_assessment_payload,
    build_assessment_payload,
    normalize,
)
from risk_engine.paginated_fetch import PageResult, fetch_all
from risk_engine.score_calculator import RiskAssessment, compute

logger = get_logger(__name__)

# Errors that turn a load into a fallback or a notice instead of a failure
LOAD_ERRORS = (UpstreamServiceError, InvalidUpstreamShapeError, RMSConfigurationError)

ProgressCallback = Callable[[list[Opportunity], Optional[int]], Optional[Awaitable[None]]]


@dataclass(frozen=True)
class LoadOutcome:
    """What a load attempt did to the dashboard state."""

    source: DataSource
    loaded: int
    skipped: int = 0
    fetched: bool = True
    truncated: bool = False
    notice: Optional[str] = None


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _load_notice(error: Exception) -> str:
    if isinstance(error, UpstreamServiceError):
        return f"Could not load opportunities from Current RMS: {error.upstream_message}"
    if isinstance(error, RMSConfigurationError):
        return "Current RMS is not configured"
    return f"Could not load opportunities from Current RMS: {error}"


class OpportunityService:
    """
    Dashboard operations over one DashboardState.

    Usage:
        service = OpportunityService(CurrentRMSClient.from_settings(), create_initial_state())
        await service.ensure_loaded(filters)
        view = service.get_view(filters)
    """

    def __init__(
        self,
        client: CurrentRMSClient,
        state: DashboardState,
        config: Settings = settings,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.client = client
        self.state = state
        self.config = config
        self._clock = clock
        self._views = ViewCache[TieredBuckets](
            ttl_seconds=config.view_cache_ttl_seconds,
            max_size=config.view_cache_max_size,
        )

    # -------------------------------------------------------------------------
    # Time and scope
    # -------------------------------------------------------------------------

    def now(self) -> datetime:
        return self._clock()

    def today(self) -> date:
        return as_calendar_day(self.now(), self.config.timezone)

    def fetch_scope(self, filters: Optional[DashboardFilters] = None) -> DateRange:
        """
        Date window requested from the RMS.

        Every opportunity starting today or later, widened to the custom
        window when a valid one starts in the past.
        """
        today = self.today()
        scope = DateRange(start=today, end=None)
        if filters is not None and filters.date_range == DateRangeSelector.CUSTOM:
            window = resolve(
                filters.date_range,
                today,
                custom_start=filters.custom_start,
                custom_end=filters.custom_end,
                tz=self.config.timezone,
            )
            if not scope.covers(window):
                scope = window
        return scope

    def _needs_fetch(self, scope: DateRange) -> bool:
        current = self.state["scope"]
        if not is_loaded(self.state) or current is None:
            return True
        return not current.covers(scope)

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def ensure_loaded(
        self,
        filters: Optional[DashboardFilters] = None,
        force: bool = False,
        on_progress: Optional[ProgressCallback] = None,
    ) -> LoadOutcome:
        """
        Loads the collection unless the current one already covers the scope.

        Args:
            filters: Current dashboard filters, used to widen the scope.
            force: Refetch even when the loaded scope covers the request.
            on_progress: Receives the normalized opportunities accumulated
                so far (and the upstream total) after each page.

        Returns:
            LoadOutcome describing the source now in use and any notice.
        """
        scope = self.fetch_scope(filters)
        if not force and not self._needs_fetch(scope):
            return LoadOutcome(
                source=self.state["source"],
                loaded=len(self.state["opportunities"]),
                fetched=False,
                truncated=self.state["truncated"],
                notice=self.state["notice"],
            )
        return await self.load(scope, on_progress=on_progress)

    async def load(self, scope: DateRange, on_progress: Optional[ProgressCallback] = None) -> LoadOutcome:
        """
        Fetches every page for `scope` and replaces the collection.

        A failed initial load falls back to the demonstration dataset (when
        enabled). A failed refresh after a live load keeps the previous
        collection and records the failure notice.
        """
        sync_logger = SyncLogger()
        page_size = self.config.rms_page_size
        sync_logger.fetch_start(scope=self._describe(scope), page_size=page_size)

        opportunities: list[Opportunity] = []
        skipped = 0
        consumed = 0
        last_page: dict[str, Any] = {"page": 0, "total": None}

        async def fetch_page(page: int) -> PageResult:
            result = await self.client.list_opportunities(page=page, per_page=page_size, date_range=scope)
            last_page["page"] = page
            if result.total_count is not None:
                last_page["total"] = result.total_count
            return result

        async def on_page(items: list[dict[str, Any]]) -> None:
            nonlocal skipped, consumed
            consumed_before = consumed
            for raw in items[consumed:]:
                try:
                    opportunities.append(normalize(raw))
                except ValueError as e:
                    skipped += 1
                    sync_logger.record_skipped(raw.get("id") if isinstance(raw, Mapping) else None, str(e))
            consumed = len(items)
            sync_logger.page_received(
                page=last_page["page"],
                rows=len(items) - consumed_before,
                accumulated=len(items),
                total=last_page["total"],
            )
            if on_progress is not None:
                published = on_progress(list(opportunities), last_page["total"])
                if published is not None:
                    await published

        try:
            result = await fetch_all(
                fetch_page,
                page_size=page_size,
                on_page=on_page,
                max_pages=self.config.rms_max_pages,
            )
        except LOAD_ERRORS as e:
            sync_logger.error("fetch", e)
            return self._handle_load_failure(scope, e)

        replace_collection(
            self.state,
            opportunities,
            scope=scope,
            source="current_rms",
            loaded_at=self.now(),
            truncated=result.truncated,
        )
        sync_logger.fetch_end(
            loaded=len(opportunities),
            skipped=skipped,
            pages=result.pages_requested,
            truncated=result.truncated,
        )
        return LoadOutcome(
            source="current_rms",
            loaded=len(opportunities),
            skipped=skipped,
            truncated=result.truncated,
        )

    def _handle_load_failure(self, scope: DateRange, error: Exception) -> LoadOutcome:
        notice = _load_notice(error)

        if has_live_data(self.state) or not self.config.demo_fallback_enabled:
            # Keep whatever is loaded, only surface the failure
            self.state["notice"] = notice
            self.state["generation"] += 1
            return LoadOutcome(
                source=self.state["source"],
                loaded=len(self.state["opportunities"]),
                fetched=False,
                truncated=self.state["truncated"],
                notice=notice,
            )

        SyncLogger().fallback(error)
        demo = [normalize(raw) for raw in demo_records(self.today())]
        replace_collection(
            self.state,
            demo,
            scope=DateRange(start=date.min, end=None),
            source="demo",
            loaded_at=self.now(),
            notice=f"{notice}. Showing demonstration data.",
        )
        return LoadOutcome(source="demo", loaded=len(demo), notice=self.state["notice"])

    @staticmethod
    def _describe(scope: DateRange) -> str:
        return f"{scope.start.isoformat()}..{scope.end.isoformat() if scope.end else 'open'}"

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def get_view(self, filters: DashboardFilters) -> TieredBuckets:
        """Tiered view of the loaded collection, memoized per generation."""
        today = self.today()
        generation = self.state["generation"]
        cached = self._views.lookup(generation, filters, today)
        if cached is not None:
            return cached

        view = derive_view(self.state["opportunities"], filters, today, tz=self.config.timezone)
        self._views.store(generation, filters, today, view)
        return view

    def preview_view(self, opportunities: list[Opportunity], filters: DashboardFilters) -> TieredBuckets:
        """Unmemoized view over a partial collection (streamed loads)."""
        return derive_view(opportunities, filters, self.today(), tz=self.config.timezone)

    # -------------------------------------------------------------------------
    # Single opportunity
    # -------------------------------------------------------------------------

    async def get_opportunity(self, opportunity_id: int) -> Opportunity:
        """
        Looks the id up in the loaded collection, then upstream.

        Raises:
            OpportunityNotFoundError: If neither knows the id.
        """
        opportunity = find_opportunity(self.state, opportunity_id)
        if opportunity is not None:
            return opportunity

        if self.state["source"] == "demo" or not self.client.configured:
            raise OpportunityNotFoundError(opportunity_id)

        try:
            raw = await self.client.get_opportunity(opportunity_id)
        except UpstreamServiceError as e:
            if e.status_code == 404:
                raise OpportunityNotFoundError(opportunity_id, details=e.upstream_message) from e
            raise
        return normalize(raw)

    @staticmethod
    def form_selection(opportunity: Opportunity) -> dict[str, int]:
        """Stored factor values merged over the default selection."""
        selection = default_selection()
        selection.update(opportunity.risk.factors)
        return selection

    # -------------------------------------------------------------------------
    # Assessments
    # -------------------------------------------------------------------------

    @staticmethod
    def score_preview(selection: Mapping[str, object]) -> RiskAssessment:
        return compute(selection)

    async def save_assessment(
        self,
        opportunity_id: int,
        selection: Mapping[str, object],
        reviewed: bool = False,
        mitigation_plan: MitigationStatus = MitigationStatus.NONE,
        mitigation_notes: str = "",
    ) -> tuple[Opportunity, RiskAssessment]:
        """
        Computes an assessment and writes every risk field upstream.

        The in-memory record is replaced only after the PATCH succeeded.
        Demonstration records are updated locally without an upstream call.

        Raises:
            InvalidSelectionError: Before any network call.
            OpportunityNotFoundError: If the id is unknown.
            UpstreamServiceError: If Current RMS rejects the update.
        """
        assessment = compute(selection)
        opportunity = await self.get_opportunity(opportunity_id)
        payload = build_assessment_payload(
            assessment,
            reviewed=reviewed,
            mitigation_plan=mitigation_plan,
            mitigation_notes=mitigation_notes,
            now=self.now(),
        )

        if self.state["source"] == "demo":
            logger.info(f"[ASSESSMENT] Demo opportunity {opportunity_id} updated locally")
        else:
            await self.client.update_opportunity(opportunity_id, payload)

        updated = apply_assessment_payload(opportunity, payload)
        replace_opportunity(self.state, updated)
        logger.info(f"[ASSESSMENT] Opportunity {opportunity_id} saved | {assessment.to_summary()}")
        return updated, assessment
