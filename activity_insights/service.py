"""
Insight service shared by the workspace view and the admin view.

Fetches one bounded page from an event source and runs the engine over it.
The admin view is the same pipeline with an optional workspace_id filter, so
both views always apply identical thresholds.

If the fetch fails, SourceFetchError propagates and the engine never runs;
partial data is never summarized as if it were complete.
"""

import logging
from datetime import datetime
from typing import Mapping, Optional

from activity_insights.anomaly.engine import InsightEngine
from activity_insights.anomaly.schema import InsightSummary, TopSummary
from activity_insights.data.schema import ActivityFilter, EventPage
from activity_insights.data.source import BaseEventSource
from activity_insights.export.summary import render_raw_json, render_summary_csv_from

logger = logging.getLogger(__name__)


class InsightService:
    """
    Fetch-then-compute facade over an event source and an InsightEngine.

    Example:
        service = InsightService(HttpEventSource.for_admin())
        summary = service.admin_insights(workspace_id=7)
    """

    def __init__(self, source: BaseEventSource, engine: Optional[InsightEngine] = None):
        self.source = source
        self.engine = engine or InsightEngine()

    def fetch_snapshot(
        self,
        filters: Optional[ActivityFilter] = None,
        page_size: Optional[int] = None,
    ) -> EventPage:
        """
        Fetch the single large page the engine works on.

        Raises:
            SourceFetchError: If the source cannot be read
        """
        page_size = page_size or self.engine.settings.page_size
        page = self.source.fetch(filters, page=1, page_size=page_size)
        if page.total > len(page.items):
            logger.debug(
                "Snapshot truncated to %d of %d matching events", len(page.items), page.total
            )
        return page

    def workspace_insights(
        self,
        filters: Optional[ActivityFilter] = None,
        now: Optional[datetime] = None,
    ) -> InsightSummary:
        """Insights for the caller's workspace."""
        page = self.fetch_snapshot(filters)
        return self.engine.run(page.items, now=now)

    def admin_insights(
        self,
        filters: Optional[ActivityFilter] = None,
        workspace_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> InsightSummary:
        """Cross-workspace insights, optionally narrowed to one workspace."""
        filters = filters or ActivityFilter()
        if workspace_id is not None:
            filters = filters.model_copy(update={"workspace_id": workspace_id})
        page = self.fetch_snapshot(filters)
        return self.engine.run(page.items, now=now)

    def top_summary(
        self,
        filters: Optional[ActivityFilter] = None,
        now: Optional[datetime] = None,
    ) -> TopSummary:
        """Compact top types and actors for the dashboard widget."""
        page = self.fetch_snapshot(filters, page_size=self.engine.settings.mini_page_size)
        return self.engine.top_summary(page.items, now=now)

    def summary_csv(
        self,
        filters: Optional[ActivityFilter] = None,
        now: Optional[datetime] = None,
        label_map: Optional[Mapping[str, str]] = None,
    ) -> bytes:
        """Summary CSV for the current filter; empty summary yields a header-only CSV."""
        summary = self.workspace_insights(filters, now=now)
        return render_summary_csv_from(summary, label_map)

    def raw_json(self, filters: Optional[ActivityFilter] = None) -> bytes:
        """Raw JSON export of the filtered events (one export-sized page)."""
        page = self.fetch_snapshot(filters, page_size=self.engine.settings.export_page_size)
        return render_raw_json(page.items)
