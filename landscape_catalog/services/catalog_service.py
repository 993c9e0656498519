"""
Query surface over the cached landscape catalog.

Every query first attempts a refresh (read-through), then reads whatever
snapshot is current. A failed refresh never fails the query: the last good
snapshot keeps serving until a refresh succeeds.
"""
from __future__ import annotations

import logging
from collections import Counter
from concurrent.futures import Future
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field

from landscape_catalog.data.refresh_controller import DocumentFetcher, RefreshController
from landscape_catalog.data.snapshot_store import SnapshotStore
from landscape_catalog.domain.exceptions import CatalogUnavailableError, QueryValidationError
from landscape_catalog.domain.models import (
    CatalogEntry,
    RefreshOutcome,
    ScoredResult,
    SearchQuery,
)
from landscape_catalog.domain.search import search

logger = logging.getLogger(__name__)


class SearchResponse(BaseModel):
    query_scope: str
    total: int
    results: List[ScoredResult] = Field(default_factory=list)


class RefreshReport(BaseModel):
    """Outcome of an explicit refresh together with the resulting statistics."""

    success: bool
    outcome: RefreshOutcome
    message: str
    statistics: Dict[str, Any] = Field(default_factory=dict)


_OUTCOME_MESSAGES = {
    RefreshOutcome.PUBLISHED: "Landscape data refreshed successfully.",
    RefreshOutcome.UNCHANGED: "Landscape data is unchanged since the last refresh.",
    RefreshOutcome.SOFT_FAILURE: "The landscape source returned no usable data; cached entries were kept.",
}


class CatalogService:
    """
    Owns one snapshot store and the controller that refreshes it.
    """

    def __init__(self, store: SnapshotStore, controller: RefreshController):
        self.store = store
        self.controller = controller

    @classmethod
    def create(
        cls,
        fetcher: DocumentFetcher,
        freshness_window_seconds: Optional[float] = None,
        refresh_workers: int = 2,
    ) -> "CatalogService":
        store = (
            SnapshotStore(freshness_window_seconds)
            if freshness_window_seconds is not None
            else SnapshotStore()
        )
        controller = RefreshController(store, fetcher, max_workers=refresh_workers)
        return cls(store, controller)

    def _current_entries(self) -> Tuple[CatalogEntry, ...]:
        self.controller.refresh()
        return self.store.current_entries()

    # ========================================================================
    # Queries
    # ========================================================================

    def search(
        self,
        keyword: Optional[str] = None,
        category: Optional[str] = None,
        limit: Union[int, str, None] = None,
    ) -> SearchResponse:
        """
        Rank catalog entries by keyword and/or category.

        Raises:
            QueryValidationError: If the keyword is too short or the limit is not an integer.
            CatalogUnavailableError: If no entries have ever been loaded.
        """
        query = SearchQuery.build(keyword=keyword, category=category, limit=limit)

        entries = self._current_entries()
        if not entries:
            raise CatalogUnavailableError("No catalog entries available. Please try again later.")

        results = search(entries, query)
        logger.debug(f"Search for {query.scope} returned {len(results)} results")
        return SearchResponse(query_scope=query.scope, total=len(results), results=results)

    def get_entry(self, name: str) -> Optional[CatalogEntry]:
        """
        Find an entry by exact, case-insensitive name. None when not found.
        """
        if name is None or not name.strip():
            raise QueryValidationError("Project name is required")

        wanted = name.strip().lower()
        for entry in self._current_entries():
            if entry.name.lower() == wanted:
                return entry
        return None

    def list_categories(self) -> Dict[str, int]:
        """Category -> entry count, largest categories first."""
        counts = Counter(entry.category for entry in self._current_entries())
        ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return dict(ordered)

    def statistics(self) -> Dict[str, Any]:
        return self.store.statistics()

    # ========================================================================
    # Refresh
    # ========================================================================

    def report(self, outcome: RefreshOutcome) -> RefreshReport:
        if outcome is RefreshOutcome.HARD_FAILURE:
            error = self.store.last_error
            detail = error.message if error is not None else "Unknown error"
            message = f"Failed to refresh landscape data: {detail}"
        else:
            message = _OUTCOME_MESSAGES[outcome]
        return RefreshReport(
            success=outcome is RefreshOutcome.PUBLISHED,
            outcome=outcome,
            message=message,
            statistics=self.store.statistics(),
        )

    def refresh(self, force: bool = False) -> RefreshReport:
        if force:
            outcome = self.controller.force_refresh_outcome()
        else:
            outcome = self.controller.refresh_outcome()
        return self.report(outcome)

    def submit_refresh(self, force: bool = False) -> "Future[RefreshOutcome]":
        return self.controller.submit(force=force)

    def close(self) -> None:
        self.controller.close()
