from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from landscape_catalog.core.dependencies import get_catalog_service
from landscape_catalog.domain.exceptions import CatalogUnavailableError, QueryValidationError
from landscape_catalog.domain.models import CatalogEntry, RefreshOutcome
from landscape_catalog.services import errors
from landscape_catalog.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)
router = APIRouter()


def entry_payload(entry: CatalogEntry) -> Dict[str, Any]:
    """
    JSON view of an entry, including the derived quality rating and
    maintenance status.
    """
    data = entry.model_dump(mode="json")
    data["quality_rating"] = entry.quality_rating
    data["actively_maintained"] = (
        entry.metadata.is_actively_maintained() if entry.metadata is not None else False
    )
    return data


def _raise_http(operation: str, error: Exception) -> None:
    errors.log_error(operation, error)
    if isinstance(error, QueryValidationError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(error, CatalogUnavailableError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    raise HTTPException(status_code=code, detail=errors.friendly_message(error)) from error


# ---------------------------------------------------------------------------
# 1. GET /search
# ---------------------------------------------------------------------------

@router.get("/search")
def search_entries(
    keyword: Optional[str] = Query(default=None, description="Keyword matched against name, description, category and tags."),
    category: Optional[str] = Query(default=None, description="Exact (case-insensitive) category filter."),
    limit: Optional[str] = Query(default=None, description="Maximum number of results (1-100)."),
    service: CatalogService = Depends(get_catalog_service),
) -> dict:
    try:
        response = service.search(keyword=keyword, category=category, limit=limit)
    except (QueryValidationError, CatalogUnavailableError) as e:
        _raise_http("search", e)

    return {
        "query_scope": response.query_scope,
        "total": response.total,
        "results": [
            {
                "entry": entry_payload(result.entry),
                "relevance_score": result.relevance_score,
                "matched_field": result.matched_field,
                "summary": result.summary,
            }
            for result in response.results
        ],
    }


# ---------------------------------------------------------------------------
# 2. GET /entries/{name}
# ---------------------------------------------------------------------------

@router.get("/entries/{name}")
def get_entry(name: str, service: CatalogService = Depends(get_catalog_service)) -> dict:
    try:
        entry = service.get_entry(name)
    except QueryValidationError as e:
        _raise_http("get_entry", e)

    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Project '{name}' not found in the landscape catalog",
        )
    return entry_payload(entry)


# ---------------------------------------------------------------------------
# 3. GET /categories
# ---------------------------------------------------------------------------

@router.get("/categories")
def list_categories(service: CatalogService = Depends(get_catalog_service)) -> dict:
    categories = service.list_categories()
    return {
        "total": sum(categories.values()),
        "categories": categories,
    }


# ---------------------------------------------------------------------------
# 4. POST /refresh
# ---------------------------------------------------------------------------

@router.post("/refresh")
async def refresh(
    force: bool = Query(default=False, description="Re-parse even if the source is unchanged."),
    service: CatalogService = Depends(get_catalog_service),
) -> JSONResponse:
    """
    Run a refresh on the worker pool without blocking the event loop.
    """
    try:
        outcome = await asyncio.wrap_future(service.submit_refresh(force=force))
    except Exception as e:
        _raise_http("refresh", e)

    report = service.report(outcome)
    code = (
        status.HTTP_502_BAD_GATEWAY
        if outcome is RefreshOutcome.HARD_FAILURE
        else status.HTTP_200_OK
    )
    return JSONResponse(status_code=code, content=report.model_dump(mode="json"))


# ---------------------------------------------------------------------------
# 5. GET /statistics
# ---------------------------------------------------------------------------

@router.get("/statistics")
async def statistics(service: CatalogService = Depends(get_catalog_service)) -> dict:
    return service.statistics()
