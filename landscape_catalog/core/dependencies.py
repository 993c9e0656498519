from typing import Optional

from fastapi import Request

from landscape_catalog.core.config import CatalogConfig
from landscape_catalog.data.refresh_controller import DocumentFetcher
from landscape_catalog.services.catalog_service import CatalogService
from landscape_catalog.services.landscape_client import LandscapeClient


def build_landscape_client(config: CatalogConfig) -> LandscapeClient:
    return LandscapeClient(
        source_url=config.source_url,
        timeout=config.fetch_timeout_seconds,
        user_agent=config.user_agent,
    )


def build_catalog_service(
    config: CatalogConfig,
    fetcher: Optional[DocumentFetcher] = None,
) -> CatalogService:
    return CatalogService.create(
        fetcher or build_landscape_client(config),
        freshness_window_seconds=config.freshness_window_seconds,
        refresh_workers=config.refresh_workers,
    )


def get_catalog_service(request: Request) -> CatalogService:
    return request.app.state.catalog_service
