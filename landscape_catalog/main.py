import asyncio
import logging
from typing import Optional

from fastapi import FastAPI

from landscape_catalog import __version__
from landscape_catalog.api.catalog import router as catalog_router
from landscape_catalog.core.config import CatalogConfig, load_config
from landscape_catalog.core.dependencies import build_catalog_service
from landscape_catalog.domain.models import RefreshOutcome
from landscape_catalog.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def next_refresh_delay(
    service: CatalogService,
    outcome: Optional[RefreshOutcome],
    interval_seconds: float,
    previous_delay: Optional[float] = None,
) -> float:
    """
    Seconds until the next scheduled refresh.

    After a recoverable hard failure the recorded retry hint is used, doubling
    on consecutive failures and never exceeding the regular interval.
    """
    error = service.store.last_error
    if outcome is RefreshOutcome.HARD_FAILURE and error is not None and error.recoverable:
        delay = error.retry_delay_seconds
        if previous_delay is not None and previous_delay < interval_seconds:
            delay = max(delay, previous_delay * 2)
        return min(delay, interval_seconds)
    return interval_seconds


async def periodic_refresh_loop(service: CatalogService, interval_seconds: float) -> None:
    """
    Background task that refreshes the snapshot every ``interval_seconds``.
    The first refresh runs immediately so the catalog is warm after startup.
    """
    delay: Optional[float] = None
    while True:
        outcome: Optional[RefreshOutcome] = None
        try:
            outcome = await asyncio.wrap_future(service.submit_refresh())
            logger.debug(f"Scheduled refresh finished: {outcome.value}")
        except Exception as e:
            logger.error(f"Error in periodic refresh loop: {e}")
        delay = next_refresh_delay(service, outcome, interval_seconds, delay)
        await asyncio.sleep(delay)


def create_app(
    config: Optional[CatalogConfig] = None,
    service: Optional[CatalogService] = None,
) -> FastAPI:
    """
    Build the FastAPI application around one catalog service instance.
    """
    config = config or load_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )

    app = FastAPI(
        title="Landscape Catalog",
        version=__version__,
        description="Cached, ranked search over the cloud-native landscape catalog.",
    )
    app.state.catalog_service = service or build_catalog_service(config)
    app.state.refresh_task = None

    @app.on_event("startup")
    async def startup_event() -> None:
        if config.refresh_interval_seconds > 0:
            app.state.refresh_task = asyncio.create_task(
                periodic_refresh_loop(app.state.catalog_service, config.refresh_interval_seconds)
            )
            logger.info(f"Started background refresh every {config.refresh_interval_seconds}s")

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        task = app.state.refresh_task
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        app.state.catalog_service.close()

    @app.get("/health")
    async def health() -> dict:
        """
        Lightweight health check endpoint.
        """
        return {"status": "ok"}

    app.include_router(catalog_router, prefix="/catalog", tags=["catalog"])
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "landscape_catalog.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
