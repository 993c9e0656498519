"""
Refresh orchestration: fetch -> fingerprint -> parse -> publish.

Each call is a single attempt. The controller never retries or schedules;
callers decide the cadence and can use the retry hint recorded on failure.
"""
from __future__ import annotations

import hashlib
import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, List, Protocol

from landscape_catalog.data.landscape_parser import parse_landscape_document
from landscape_catalog.data.snapshot_store import SnapshotStore
from landscape_catalog.domain.models import CatalogEntry, RefreshOutcome
from landscape_catalog.services import errors

logger = logging.getLogger(__name__)

DocumentParser = Callable[[str], List[CatalogEntry]]


class DocumentFetcher(Protocol):
    def fetch_document(self) -> str:
        ...


def compute_fingerprint(raw_document: str) -> str:
    """Stable hash of the raw document text."""
    return hashlib.sha256(raw_document.encode("utf-8")).hexdigest()


class RefreshController:
    """
    Runs refresh attempts against one ``SnapshotStore``.

    ``refresh`` never raises: every attempt ends as published, unchanged,
    soft failure (nothing usable, nothing recorded) or hard failure (error
    recorded, previous entries kept).
    """

    def __init__(
        self,
        store: SnapshotStore,
        fetcher: DocumentFetcher,
        parser: DocumentParser = parse_landscape_document,
        max_workers: int = 2,
    ):
        self.store = store
        self.fetcher = fetcher
        self.parser = parser
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="landscape-refresh",
        )

    def refresh_outcome(self) -> RefreshOutcome:
        """Run one refresh attempt and report how it ended."""
        try:
            logger.info("Starting landscape data refresh...")
            start_time = time.monotonic()

            raw_document = self.fetcher.fetch_document()
            if raw_document is None or not raw_document.strip():
                logger.warning("Received empty data from the landscape source")
                return RefreshOutcome.SOFT_FAILURE

            fingerprint = compute_fingerprint(raw_document)
            if fingerprint == self.store.fingerprint:
                logger.debug("Landscape data unchanged, skipping refresh")
                return RefreshOutcome.UNCHANGED

            entries = self.parser(raw_document)
            if not entries:
                logger.warning("No entries found in landscape data")
                return RefreshOutcome.SOFT_FAILURE

            self.store.publish(entries, fingerprint)

            duration_ms = (time.monotonic() - start_time) * 1000
            logger.info(
                f"Landscape data refresh completed in {duration_ms:.0f}ms: {len(entries)} entries processed"
            )
            return RefreshOutcome.PUBLISHED

        except Exception as e:
            logger.error(f"Failed to refresh landscape data: {e}", exc_info=True)
            self.store.record_failure(
                errors.friendly_message(e),
                severity=errors.severity(e),
                retry_delay_seconds=errors.retry_delay_seconds(e),
                recoverable=errors.is_recoverable(e),
            )
            return RefreshOutcome.HARD_FAILURE

    def refresh(self) -> bool:
        """True iff a new snapshot was published."""
        return self.refresh_outcome() is RefreshOutcome.PUBLISHED

    def force_refresh_outcome(self) -> RefreshOutcome:
        self.store.invalidate_fingerprint()
        return self.refresh_outcome()

    def force_refresh(self) -> bool:
        """Refresh even if the source document is unchanged."""
        return self.force_refresh_outcome() is RefreshOutcome.PUBLISHED

    def submit(self, force: bool = False) -> "Future[RefreshOutcome]":
        """Run one (optionally forced) attempt on the worker pool."""
        task = self.force_refresh_outcome if force else self.refresh_outcome
        return self._executor.submit(task)

    def refresh_async(self, force: bool = False) -> "Future[bool]":
        """
        Run ``refresh`` (or ``force_refresh``) on the worker pool.

        The future resolves to the same boolean the blocking call returns.
        Failures inside the attempt are recorded on the store, not raised
        through the future.
        """
        task = self.force_refresh if force else self.refresh
        return self._executor.submit(task)

    def close(self) -> None:
        self._executor.shutdown(wait=True)
