"""
Holds the current catalog snapshot behind an atomically swapped reference.

Readers take the current ``Snapshot`` object and work with it; they never
lock. Writers build a complete replacement and swap the reference under a
lock that only serializes writers, and is never held while fetching.
"""
from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from landscape_catalog.domain import constants
from landscape_catalog.domain.models import (
    CatalogEntry,
    ErrorRecord,
    ErrorSeverity,
    Snapshot,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SnapshotStore:
    """Owns the one snapshot that is current at any instant."""

    def __init__(
        self,
        freshness_window_seconds: float = constants.FRESHNESS_WINDOW_SECONDS,
        clock: Optional[Clock] = None,
    ):
        self.freshness_window = timedelta(seconds=freshness_window_seconds)
        self._clock = clock or utc_now
        self._snapshot = Snapshot()
        self._write_lock = threading.Lock()

    # ========================================================================
    # Reads
    # ========================================================================

    def current(self) -> Snapshot:
        return self._snapshot

    def current_entries(self) -> Tuple[CatalogEntry, ...]:
        return self._snapshot.entries

    @property
    def fingerprint(self) -> Optional[str]:
        return self._snapshot.fingerprint

    @property
    def last_refresh(self) -> Optional[datetime]:
        return self._snapshot.last_refresh

    @property
    def last_error(self) -> Optional[ErrorRecord]:
        return self._snapshot.last_error

    def is_fresh(self) -> bool:
        """True if entries were published within the freshness window."""
        last = self._snapshot.last_refresh
        return last is not None and last > self._clock() - self.freshness_window

    def statistics(self) -> Dict[str, Any]:
        """Flat key/value view of the snapshot for observability."""
        snapshot = self._snapshot
        last = snapshot.last_refresh
        stats: Dict[str, Any] = {
            "lastRefresh": last.isoformat() if last else None,
            "entryCount": len(snapshot.entries),
            "dataFresh": last is not None and last > self._clock() - self.freshness_window,
            "hasError": snapshot.last_error is not None,
        }
        if snapshot.last_error is not None:
            error = snapshot.last_error
            stats["lastError"] = error.message
            stats["lastErrorTime"] = error.occurred_at.isoformat()
            stats["errorSeverity"] = error.severity.value
            stats["retryDelaySeconds"] = error.retry_delay_seconds
        return stats

    # ========================================================================
    # Writes
    # ========================================================================

    def publish(self, entries: Iterable[CatalogEntry], fingerprint: Optional[str]) -> Snapshot:
        """
        Replace the entries and fingerprint, stamp the refresh time and clear
        any recorded error.
        """
        snapshot = Snapshot(
            entries=tuple(entries),
            fingerprint=fingerprint,
            last_refresh=self._clock(),
            last_error=None,
        )
        with self._write_lock:
            self._snapshot = snapshot
        logger.debug(f"Published snapshot with {len(snapshot.entries)} entries")
        return snapshot

    def record_failure(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        retry_delay_seconds: float = 1.0,
        recoverable: bool = False,
    ) -> Snapshot:
        """
        Stamp error state. Entries, fingerprint and refresh time are kept.
        """
        error = ErrorRecord(
            message=message,
            occurred_at=self._clock(),
            severity=severity,
            retry_delay_seconds=retry_delay_seconds,
            recoverable=recoverable,
        )
        with self._write_lock:
            self._snapshot = self._snapshot.model_copy(update={"last_error": error})
            return self._snapshot

    def invalidate_fingerprint(self) -> None:
        """Forget the fingerprint so the next refresh cannot short-circuit."""
        with self._write_lock:
            self._snapshot = self._snapshot.model_copy(update={"fingerprint": None})
