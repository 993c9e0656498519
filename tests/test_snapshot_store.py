from __future__ import annotations

import threading
from datetime import timedelta

from landscape_catalog.data.snapshot_store import SnapshotStore
from landscape_catalog.domain.models import CatalogEntry, ErrorSeverity


def entries(*names: str):
    return [CatalogEntry(id=n.lower(), name=n, category="Testing") for n in names]


def test_store_starts_empty(store):
    snapshot = store.current()
    assert snapshot.entries == ()
    assert snapshot.fingerprint is None
    assert snapshot.last_refresh is None
    assert snapshot.last_error is None
    assert store.is_fresh() is False


def test_publish_replaces_entries_and_clears_error(store, clock):
    store.record_failure("boom")
    store.publish(entries("A", "B"), "fp-1")

    assert [e.name for e in store.current_entries()] == ["A", "B"]
    assert store.fingerprint == "fp-1"
    assert store.last_refresh == clock.now
    assert store.last_error is None


def test_record_failure_keeps_entries(store, clock):
    store.publish(entries("A"), "fp-1")
    before = store.current_entries()
    published_at = store.last_refresh

    clock.now = clock.now + timedelta(minutes=5)
    store.record_failure("connection refused", severity=ErrorSeverity.MEDIUM, retry_delay_seconds=3.0, recoverable=True)

    assert store.current_entries() == before
    assert store.fingerprint == "fp-1"
    assert store.last_refresh == published_at
    assert store.last_error.message == "connection refused"
    assert store.last_error.occurred_at == clock.now
    assert store.last_error.retry_delay_seconds == 3.0
    assert store.last_error.recoverable is True


def test_snapshots_are_replaced_not_mutated(store):
    store.publish(entries("A"), "fp-1")
    old = store.current()
    store.publish(entries("B"), "fp-2")

    assert [e.name for e in old.entries] == ["A"]
    assert [e.name for e in store.current().entries] == ["B"]


def test_freshness_window(clock):
    store = SnapshotStore(freshness_window_seconds=3600, clock=clock)
    store.publish(entries("A"), "fp")

    clock.now = clock.now + timedelta(minutes=59)
    assert store.is_fresh() is True

    clock.now = clock.now + timedelta(minutes=2)
    assert store.is_fresh() is False


def test_invalidate_fingerprint(store):
    store.publish(entries("A"), "fp-1")
    store.invalidate_fingerprint()
    assert store.fingerprint is None
    assert len(store.current_entries()) == 1


def test_statistics_without_error(store, clock):
    store.publish(entries("A", "B", "C"), "fp")
    stats = store.statistics()

    assert stats == {
        "lastRefresh": clock.now.isoformat(),
        "entryCount": 3,
        "dataFresh": True,
        "hasError": False,
    }


def test_statistics_with_error(store, clock):
    store.record_failure("rate limited", severity=ErrorSeverity.MEDIUM, retry_delay_seconds=5.0)
    stats = store.statistics()

    assert stats["lastRefresh"] is None
    assert stats["entryCount"] == 0
    assert stats["dataFresh"] is False
    assert stats["hasError"] is True
    assert stats["lastError"] == "rate limited"
    assert stats["lastErrorTime"] == clock.now.isoformat()
    assert stats["errorSeverity"] == "medium"
    assert stats["retryDelaySeconds"] == 5.0


def test_readers_never_see_a_torn_snapshot(store):
    batches = [entries(*(f"{tag}{i}" for i in range(50))) for tag in ("a", "b")]
    store.publish(batches[0], "fp-a")
    stop = threading.Event()
    torn = []

    def writer():
        i = 0
        while not stop.is_set():
            store.publish(batches[i % 2], f"fp-{i % 2}")
            i += 1

    def reader():
        for _ in range(2000):
            names = {e.name[0] for e in store.current_entries()}
            if len(names) != 1:
                torn.append(names)

    thread = threading.Thread(target=writer)
    thread.start()
    try:
        reader()
    finally:
        stop.set()
        thread.join()

    assert torn == []
