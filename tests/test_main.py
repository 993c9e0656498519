from __future__ import annotations

import httpx

from landscape_catalog.domain.models import RefreshOutcome
from landscape_catalog.main import next_refresh_delay


def test_regular_interval_after_success(make_service, make_fetcher, sample_document):
    service = make_service(make_fetcher(sample_document))
    outcome = service.refresh().outcome

    assert next_refresh_delay(service, outcome, 3600) == 3600


def test_retry_hint_after_recoverable_failure(make_service, make_fetcher):
    service = make_service(make_fetcher(httpx.ConnectError("down")))
    outcome = service.refresh().outcome
    assert outcome is RefreshOutcome.HARD_FAILURE

    first = next_refresh_delay(service, outcome, 3600)
    second = next_refresh_delay(service, outcome, 3600, first)
    capped = next_refresh_delay(service, outcome, 10, 8)

    assert first == 3.0
    assert second == 6.0
    assert capped == 10


def test_unrecoverable_failure_waits_full_interval(make_service, make_fetcher):
    service = make_service(make_fetcher("{broken"))
    outcome = service.refresh().outcome

    assert next_refresh_delay(service, outcome, 3600) == 3600
