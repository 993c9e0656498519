"""Shared pytest fixtures."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

from landscape_catalog.data.refresh_controller import RefreshController
from landscape_catalog.data.snapshot_store import SnapshotStore
from landscape_catalog.services.catalog_service import CatalogService

FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


class FakeFetcher:
    """Stands in for the HTTP transport. Returns queued documents or raises queued errors."""

    def __init__(self, *responses: Any):
        self.responses: List[Any] = list(responses)
        self.calls = 0

    def push(self, response: Any) -> None:
        self.responses.append(response)

    def fetch_document(self) -> str:
        self.calls += 1
        # The last response repeats once the queue is down to one.
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, BaseException):
            raise response
        return response


class MutableClock:
    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def landscape_item(**overrides: Any) -> Dict[str, Any]:
    item: Dict[str, Any] = {
        "id": "kubernetes",
        "name": "Kubernetes",
        "category": "Orchestration & Management",
        "subcategory": "Scheduling & Orchestration",
        "description": "Production-grade container scheduling and management.",
        "homepage_url": "https://kubernetes.io/",
        "repo_url": "https://github.com/kubernetes/kubernetes",
        "maturity": "graduated",
        "oss": True,
        "license": "Apache-2.0",
        "github_data": {
            "stars": 105000,
            "forks": 39000,
            "contributors": 3500,
            "last_commit_at": "2025-05-30T10:00:00Z",
        },
    }
    item.update(overrides)
    return {k: v for k, v in item.items() if v is not None}


def landscape_document(*items: Dict[str, Any], **root: Any) -> str:
    body: Dict[str, Any] = {"items": list(items)}
    body.update(root)
    return json.dumps(body)


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def make_fetcher():
    return FakeFetcher


@pytest.fixture
def make_item():
    return landscape_item


@pytest.fixture
def make_document():
    return landscape_document


@pytest.fixture
def sample_document() -> str:
    return landscape_document(
        landscape_item(),
        landscape_item(
            id="linkerd",
            name="Linkerd",
            category="Service Mesh",
            description="Ultralight service mesh for Kubernetes.",
            maturity="graduated",
            github_data={"stars": 10500},
        ),
        landscape_item(
            id="rook",
            name="Rook",
            category="Cloud Native Storage",
            description="Storage orchestration for Kubernetes.",
            maturity="graduated",
            oss=False,
            github_data={"stars": 12000},
        ),
        landscape_item(
            id="tiny-tool",
            name="Tiny Tool",
            category="Observability",
            description="A small tracing helper.",
            maturity="sandbox",
            oss=False,
            github_data={"stars": 12},
        ),
    )


@pytest.fixture
def store(clock: MutableClock) -> SnapshotStore:
    return SnapshotStore(clock=clock)


@pytest.fixture
def make_controller(store: SnapshotStore):
    controllers: List[RefreshController] = []

    def _make(fetcher: FakeFetcher, parser: Optional[Any] = None) -> RefreshController:
        if parser is None:
            controller = RefreshController(store, fetcher)
        else:
            controller = RefreshController(store, fetcher, parser=parser)
        controllers.append(controller)
        return controller

    yield _make
    for controller in controllers:
        controller.close()


@pytest.fixture
def make_service(store: SnapshotStore):
    services: List[CatalogService] = []

    def _make(fetcher: FakeFetcher) -> CatalogService:
        service = CatalogService(store, RefreshController(store, fetcher))
        services.append(service)
        return service

    yield _make
    for service in services:
        service.close()
