"""Shared fixtures for flowgraph tests."""

import pytest

from flowgraph.models.flow import Flow
from flowgraph.registry.builtin import default_registry
from flowgraph.services.graph import GraphService
from flowgraph.store import InMemoryFlowStore
from flowgraph.utils.identifiers import utc_timestamp


def make_flow(flow_id: str = "flow-1", app_id: str | None = "app-1", **kwargs) -> Flow:
    now = utc_timestamp()
    return Flow(
        flow_id=flow_id,
        app_id=app_id,
        name=kwargs.pop("name", "Test Flow"),
        created_at=now,
        updated_at=now,
        **kwargs,
    )


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def store():
    return InMemoryFlowStore([make_flow()])


@pytest.fixture
def graph(store, registry):
    return GraphService(store, registry)


@pytest.fixture
def flow_factory():
    """build unsaved Flow documents."""
    return make_flow
