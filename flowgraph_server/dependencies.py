"""Service providers for route handlers.

Each provider is a FastAPI dependency so tests can swap the store or the
API probe through ``app.dependency_overrides``.
"""

import os
from functools import lru_cache

from fastapi import Depends

from flowgraph.registry.builtin import default_registry
from flowgraph.registry.definitions import NodeTypeRegistry
from flowgraph.services.api_probe import DEFAULT_TIMEOUT_MS, ApiCallProbe
from flowgraph.services.graph import GraphService
from flowgraph.services.schema_service import SchemaService
from flowgraph.store import FlowStore
from flowgraph_server.flow_db import FLOW_DB_PATH, SqliteFlowStore

API_TEST_DEFAULT_TIMEOUT_MS = int(
    os.getenv("API_TEST_DEFAULT_TIMEOUT_MS", str(DEFAULT_TIMEOUT_MS))
)


@lru_cache(maxsize=1)
def get_store() -> FlowStore:
    return SqliteFlowStore(FLOW_DB_PATH)


def get_registry() -> NodeTypeRegistry:
    return default_registry()


def get_probe() -> ApiCallProbe:
    return ApiCallProbe(default_timeout_ms=API_TEST_DEFAULT_TIMEOUT_MS)


def get_graph_service(
    store: FlowStore = Depends(get_store),
    registry: NodeTypeRegistry = Depends(get_registry),
) -> GraphService:
    return GraphService(store, registry)


def get_schema_service(
    store: FlowStore = Depends(get_store),
    registry: NodeTypeRegistry = Depends(get_registry),
    probe: ApiCallProbe = Depends(get_probe),
) -> SchemaService:
    return SchemaService(store, registry, probe)
