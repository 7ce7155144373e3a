"""Flowgraph services: graph mutation, schema resolution and validation."""

from flowgraph.services.api_probe import ApiCallProbe
from flowgraph.services.graph import GraphService, StoreToolNamer, creates_cycle
from flowgraph.services.resolver import SchemaResolver
from flowgraph.services.schema_service import SchemaService
from flowgraph.services.suggestions import suggest_transformers
from flowgraph.services.validator import FlowValidator

__all__ = [
    "ApiCallProbe",
    "FlowValidator",
    "GraphService",
    "SchemaResolver",
    "SchemaService",
    "StoreToolNamer",
    "creates_cycle",
    "suggest_transformers",
]
