"""Flowgraph - flow graph integrity and schema compatibility engine."""

from flowgraph.models.flow import Connection, Flow, NodeInstance, Position
from flowgraph.models.schema import Schema, SchemaState
from flowgraph.registry.builtin import default_registry
from flowgraph.registry.definitions import NodeCategory, NodeTypeDefinition, NodeTypeRegistry
from flowgraph.schema.compatibility import check_compatibility
from flowgraph.schema.inference import infer_schema
from flowgraph.services.graph import GraphService
from flowgraph.services.schema_service import SchemaService
from flowgraph.services.validator import FlowValidator
from flowgraph.store import FlowStore, InMemoryFlowStore

__version__ = "0.1.0"

__all__ = [
    # Flow document
    "Connection",
    "Flow",
    "NodeInstance",
    "Position",
    # Schemas
    "Schema",
    "SchemaState",
    "check_compatibility",
    "infer_schema",
    # Registry
    "NodeCategory",
    "NodeTypeDefinition",
    "NodeTypeRegistry",
    "default_registry",
    # Services
    "FlowStore",
    "FlowValidator",
    "GraphService",
    "InMemoryFlowStore",
    "SchemaService",
]
