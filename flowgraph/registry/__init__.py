"""Node type registry."""

from flowgraph.registry.builtin import BUILTIN_NODE_TYPES, default_registry
from flowgraph.registry.definitions import (
    API_CALL_NODE_TYPE,
    CATEGORIES,
    CODE_TRANSFORM_NODE_TYPE,
    LINK_NODE_TYPE,
    REGISTRY_COMPONENT_NODE_TYPE,
    TRIGGER_NODE_TYPE,
    CategoryInfo,
    NodeCategory,
    NodeTypeDefinition,
    NodeTypeRegistry,
)

__all__ = [
    "BUILTIN_NODE_TYPES",
    "default_registry",
    "API_CALL_NODE_TYPE",
    "CATEGORIES",
    "CODE_TRANSFORM_NODE_TYPE",
    "LINK_NODE_TYPE",
    "REGISTRY_COMPONENT_NODE_TYPE",
    "TRIGGER_NODE_TYPE",
    "CategoryInfo",
    "NodeCategory",
    "NodeTypeDefinition",
    "NodeTypeRegistry",
]
