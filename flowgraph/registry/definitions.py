"""Node type definitions and the read-only registry that maps names to them."""

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from flowgraph.errors import NodeTypeNotFoundError
from flowgraph.models.schema import Schema


class NodeCategory(str, Enum):
    """Governs topological rules, e.g. triggers cannot be connection targets."""

    trigger = "trigger"
    interface = "interface"
    action = "action"
    transform = "transform"
    return_ = "return"


# reserved type names with behaviour of their own
TRIGGER_NODE_TYPE = "UserIntent"
LINK_NODE_TYPE = "Link"
API_CALL_NODE_TYPE = "ApiCall"
REGISTRY_COMPONENT_NODE_TYPE = "RegistryComponent"
CODE_TRANSFORM_NODE_TYPE = "CodeTransform"

SchemaFunction = Callable[[dict[str, Any]], Schema | None]


@dataclass(frozen=True)
class NodeTypeDefinition:
    """A registry entry.

    Schema information is either static (``input_schema``/``output_schema``)
    or computed from instance parameters (``get_input_schema``/
    ``get_output_schema``), which takes precedence when present.
    """

    name: str
    display_name: str
    category: NodeCategory
    description: str = ""
    input_schema: Schema | None = None
    output_schema: Schema | None = None
    get_input_schema: SchemaFunction | None = None
    get_output_schema: SchemaFunction | None = None
    default_parameters: Mapping[str, Any] = field(default_factory=dict)

    @property
    def has_dynamic_input(self) -> bool:
        return self.get_input_schema is not None

    @property
    def has_dynamic_output(self) -> bool:
        return self.get_output_schema is not None


@dataclass(frozen=True)
class CategoryInfo:
    """Display grouping for the node library."""

    id: NodeCategory
    display_name: str
    order: int


CATEGORIES: tuple[CategoryInfo, ...] = (
    CategoryInfo(NodeCategory.trigger, "Triggers", 1),
    CategoryInfo(NodeCategory.interface, "UI Components", 2),
    CategoryInfo(NodeCategory.action, "Actions", 3),
    CategoryInfo(NodeCategory.transform, "Transform", 4),
    CategoryInfo(NodeCategory.return_, "Return Values", 5),
)


class NodeTypeRegistry:
    """Immutable lookup from node type name to its definition.

    Built once at startup and shared; nothing in flowgraph mutates it.
    """

    def __init__(self, definitions: Iterable[NodeTypeDefinition]) -> None:
        by_name: dict[str, NodeTypeDefinition] = {}
        for definition in definitions:
            if definition.name in by_name:
                raise ValueError(f"duplicate node type: {definition.name}")
            by_name[definition.name] = definition
        self._by_name: Mapping[str, NodeTypeDefinition] = MappingProxyType(by_name)

    def get(self, node_type: str) -> NodeTypeDefinition | None:
        return self._by_name.get(node_type)

    def require(self, node_type: str) -> NodeTypeDefinition:
        """Get a definition or raise NodeTypeNotFoundError."""
        definition = self._by_name.get(node_type)
        if definition is None:
            raise NodeTypeNotFoundError(node_type)
        return definition

    def category_of(self, node_type: str) -> NodeCategory | None:
        definition = self._by_name.get(node_type)
        return definition.category if definition else None

    def by_category(self, category: NodeCategory) -> list[NodeTypeDefinition]:
        return [d for d in self._by_name.values() if d.category == category]

    @property
    def categories(self) -> tuple[CategoryInfo, ...]:
        return CATEGORIES

    def __contains__(self, node_type: object) -> bool:
        return node_type in self._by_name

    def __iter__(self) -> Iterator[NodeTypeDefinition]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)

    def __repr__(self) -> str:
        return f"NodeTypeRegistry(types={sorted(self._by_name)!r})"
