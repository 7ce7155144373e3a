"""Data model for a persisted flow document.

A flow is stored and loaded as one document holding its nodes and
connections. Nodes and connections are kept as two flat lists; adjacency
is rebuilt on demand by the algorithms that need it.
"""

from typing import Any

from pydantic import BaseModel, Field


class Position(BaseModel):
    """layout coordinates, opaque to the engine."""

    x: float = 0.0
    y: float = 0.0


class NodeInstance(BaseModel):
    """one configured occurrence of a node type within a flow."""

    id: str
    type: str
    name: str  # unique within the flow
    slug: str | None = None  # template handle, e.g. {{ fetch_user.body.id }}
    position: Position = Field(default_factory=Position)
    parameters: dict[str, Any] = Field(default_factory=dict)


class Connection(BaseModel):
    """a directed edge from a source node's output to a target node's input."""

    id: str
    source_node_id: str
    source_handle: str | None = None
    target_node_id: str
    target_handle: str | None = None

    def endpoints(self) -> tuple[str, str | None, str, str | None]:
        """The tuple that must be unique among a flow's connections."""
        return (
            self.source_node_id,
            self.source_handle,
            self.target_node_id,
            self.target_handle,
        )


class Flow(BaseModel):
    """aggregate root: the full node and connection lists of one flow."""

    flow_id: str
    app_id: str | None = None  # owning app, scopes tool name uniqueness
    name: str
    description: str | None = None
    nodes: list[NodeInstance] = Field(default_factory=list)
    connections: list[Connection] = Field(default_factory=list)
    version: int = 0  # bumped by the store on every successful save
    created_at: str
    updated_at: str

    def find_node(self, node_id: str) -> NodeInstance | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def node_index(self, node_id: str) -> int | None:
        for index, node in enumerate(self.nodes):
            if node.id == node_id:
                return index
        return None


class TransformerInsertion(BaseModel):
    """a transform node spliced into an existing source -> target edge."""

    transformer_node: NodeInstance
    source_connection: Connection
    target_connection: Connection
