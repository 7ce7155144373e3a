"""Node and connection CRUD against a flow document.

Every operation loads the whole flow, mutates it in memory and saves it
back in a single write. Checks run before anything is changed, so a
rejected operation never persists a partial state.
"""

import copy
import logging
from collections import defaultdict
from typing import Any, Protocol

from flowgraph.errors import (
    ConnectionNotFoundError,
    CycleDetectedError,
    DuplicateConnectionError,
    FlowNotFoundError,
    InvalidTargetError,
    LinkConstraintError,
    NameConflictError,
    NodeNotFoundError,
    SelfConnectionError,
    WrongNodeTypeError,
)
from flowgraph.models.flow import (
    Connection,
    Flow,
    NodeInstance,
    Position,
    TransformerInsertion,
)
from flowgraph.registry.definitions import (
    API_CALL_NODE_TYPE,
    CODE_TRANSFORM_NODE_TYPE,
    LINK_NODE_TYPE,
    TRIGGER_NODE_TYPE,
    NodeCategory,
    NodeTypeRegistry,
)
from flowgraph.store import FlowStore
from flowgraph.utils.identifiers import (
    generate_connection_id,
    generate_flow_id,
    generate_node_id,
    utc_timestamp,
)
from flowgraph.utils.naming import generate_unique_slug
from flowgraph.utils.templates import replace_slug_references
from flowgraph.utils.tool_name import generate_unique_tool_name

logger = logging.getLogger(__name__)

# API call parameters that, when changed, make a captured response schema stale
_API_CALL_SCHEMA_INPUTS = ("url", "method")

_TRIGGER_DEFAULTS: dict[str, Any] = {
    "is_active": True,
    "tool_description": "",
    "parameters": [],
}


class ToolNamer(Protocol):
    """Allocates trigger tool names unique across the owning app."""

    def unique_tool_name(
        self,
        name: str,
        flow: Flow,
        exclude_node_id: str | None = None,
    ) -> str: ...


class StoreToolNamer:
    """Tool namer that scans every flow of the app in a FlowStore.

    The flow being edited is taken from memory rather than the store so
    unsaved nodes of the current operation are seen.
    """

    def __init__(self, store: FlowStore) -> None:
        self.store = store

    def unique_tool_name(
        self,
        name: str,
        flow: Flow,
        exclude_node_id: str | None = None,
    ) -> str:
        if flow.app_id is None:
            flows = [flow]
        else:
            others = [f for f in self.store.list_flows(flow.app_id) if f.flow_id != flow.flow_id]
            flows = [flow, *others]
        return generate_unique_tool_name(name, flows, exclude_node_id)


def creates_cycle(connections: list[Connection], source_id: str, target_id: str) -> bool:
    """Whether adding source -> target would close a directed cycle.

    Walks depth-first from target along existing edges; the graph is
    already acyclic, so a cycle appears only if target can reach source.
    """
    outgoing: dict[str, list[str]] = defaultdict(list)
    for conn in connections:
        outgoing[conn.source_node_id].append(conn.target_node_id)

    visited: set[str] = set()
    stack = [target_id]
    while stack:
        current = stack.pop()
        if current == source_id:
            return True
        if current in visited:
            continue
        visited.add(current)
        stack.extend(n for n in outgoing[current] if n not in visited)
    return False


def _rewrite_references(node: NodeInstance, old_slug: str, new_slug: str) -> None:
    """Point template references in an API call's URL and header values at new_slug."""
    if node.type != API_CALL_NODE_TYPE:
        return
    params = node.parameters
    if isinstance(params.get("url"), str):
        params["url"] = replace_slug_references(params["url"], old_slug, new_slug)
    headers = params.get("headers")
    if isinstance(headers, list):
        for header in headers:
            if isinstance(header, dict) and isinstance(header.get("value"), str):
                header["value"] = replace_slug_references(header["value"], old_slug, new_slug)


class GraphService:
    """Graph mutations with invariant enforcement.

    Invariants held after every operation:
    - node names and slugs are unique within a flow
    - no connection targets a trigger node
    - the connection graph stays acyclic
    - no two connections share source, source handle, target and target handle
    - deleting a node removes every connection touching it
    - a Link node can only be targeted from an interface node
    """

    def __init__(
        self,
        store: FlowStore,
        registry: NodeTypeRegistry,
        tool_namer: ToolNamer | None = None,
    ) -> None:
        self.store = store
        self.registry = registry
        self.tool_namer = tool_namer or StoreToolNamer(store)

    # --- flows ---

    def create_flow(
        self,
        name: str,
        app_id: str | None = None,
        description: str | None = None,
    ) -> Flow:
        now = utc_timestamp()
        flow = Flow(
            flow_id=generate_flow_id(),
            app_id=app_id,
            name=name,
            description=description,
            created_at=now,
            updated_at=now,
        )
        self.store.create(flow)
        logger.info("Created flow %s (%s)", flow.flow_id, name)
        return flow

    def get_flow(self, flow_id: str) -> Flow:
        flow = self.store.load(flow_id)
        if flow is None:
            raise FlowNotFoundError(flow_id)
        return flow

    def list_flows(self, app_id: str | None = None) -> list[Flow]:
        return self.store.list_flows(app_id)

    def delete_flow(self, flow_id: str) -> None:
        self.get_flow(flow_id)
        self.store.delete(flow_id)
        logger.info("Deleted flow %s", flow_id)

    # --- nodes ---

    def list_nodes(self, flow_id: str) -> list[NodeInstance]:
        return self.get_flow(flow_id).nodes

    def add_node(
        self,
        flow_id: str,
        node_type: str,
        name: str,
        position: Position | dict | None = None,
        parameters: dict[str, Any] | None = None,
    ) -> NodeInstance:
        """Add a node, filling in type defaults, a slug and for triggers a tool name.

        Raises:
            FlowNotFoundError: if the flow does not exist
            NameConflictError: if another node in the flow has this name
        """
        flow = self.get_flow(flow_id)
        if any(node.name == name for node in flow.nodes):
            raise NameConflictError(name)

        definition = self.registry.get(node_type)
        if definition is None:
            logger.warning("Adding node of unregistered type %s to flow %s", node_type, flow_id)
        merged: dict[str, Any] = copy.deepcopy(dict(definition.default_parameters)) if definition else {}
        merged.update(parameters or {})

        node = NodeInstance(
            id=generate_node_id(),
            type=node_type,
            name=name,
            slug=generate_unique_slug(name, self._slugs(flow)),
            position=_as_position(position),
            parameters=merged,
        )

        if node_type == TRIGGER_NODE_TYPE:
            node.parameters["tool_name"] = self.tool_namer.unique_tool_name(name, flow)
            for key, default in _TRIGGER_DEFAULTS.items():
                node.parameters.setdefault(key, copy.deepcopy(default))

        flow.nodes.append(node)
        self.store.save(flow)
        logger.info("Added %s node %s (%s) to flow %s", node_type, node.id, name, flow_id)
        return node

    def update_node(
        self,
        flow_id: str,
        node_id: str,
        name: str | None = None,
        position: Position | dict | None = None,
        parameters: dict[str, Any] | None = None,
    ) -> NodeInstance:
        """Rename, move and/or shallow-merge parameters into a node.

        A rename regenerates the slug, rewrites ``{{ old_slug.`` references
        held by other nodes, and for triggers regenerates the tool name.
        """
        flow = self.get_flow(flow_id)
        node = flow.find_node(node_id)
        if node is None:
            raise NodeNotFoundError(node_id, flow_id)

        if parameters is not None:
            if node.type == API_CALL_NODE_TYPE:
                self._drop_stale_schema(node, parameters)
            node.parameters = {**node.parameters, **parameters}

        if name is not None and name != node.name:
            if any(other.name == name for other in flow.nodes if other.id != node_id):
                raise NameConflictError(name)
            self._rename(flow, node, name)

        if position is not None:
            node.position = _as_position(position)

        self.store.save(flow)
        logger.debug("Updated node %s in flow %s", node_id, flow_id)
        return node

    def update_node_position(
        self,
        flow_id: str,
        node_id: str,
        position: Position | dict,
    ) -> NodeInstance:
        """Move a node. Skips every check except existence."""
        flow = self.get_flow(flow_id)
        node = flow.find_node(node_id)
        if node is None:
            raise NodeNotFoundError(node_id, flow_id)
        node.position = _as_position(position)
        self.store.save(flow)
        return node

    def delete_node(self, flow_id: str, node_id: str) -> None:
        """Delete a node and every connection that references it."""
        flow = self.get_flow(flow_id)
        index = flow.node_index(node_id)
        if index is None:
            raise NodeNotFoundError(node_id, flow_id)

        del flow.nodes[index]
        before = len(flow.connections)
        flow.connections = [
            conn
            for conn in flow.connections
            if conn.source_node_id != node_id and conn.target_node_id != node_id
        ]
        self.store.save(flow)
        logger.info(
            "Deleted node %s from flow %s with %d connection(s)",
            node_id,
            flow_id,
            before - len(flow.connections),
        )

    # --- connections ---

    def list_connections(self, flow_id: str) -> list[Connection]:
        return self.get_flow(flow_id).connections

    def add_connection(
        self,
        flow_id: str,
        source_node_id: str,
        target_node_id: str,
        source_handle: str | None = None,
        target_handle: str | None = None,
    ) -> Connection:
        """Connect two nodes.

        Checks run in order: both endpoints exist, target is not a
        trigger, Link targets need an interface source, no self
        connection, no cycle, no duplicate.
        """
        flow = self.get_flow(flow_id)
        source = flow.find_node(source_node_id)
        if source is None:
            raise NodeNotFoundError(source_node_id, flow_id, role="source")
        target = flow.find_node(target_node_id)
        if target is None:
            raise NodeNotFoundError(target_node_id, flow_id, role="target")

        self._check_target_role(source, target)

        if source_node_id == target_node_id:
            raise SelfConnectionError()
        if creates_cycle(flow.connections, source_node_id, target_node_id):
            raise CycleDetectedError()

        connection = Connection(
            id=generate_connection_id(),
            source_node_id=source_node_id,
            source_handle=source_handle,
            target_node_id=target_node_id,
            target_handle=target_handle,
        )
        if any(conn.endpoints() == connection.endpoints() for conn in flow.connections):
            raise DuplicateConnectionError()

        flow.connections.append(connection)
        self.store.save(flow)
        logger.info(
            "Connected %s -> %s in flow %s", source_node_id, target_node_id, flow_id
        )
        return connection

    def delete_connection(self, flow_id: str, connection_id: str) -> None:
        flow = self.get_flow(flow_id)
        remaining = [conn for conn in flow.connections if conn.id != connection_id]
        if len(remaining) == len(flow.connections):
            raise ConnectionNotFoundError(connection_id, flow_id)
        flow.connections = remaining
        self.store.save(flow)
        logger.info("Deleted connection %s from flow %s", connection_id, flow_id)

    def insert_transformer(
        self,
        flow_id: str,
        source_node_id: str,
        target_node_id: str,
        transformer_type: str = CODE_TRANSFORM_NODE_TYPE,
        position: Position | dict | None = None,
    ) -> TransformerInsertion:
        """Splice a transform node into the source -> target edge.

        Existing source -> target connections are replaced by
        source -> transformer -> target. The transformer is placed at the
        midpoint of the two nodes unless a position is given.

        Raises:
            NodeTypeNotFoundError: if transformer_type is not registered
            WrongNodeTypeError: if transformer_type is not a transform
        """
        flow = self.get_flow(flow_id)
        source = flow.find_node(source_node_id)
        if source is None:
            raise NodeNotFoundError(source_node_id, flow_id, role="source")
        target = flow.find_node(target_node_id)
        if target is None:
            raise NodeNotFoundError(target_node_id, flow_id, role="target")

        definition = self.registry.require(transformer_type)
        if definition.category != NodeCategory.transform:
            raise WrongNodeTypeError(f"Node type {transformer_type} is not a transformer")
        if self.registry.category_of(target.type) == NodeCategory.trigger:
            raise InvalidTargetError()
        if target.type == LINK_NODE_TYPE:
            # the transformer would become the Link's source
            raise LinkConstraintError()
        if source_node_id == target_node_id:
            raise SelfConnectionError()

        flow.connections = [
            conn
            for conn in flow.connections
            if not (conn.source_node_id == source_node_id and conn.target_node_id == target_node_id)
        ]
        if creates_cycle(flow.connections, source_node_id, target_node_id):
            raise CycleDetectedError()

        if position is None:
            position = Position(
                x=(source.position.x + target.position.x) / 2,
                y=(source.position.y + target.position.y) / 2,
            )
        name = self._transformer_name(flow, definition.display_name)
        transformer = NodeInstance(
            id=generate_node_id(),
            type=transformer_type,
            name=name,
            slug=generate_unique_slug(name, self._slugs(flow)),
            position=_as_position(position),
            parameters=copy.deepcopy(dict(definition.default_parameters)),
        )
        source_connection = Connection(
            id=generate_connection_id(),
            source_node_id=source_node_id,
            source_handle="output",
            target_node_id=transformer.id,
            target_handle="input",
        )
        target_connection = Connection(
            id=generate_connection_id(),
            source_node_id=transformer.id,
            source_handle="output",
            target_node_id=target_node_id,
            target_handle="input",
        )

        flow.nodes.append(transformer)
        flow.connections.extend([source_connection, target_connection])
        self.store.save(flow)
        logger.info(
            "Inserted %s %s between %s and %s in flow %s",
            transformer_type,
            transformer.id,
            source_node_id,
            target_node_id,
            flow_id,
        )
        return TransformerInsertion(
            transformer_node=transformer,
            source_connection=source_connection,
            target_connection=target_connection,
        )

    # --- helpers ---

    def _check_target_role(self, source: NodeInstance, target: NodeInstance) -> None:
        if self.registry.category_of(target.type) == NodeCategory.trigger:
            raise InvalidTargetError()
        if (
            target.type == LINK_NODE_TYPE
            and self.registry.category_of(source.type) != NodeCategory.interface
        ):
            raise LinkConstraintError()

    def _rename(self, flow: Flow, node: NodeInstance, name: str) -> None:
        old_slug = node.slug
        new_slug = generate_unique_slug(name, self._slugs(flow, exclude_node_id=node.id))
        node.name = name
        node.slug = new_slug

        if old_slug and old_slug != new_slug:
            for other in flow.nodes:
                if other.id != node.id:
                    _rewrite_references(other, old_slug, new_slug)

        if node.type == TRIGGER_NODE_TYPE:
            node.parameters["tool_name"] = self.tool_namer.unique_tool_name(
                name, flow, exclude_node_id=node.id
            )

    def _drop_stale_schema(self, node: NodeInstance, updates: dict[str, Any]) -> None:
        if "resolved_output_schema" in updates:
            return
        if not node.parameters.get("resolved_output_schema"):
            return
        changed = [
            key
            for key in _API_CALL_SCHEMA_INPUTS
            if key in updates and updates[key] != node.parameters.get(key)
        ]
        if changed:
            node.parameters["resolved_output_schema"] = None
            logger.info(
                "Cleared resolved output schema of node %s after %s changed",
                node.id,
                ", ".join(changed),
            )

    @staticmethod
    def _slugs(flow: Flow, exclude_node_id: str | None = None) -> set[str]:
        return {node.slug for node in flow.nodes if node.slug and node.id != exclude_node_id}

    @staticmethod
    def _transformer_name(flow: Flow, display_name: str) -> str:
        names = {node.name for node in flow.nodes}
        counter = 1
        while f"{display_name} {counter}" in names:
            counter += 1
        return f"{display_name} {counter}"


def _as_position(position: Position | dict | None) -> Position:
    if position is None:
        return Position()
    if isinstance(position, Position):
        return position
    return Position.model_validate(position)
