"""Effective input/output schemas of node instances.

Generic resolution uses the registry entry: a parameter-driven schema
function wins over a static schema. Three node types have strategies of
their own, keyed by type name in ``SchemaResolver.strategies``.
"""

import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from flowgraph.models.flow import NodeInstance
from flowgraph.models.schema import (
    ObjectSchema,
    Schema,
    SchemaState,
    open_object_schema,
    parse_schema,
)
from flowgraph.models.validation import NodeSchemaInfo
from flowgraph.registry.builtin import api_call_base_output_schema
from flowgraph.registry.definitions import (
    API_CALL_NODE_TYPE,
    REGISTRY_COMPONENT_NODE_TYPE,
    TRIGGER_NODE_TYPE,
    NodeTypeDefinition,
    NodeTypeRegistry,
)
from flowgraph.schema.parameters import trigger_output_schema

logger = logging.getLogger(__name__)

Side = tuple[SchemaState, Schema | None]
Strategy = Callable[[NodeInstance, NodeTypeDefinition], NodeSchemaInfo]


def _state_for(schema: Schema | None) -> SchemaState:
    return SchemaState.defined if schema is not None else SchemaState.unknown


def _parse_stored(node: NodeInstance, key: str) -> Schema | None:
    stored = node.parameters.get(key)
    if not stored:
        return None
    try:
        return parse_schema(stored)
    except ValidationError:
        logger.warning("Node %s has a malformed %s, ignoring it", node.id, key)
        return None


def merge_over_base(base: ObjectSchema, stored: Schema) -> ObjectSchema:
    """Layer a sample-derived schema on top of a fixed base schema.

    Object properties of the stored schema override the base ones and
    required is the union. A non-object sample becomes the ``body``.
    """
    if not isinstance(stored, ObjectSchema):
        return base.model_copy(update={"properties": {**base.properties, "body": stored}})
    required = list(base.required)
    required.extend(name for name in stored.required if name not in required)
    return ObjectSchema(
        description=base.description,
        properties={**base.properties, **stored.properties},
        required=required,
        open=base.open or stored.open,
    )


class SchemaResolver:
    """Resolves node schemas against a registry. Never raises for data reasons."""

    def __init__(self, registry: NodeTypeRegistry) -> None:
        self.registry = registry
        self.strategies: dict[str, Strategy] = {
            TRIGGER_NODE_TYPE: self._resolve_trigger,
            API_CALL_NODE_TYPE: self._resolve_api_call,
            REGISTRY_COMPONENT_NODE_TYPE: self._resolve_registry_component,
        }

    def resolve(self, node: NodeInstance) -> NodeSchemaInfo:
        definition = self.registry.get(node.type)
        if definition is None:
            return NodeSchemaInfo(
                node_id=node.id,
                node_type=node.type,
                input_state=SchemaState.unknown,
                output_state=SchemaState.unknown,
            )

        strategy = self.strategies.get(node.type)
        if strategy is not None:
            return strategy(node, definition)

        input_state, input_schema = self._side(
            definition.get_input_schema, definition.input_schema, node.parameters
        )
        output_state, output_schema = self._side(
            definition.get_output_schema, definition.output_schema, node.parameters
        )
        return NodeSchemaInfo(
            node_id=node.id,
            node_type=node.type,
            input_state=input_state,
            input_schema=input_schema,
            output_state=output_state,
            output_schema=output_schema,
        )

    def resolve_all(self, nodes: list[NodeInstance]) -> dict[str, NodeSchemaInfo]:
        """Resolve every node once, keyed by node id."""
        return {node.id: self.resolve(node) for node in nodes}

    def _side(
        self,
        compute: Callable[[dict[str, Any]], Schema | None] | None,
        static: Schema | None,
        parameters: dict[str, Any],
    ) -> Side:
        if compute is not None:
            schema = compute(parameters)
            return _state_for(schema), schema
        return _state_for(static), static

    # --- bespoke strategies ---

    def _resolve_trigger(self, node: NodeInstance, definition: NodeTypeDefinition) -> NodeSchemaInfo:
        # triggers only emit; output comes straight from the declared parameters
        output_schema = trigger_output_schema(node.parameters.get("parameters") or [])
        return NodeSchemaInfo(
            node_id=node.id,
            node_type=node.type,
            input_state=SchemaState.unknown,
            output_state=SchemaState.defined,
            output_schema=output_schema,
        )

    def _resolve_api_call(self, node: NodeInstance, definition: NodeTypeDefinition) -> NodeSchemaInfo:
        base = api_call_base_output_schema(node.parameters)
        stored = _parse_stored(node, "resolved_output_schema")
        if stored is None:
            output_state, output_schema = SchemaState.pending, base
        else:
            output_state, output_schema = SchemaState.defined, merge_over_base(base, stored)
        return NodeSchemaInfo(
            node_id=node.id,
            node_type=node.type,
            input_state=_state_for(definition.input_schema),
            input_schema=definition.input_schema,
            output_state=output_state,
            output_schema=output_schema,
        )

    def _resolve_registry_component(
        self, node: NodeInstance, definition: NodeTypeDefinition
    ) -> NodeSchemaInfo:
        input_schema = _parse_stored(node, "input_schema")
        return NodeSchemaInfo(
            node_id=node.id,
            node_type=node.type,
            input_state=_state_for(input_schema),
            input_schema=input_schema,
            output_state=SchemaState.defined,
            output_schema=open_object_schema(),
        )
