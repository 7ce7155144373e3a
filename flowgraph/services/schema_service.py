"""Store-backed schema operations: lookup, sample resolution, validation, live tests."""

import json
import logging
from typing import Any

from flowgraph.errors import (
    FlowNotFoundError,
    InvalidSampleError,
    NodeNotFoundError,
    WrongNodeTypeError,
)
from flowgraph.models.flow import Flow, NodeInstance
from flowgraph.models.schema import SchemaState, dump_schema
from flowgraph.models.validation import (
    ApiTestResult,
    ConnectionValidation,
    FlowValidationReport,
    NodeSchemaInfo,
    NodeTypeSchemaInfo,
    ResolveSchemaResult,
)
from flowgraph.registry.definitions import (
    API_CALL_NODE_TYPE,
    TRIGGER_NODE_TYPE,
    NodeTypeRegistry,
)
from flowgraph.schema.inference import infer_schema
from flowgraph.schema.parameters import trigger_output_schema
from flowgraph.services.api_probe import ApiCallProbe
from flowgraph.services.resolver import SchemaResolver
from flowgraph.services.validator import FlowValidator
from flowgraph.store import FlowStore

logger = logging.getLogger(__name__)


class SchemaService:
    def __init__(
        self,
        store: FlowStore,
        registry: NodeTypeRegistry,
        probe: ApiCallProbe | None = None,
    ) -> None:
        self.store = store
        self.registry = registry
        self.resolver = SchemaResolver(registry)
        self.validator = FlowValidator(registry, self.resolver)
        self.probe = probe or ApiCallProbe()

    def get_node_schema(self, flow_id: str, node_id: str) -> NodeSchemaInfo:
        _, node = self._load_node(flow_id, node_id)
        return self.resolver.resolve(node)

    def get_flow_schemas(self, flow_id: str) -> list[NodeSchemaInfo]:
        flow = self._load_flow(flow_id)
        return [self.resolver.resolve(node) for node in flow.nodes]

    def get_node_type_schema(self, node_type: str) -> NodeTypeSchemaInfo:
        """Schemas of a node type as configured with its default parameters."""
        definition = self.registry.require(node_type)
        defaults = dict(definition.default_parameters)
        input_schema = (
            definition.get_input_schema(defaults)
            if definition.get_input_schema
            else definition.input_schema
        )
        output_schema = (
            definition.get_output_schema(defaults)
            if definition.get_output_schema
            else definition.output_schema
        )
        return NodeTypeSchemaInfo(
            node_type=definition.name,
            input_schema=input_schema,
            output_schema=output_schema,
            has_dynamic_input=definition.has_dynamic_input,
            has_dynamic_output=definition.has_dynamic_output,
        )

    def resolve_schema(
        self,
        flow_id: str,
        node_id: str,
        sample_response: Any = None,
    ) -> ResolveSchemaResult:
        """Resolve a node's output schema.

        API call nodes infer it from sample_response (a value or a JSON
        string) and cache it on the node. Triggers compute it from their
        parameters; other nodes return their current resolution.

        Raises:
            InvalidSampleError: if an API call node gets no sample or bad JSON
        """
        flow, node = self._load_node(flow_id, node_id)

        if node.type == API_CALL_NODE_TYPE:
            sample = _parse_sample(sample_response)
            output_schema = infer_schema(sample)
            node.parameters["resolved_output_schema"] = dump_schema(output_schema)
            self.store.save(flow)
            logger.info("Resolved output schema of node %s from sample", node_id)
            return ResolveSchemaResult(node_id=node_id, resolved=True, output_schema=output_schema)

        if node.type == TRIGGER_NODE_TYPE:
            output_schema = trigger_output_schema(node.parameters.get("parameters") or [])
            return ResolveSchemaResult(node_id=node_id, resolved=True, output_schema=output_schema)

        info = self.resolver.resolve(node)
        return ResolveSchemaResult(
            node_id=node_id,
            resolved=info.output_state == SchemaState.defined,
            output_schema=info.output_schema,
        )

    def validate_flow(self, flow_id: str) -> FlowValidationReport:
        return self.validator.validate_flow(self._load_flow(flow_id))

    def validate_connection(
        self,
        flow_id: str,
        source_node_id: str,
        target_node_id: str,
    ) -> ConnectionValidation:
        flow = self._load_flow(flow_id)
        return self.validator.validate_connection(flow, source_node_id, target_node_id)

    def test_api_call(
        self,
        flow_id: str,
        node_id: str,
        mock_values: dict[str, Any] | None = None,
        save_schema: bool = False,
    ) -> ApiTestResult:
        """Run an API call node for real and optionally keep the inferred schema.

        Raises:
            WrongNodeTypeError: if the node is not an API call node
        """
        flow, node = self._load_node(flow_id, node_id)
        if node.type != API_CALL_NODE_TYPE:
            raise WrongNodeTypeError(
                f"Node {node_id} is not an {API_CALL_NODE_TYPE} node (type: {node.type})"
            )

        result = self.probe.run(node.parameters, mock_values)
        if result.success and save_schema and result.output_schema is not None:
            node.parameters["resolved_output_schema"] = dump_schema(result.output_schema)
            self.store.save(flow)
            result = result.model_copy(update={"schema_saved": True})
            logger.info("Saved output schema of node %s from live test", node_id)
        return result

    def _load_flow(self, flow_id: str) -> Flow:
        flow = self.store.load(flow_id)
        if flow is None:
            raise FlowNotFoundError(flow_id)
        return flow

    def _load_node(self, flow_id: str, node_id: str) -> tuple[Flow, NodeInstance]:
        flow = self._load_flow(flow_id)
        node = flow.find_node(node_id)
        if node is None:
            raise NodeNotFoundError(node_id, flow_id)
        return flow, node


def _parse_sample(sample_response: Any) -> Any:
    if sample_response is None or sample_response == "":
        raise InvalidSampleError("sample_response is required for ApiCall schema resolution")
    if isinstance(sample_response, str):
        try:
            return json.loads(sample_response)
        except ValueError as exc:
            raise InvalidSampleError("sample_response must be valid JSON") from exc
    return sample_response
