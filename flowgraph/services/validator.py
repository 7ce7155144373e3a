"""Flow-wide validation: per-connection compatibility plus node-level rules.

Validation reports problems as data. It raises only when an entity the
caller names does not exist.
"""

import logging

from flowgraph.errors import NodeNotFoundError
from flowgraph.models.flow import Flow, NodeInstance
from flowgraph.models.validation import (
    TRANSFORM_NO_INPUT,
    CompatibilityIssue,
    CompatibilityResult,
    CompatibilityStatus,
    ConnectionValidation,
    ConnectionValidationResult,
    FlowStatus,
    FlowValidationReport,
    IssueSeverity,
    IssueType,
    NodeSchemaInfo,
    NodeValidationError,
    ValidationSummary,
)
from flowgraph.registry.definitions import LINK_NODE_TYPE, NodeCategory, NodeTypeRegistry
from flowgraph.schema.compatibility import check_compatibility
from flowgraph.services.resolver import SchemaResolver
from flowgraph.services.suggestions import suggest_transformers

logger = logging.getLogger(__name__)

LINK_CONSTRAINT_MESSAGE = (
    "Link nodes can only be connected after UI nodes (interface category)"
)


class FlowValidator:
    def __init__(
        self,
        registry: NodeTypeRegistry,
        resolver: SchemaResolver | None = None,
    ) -> None:
        self.registry = registry
        self.resolver = resolver or SchemaResolver(registry)

    def validate_flow(self, flow: Flow) -> FlowValidationReport:
        """Check every connection and every transform node of a flow."""
        nodes = {node.id: node for node in flow.nodes}
        # one resolution per node for the whole pass
        schemas = self.resolver.resolve_all(flow.nodes)

        results: list[ConnectionValidationResult] = []
        for conn in flow.connections:
            source = nodes.get(conn.source_node_id)
            target = nodes.get(conn.target_node_id)
            result = self._check_pair(
                source,
                target,
                schemas.get(conn.source_node_id),
                schemas.get(conn.target_node_id),
            )
            results.append(
                ConnectionValidationResult(
                    connection_id=conn.id,
                    source_node_id=conn.source_node_id,
                    target_node_id=conn.target_node_id,
                    status=result.status,
                    issues=result.issues,
                )
            )

        node_errors = self._node_errors(flow)
        summary = ValidationSummary(
            total=len(results),
            compatible=sum(r.status == CompatibilityStatus.compatible for r in results),
            warnings=sum(r.status == CompatibilityStatus.warning for r in results),
            errors=sum(r.status == CompatibilityStatus.error for r in results),
            unknown=sum(r.status == CompatibilityStatus.unknown for r in results),
        )
        if summary.errors or node_errors:
            status = FlowStatus.errors
        elif summary.warnings:
            status = FlowStatus.warnings
        else:
            status = FlowStatus.valid

        logger.debug(
            "Validated flow %s: %s (%d connections, %d node errors)",
            flow.flow_id,
            status.value,
            summary.total,
            len(node_errors),
        )
        return FlowValidationReport(
            flow_id=flow.flow_id,
            status=status,
            summary=summary,
            connections=results,
            node_errors=node_errors,
        )

    def validate_connection(
        self,
        flow: Flow,
        source_node_id: str,
        target_node_id: str,
    ) -> ConnectionValidation:
        """Check a prospective connection and suggest transformers if it fails.

        Raises:
            NodeNotFoundError: if either endpoint is not in the flow
        """
        source = flow.find_node(source_node_id)
        if source is None:
            raise NodeNotFoundError(source_node_id, flow.flow_id, role="source")
        target = flow.find_node(target_node_id)
        if target is None:
            raise NodeNotFoundError(target_node_id, flow.flow_id, role="target")

        result = self._check_pair(
            source,
            target,
            self.resolver.resolve(source),
            self.resolver.resolve(target),
        )
        return ConnectionValidation(
            status=result.status,
            issues=result.issues,
            source_schema=result.source_schema,
            target_schema=result.target_schema,
            suggested_transformers=suggest_transformers(result.status, self.registry),
        )

    def _check_pair(
        self,
        source: NodeInstance | None,
        target: NodeInstance | None,
        source_info: NodeSchemaInfo | None,
        target_info: NodeSchemaInfo | None,
    ) -> CompatibilityResult:
        producer = source_info.output_schema if source_info else None
        consumer = target_info.input_schema if target_info else None

        if target is not None and target.type == LINK_NODE_TYPE:
            source_category = self.registry.category_of(source.type) if source else None
            if source_category != NodeCategory.interface:
                # overrides whatever the schema check would say
                return CompatibilityResult(
                    status=CompatibilityStatus.error,
                    issues=[
                        CompatibilityIssue(
                            type=IssueType.link_constraint,
                            severity=IssueSeverity.error,
                            path="",
                            message=LINK_CONSTRAINT_MESSAGE,
                            source_value=source_category.value if source_category else None,
                            target_value=NodeCategory.interface.value,
                        )
                    ],
                    source_schema=producer,
                    target_schema=consumer,
                )

        return check_compatibility(producer, consumer)

    def _node_errors(self, flow: Flow) -> list[NodeValidationError]:
        has_input = {conn.target_node_id for conn in flow.connections}
        errors: list[NodeValidationError] = []
        for node in flow.nodes:
            if self.registry.category_of(node.type) != NodeCategory.transform:
                continue
            if node.id in has_input:
                continue
            errors.append(
                NodeValidationError(
                    node_id=node.id,
                    node_type=node.type,
                    error_code=TRANSFORM_NO_INPUT,
                    message=(
                        f'Transform node "{node.name}" has no input connection. '
                        "Transform nodes require an input to process."
                    ),
                )
            )
        return errors
