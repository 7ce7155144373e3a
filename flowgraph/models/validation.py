"""Result models for schema resolution, compatibility checks and flow validation."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from flowgraph.models.schema import Schema, SchemaState


class CompatibilityStatus(str, Enum):
    """Outcome of comparing a producer schema to a consumer schema."""

    compatible = "compatible"
    warning = "warning"
    error = "error"
    unknown = "unknown"  # either side unresolved


class IssueSeverity(str, Enum):
    error = "error"
    warning = "warning"


class IssueType(str, Enum):
    """Kinds of compatibility issue."""

    missing_field = "missing-field"
    type_mismatch = "type-mismatch"
    format_mismatch = "format-mismatch"
    imprecise_type = "imprecise-type"  # producer shape not known precisely
    link_constraint = "link-constraint"


class CompatibilityIssue(BaseModel):
    """A single problem found while checking a connection."""

    type: IssueType
    severity: IssueSeverity
    path: str  # e.g. "user.email", "items[].id"; empty for the root
    message: str
    source_value: str | None = None
    target_value: str | None = None


class CompatibilityResult(BaseModel):
    status: CompatibilityStatus
    issues: list[CompatibilityIssue] = Field(default_factory=list)
    source_schema: Schema | None = None
    target_schema: Schema | None = None


class NodeSchemaInfo(BaseModel):
    """Effective input/output schema of one node instance."""

    node_id: str
    node_type: str
    input_state: SchemaState
    input_schema: Schema | None = None
    output_state: SchemaState
    output_schema: Schema | None = None


class NodeTypeSchemaInfo(BaseModel):
    """Static schema information of a node type, without instance parameters."""

    node_type: str
    input_schema: Schema | None = None
    output_schema: Schema | None = None
    has_dynamic_input: bool = False
    has_dynamic_output: bool = False


class TransformerConfidence(str, Enum):
    high = "high"
    medium = "medium"


class SuggestedTransformer(BaseModel):
    """A transform node type that could repair an incompatible connection."""

    node_type: str
    display_name: str
    description: str
    confidence: TransformerConfidence


class ConnectionValidation(BaseModel):
    """Compatibility of one source/target pair plus repair suggestions."""

    status: CompatibilityStatus
    issues: list[CompatibilityIssue] = Field(default_factory=list)
    source_schema: Schema | None = None
    target_schema: Schema | None = None
    suggested_transformers: list[SuggestedTransformer] = Field(default_factory=list)


class ConnectionValidationResult(BaseModel):
    """Validation result for an existing connection of a flow."""

    connection_id: str
    source_node_id: str
    target_node_id: str
    status: CompatibilityStatus
    issues: list[CompatibilityIssue] = Field(default_factory=list)


TRANSFORM_NO_INPUT = "TRANSFORM_NO_INPUT"


class NodeValidationError(BaseModel):
    """A topological problem with a node, independent of any connection."""

    node_id: str
    node_type: str
    error_code: str
    message: str


class FlowStatus(str, Enum):
    valid = "valid"
    warnings = "warnings"
    errors = "errors"


class ValidationSummary(BaseModel):
    total: int = 0
    compatible: int = 0
    warnings: int = 0
    errors: int = 0
    unknown: int = 0


class FlowValidationReport(BaseModel):
    """Flow-wide validation report."""

    flow_id: str
    status: FlowStatus
    summary: ValidationSummary
    connections: list[ConnectionValidationResult] = Field(default_factory=list)
    node_errors: list[NodeValidationError] = Field(default_factory=list)


class ResolveSchemaResult(BaseModel):
    node_id: str
    resolved: bool
    output_schema: Schema | None = None
    error: str | None = None


class ApiTestResult(BaseModel):
    """Outcome of a live test of an API call node.

    Failures of the remote endpoint are reported here with
    ``success=False`` rather than raised.
    """

    success: bool
    error: str | None = None
    status: int | None = None
    status_text: str | None = None
    headers: dict[str, str] | None = None
    body: Any = None
    output_schema: Schema | None = None
    execution_time_ms: int | None = None
    warning: str | None = None
    schema_saved: bool = False
    request_url: str | None = None
