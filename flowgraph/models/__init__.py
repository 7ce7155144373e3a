"""Core data models for flowgraph."""

from flowgraph.models.flow import (
    Connection,
    Flow,
    NodeInstance,
    Position,
    TransformerInsertion,
)
from flowgraph.models.schema import (
    ArraySchema,
    BooleanSchema,
    NullSchema,
    NumberSchema,
    ObjectSchema,
    Schema,
    SchemaKind,
    SchemaState,
    StringSchema,
    UnknownSchema,
    dump_schema,
    parse_schema,
)
from flowgraph.models.validation import (
    ApiTestResult,
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
    NodeTypeSchemaInfo,
    NodeValidationError,
    ResolveSchemaResult,
    SuggestedTransformer,
    TransformerConfidence,
    ValidationSummary,
)

__all__ = [
    # Flow document
    "Connection",
    "Flow",
    "NodeInstance",
    "Position",
    "TransformerInsertion",
    # Schemas
    "ArraySchema",
    "BooleanSchema",
    "NullSchema",
    "NumberSchema",
    "ObjectSchema",
    "Schema",
    "SchemaKind",
    "SchemaState",
    "StringSchema",
    "UnknownSchema",
    "dump_schema",
    "parse_schema",
    # Results
    "ApiTestResult",
    "CompatibilityIssue",
    "CompatibilityResult",
    "CompatibilityStatus",
    "ConnectionValidation",
    "ConnectionValidationResult",
    "FlowStatus",
    "FlowValidationReport",
    "IssueSeverity",
    "IssueType",
    "NodeSchemaInfo",
    "NodeTypeSchemaInfo",
    "NodeValidationError",
    "ResolveSchemaResult",
    "SuggestedTransformer",
    "TransformerConfidence",
    "ValidationSummary",
]
