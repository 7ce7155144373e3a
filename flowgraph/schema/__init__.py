"""Schema inference and compatibility checking."""

from flowgraph.schema.compatibility import check_compatibility, status_for_issues
from flowgraph.schema.inference import infer_schema, merge_schemas
from flowgraph.schema.parameters import flow_parameters_to_schema, trigger_output_schema

__all__ = [
    "check_compatibility",
    "status_for_issues",
    "infer_schema",
    "merge_schemas",
    "flow_parameters_to_schema",
    "trigger_output_schema",
]
