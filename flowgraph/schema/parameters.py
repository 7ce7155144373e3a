"""Schemas derived from a trigger's declared parameter list."""

from typing import Any

from flowgraph.models.schema import (
    BooleanSchema,
    NumberSchema,
    ObjectSchema,
    Schema,
    StringSchema,
)

# fields every trigger emits regardless of its declared parameters
_TRIGGER_STATIC_PROPERTIES: dict[str, Schema] = {
    "type": StringSchema(description="Always 'trigger'"),
    "triggered": BooleanSchema(),
    "tool_name": StringSchema(),
}
_TRIGGER_STATIC_REQUIRED = ["type", "triggered", "tool_name"]


def parameter_type_to_schema(param_type: str | None, description: str | None = None) -> Schema:
    """Map a declared parameter type onto a schema. Unknown types are strings."""
    if param_type in ("number", "integer"):
        return NumberSchema(description=description)
    if param_type == "boolean":
        return BooleanSchema(description=description)
    return StringSchema(description=description)


def flow_parameters_to_schema(parameters: list[dict[str, Any]]) -> ObjectSchema:
    """Convert declared flow parameters into an object schema.

    Each parameter is a dict with ``name``, ``type``, and optional
    ``description`` and ``optional``. Entries without a name are skipped.
    """
    properties: dict[str, Schema] = {}
    required: list[str] = []

    for param in parameters:
        if not isinstance(param, dict):
            continue
        name = param.get("name")
        if not isinstance(name, str) or not name:
            continue
        properties[name] = parameter_type_to_schema(param.get("type"), param.get("description"))
        if not param.get("optional", False) and name not in required:
            required.append(name)

    return ObjectSchema(properties=properties, required=required)


def trigger_output_schema(parameters: list[dict[str, Any]] | None = None) -> ObjectSchema:
    """Full trigger output: the static trigger fields plus declared parameters."""
    param_schema = flow_parameters_to_schema(parameters or [])
    required = list(_TRIGGER_STATIC_REQUIRED)
    required.extend(name for name in param_schema.required if name not in required)
    return ObjectSchema(
        properties={**_TRIGGER_STATIC_PROPERTIES, **param_schema.properties},
        required=required,
    )
