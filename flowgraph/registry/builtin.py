"""Built-in node type catalog.

The catalog is data: each entry declares its category and where its
schemas come from. Behaviour that depends on instance state (stored
samples, declared parameters) lives in the schema resolver.
"""

import logging
from functools import lru_cache
from typing import Any

from pydantic import ValidationError

from flowgraph.models.schema import (
    BooleanSchema,
    NumberSchema,
    ObjectSchema,
    Schema,
    StringSchema,
    UnknownSchema,
    open_object_schema,
    parse_schema,
)
from flowgraph.registry.definitions import (
    API_CALL_NODE_TYPE,
    CODE_TRANSFORM_NODE_TYPE,
    LINK_NODE_TYPE,
    REGISTRY_COMPONENT_NODE_TYPE,
    TRIGGER_NODE_TYPE,
    NodeCategory,
    NodeTypeDefinition,
    NodeTypeRegistry,
)
from flowgraph.schema.parameters import trigger_output_schema

logger = logging.getLogger(__name__)


def api_call_base_output_schema(parameters: dict[str, Any] | None = None) -> ObjectSchema:
    """Fields every API call output has, whatever the remote endpoint returns.

    ``body`` stays unknown until a sample response is resolved.
    """
    execution = ObjectSchema(
        description="Execution metadata",
        properties={
            "success": BooleanSchema(description="Whether the request succeeded"),
            "error": StringSchema(description="Error message if request failed"),
            "duration_ms": NumberSchema(description="Request duration in milliseconds"),
            "http_status": NumberSchema(description="HTTP status code"),
            "http_status_text": StringSchema(description="HTTP status text"),
            "request_url": StringSchema(description="The URL that was called"),
        },
        required=["success", "duration_ms"],
    )
    return ObjectSchema(
        properties={
            "type": StringSchema(description="Always 'api_call'"),
            "status": NumberSchema(description="HTTP status code"),
            "status_text": StringSchema(description="HTTP status text"),
            "headers": open_object_schema("Response headers"),
            "body": UnknownSchema(description="Response body, JSON parsed when possible"),
            "_execution": execution,
        },
        required=["type", "_execution"],
    )


def stored_output_schema(parameters: dict[str, Any]) -> Schema | None:
    """The output schema a transform captured from a test run, if any."""
    stored = parameters.get("resolved_output_schema")
    if not stored:
        return None
    try:
        return parse_schema(stored)
    except ValidationError:
        logger.warning("ignoring malformed resolved_output_schema in node parameters")
        return None


def _trigger_output(parameters: dict[str, Any]) -> Schema:
    return trigger_output_schema(parameters.get("parameters") or [])


USER_INTENT = NodeTypeDefinition(
    name=TRIGGER_NODE_TYPE,
    display_name="User Intent",
    category=NodeCategory.trigger,
    description="Starts the flow when the user's intent matches the tool description",
    get_output_schema=_trigger_output,
    default_parameters={
        "is_active": True,
        "tool_description": "",
        "parameters": [],
    },
)

REGISTRY_COMPONENT = NodeTypeDefinition(
    name=REGISTRY_COMPONENT_NODE_TYPE,
    display_name="Registry Component",
    category=NodeCategory.interface,
    description="Render a UI component from the component registry",
    output_schema=open_object_schema(),
    default_parameters={"component_name": "", "input_schema": None},
)

BLANK_COMPONENT = NodeTypeDefinition(
    name="BlankComponent",
    display_name="Blank Component",
    category=NodeCategory.interface,
    description="Render a custom UI component",
    input_schema=open_object_schema(),
    output_schema=open_object_schema(),
    default_parameters={"code": ""},
)

API_CALL = NodeTypeDefinition(
    name=API_CALL_NODE_TYPE,
    display_name="API Call",
    category=NodeCategory.action,
    description="Make HTTP requests to external APIs",
    input_schema=open_object_schema(
        "Data available for template variable resolution in URL and headers"
    ),
    get_output_schema=api_call_base_output_schema,
    default_parameters={
        "method": "GET",
        "url": "",
        "headers": [],
        "timeout": 30000,
    },
)

CODE_TRANSFORM = NodeTypeDefinition(
    name=CODE_TRANSFORM_NODE_TYPE,
    display_name="Code Transform",
    category=NodeCategory.transform,
    description="Reshape data with a user-written code snippet",
    input_schema=open_object_schema(),
    get_output_schema=stored_output_schema,
    default_parameters={"code": "return input", "resolved_output_schema": None},
)

RETURN = NodeTypeDefinition(
    name="Return",
    display_name="Return Value",
    category=NodeCategory.return_,
    description="Return text to the caller",
    input_schema=open_object_schema(),
    default_parameters={"text": ""},
)

LINK = NodeTypeDefinition(
    name=LINK_NODE_TYPE,
    display_name="Link",
    category=NodeCategory.return_,
    description="Open a link from a UI component",
    input_schema=open_object_schema(),
    default_parameters={"href": ""},
)

BUILTIN_NODE_TYPES: tuple[NodeTypeDefinition, ...] = (
    USER_INTENT,
    REGISTRY_COMPONENT,
    BLANK_COMPONENT,
    API_CALL,
    CODE_TRANSFORM,
    RETURN,
    LINK,
)


@lru_cache(maxsize=1)
def default_registry() -> NodeTypeRegistry:
    """The registry of built-in node types."""
    return NodeTypeRegistry(BUILTIN_NODE_TYPES)
