"""Infer a structural schema from a sample JSON value.

Used when a user pastes a sample response for an API call node and when a
live test captures a real response.

Policy: inferred objects are closed (``open=False``) and every key seen in
the sample is required. A sample is taken as the exact contract of the
producer, which keeps downstream compatibility checks strict.
"""

import re
from functools import reduce
from typing import Any

from flowgraph.models.schema import (
    ArraySchema,
    BooleanSchema,
    NullSchema,
    NumberSchema,
    ObjectSchema,
    Schema,
    StringSchema,
    UnknownSchema,
)

DEFAULT_MAX_DEPTH = 5

_STRING_FORMATS: tuple[tuple[str, re.Pattern], ...] = (
    ("date-time", re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}")),
    ("date", re.compile(r"^\d{4}-\d{2}-\d{2}$")),
    ("email", re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")),
    ("uri", re.compile(r"^https?://")),
    (
        "uuid",
        re.compile(
            r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
            re.IGNORECASE,
        ),
    ),
)


def infer_schema(sample: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> Schema:
    """Infer a schema from a JSON-like value. Never raises.

    Args:
        sample: parsed JSON (dicts, lists, str, int, float, bool, None)
        max_depth: nesting depth after which values are inferred as unknown
    """
    return _infer(sample, 0, max_depth)


def _infer(value: Any, depth: int, max_depth: int) -> Schema:
    if depth >= max_depth:
        return UnknownSchema()
    if value is None:
        return NullSchema()
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return BooleanSchema()
    if isinstance(value, (int, float)):
        return NumberSchema()
    if isinstance(value, str):
        return _infer_string(value)
    if isinstance(value, dict):
        return _infer_object(value, depth, max_depth)
    if isinstance(value, (list, tuple)):
        return _infer_array(value, depth, max_depth)
    return UnknownSchema()


def _infer_string(value: str) -> StringSchema:
    for fmt, pattern in _STRING_FORMATS:
        if pattern.search(value):
            return StringSchema(format=fmt)
    return StringSchema()


def _infer_object(value: dict, depth: int, max_depth: int) -> ObjectSchema:
    properties = {
        str(key): _infer(item, depth + 1, max_depth) for key, item in value.items()
    }
    return ObjectSchema(properties=properties, required=list(properties), open=False)


def _infer_array(value: list | tuple, depth: int, max_depth: int) -> ArraySchema:
    if not value:
        return ArraySchema(items=UnknownSchema())
    item_schemas = [_infer(item, depth + 1, max_depth) for item in value]
    return ArraySchema(items=reduce(merge_schemas, item_schemas))


def merge_schemas(a: Schema, b: Schema) -> Schema:
    """The loosest schema both a and b conform to.

    Objects keep the union of properties and require only what both
    require; arrays merge their items; differing kinds become unknown.
    """
    if a == b:
        return a
    if a.kind != b.kind:
        return UnknownSchema()

    if isinstance(a, ObjectSchema) and isinstance(b, ObjectSchema):
        properties = dict(a.properties)
        for name, schema in b.properties.items():
            properties[name] = merge_schemas(properties[name], schema) if name in properties else schema
        required = [name for name in a.required if name in b.required]
        return ObjectSchema(properties=properties, required=required, open=a.open or b.open)

    if isinstance(a, ArraySchema) and isinstance(b, ArraySchema):
        return ArraySchema(items=merge_schemas(a.items, b.items))

    if isinstance(a, StringSchema) and isinstance(b, StringSchema):
        return StringSchema(format=a.format if a.format == b.format else None)

    return a
