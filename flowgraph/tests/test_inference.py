"""Tests for schema inference from sample values."""

import pytest

from flowgraph.models.schema import (
    ArraySchema,
    BooleanSchema,
    NullSchema,
    NumberSchema,
    ObjectSchema,
    StringSchema,
    UnknownSchema,
)
from flowgraph.models.validation import CompatibilityStatus
from flowgraph.schema.compatibility import check_compatibility
from flowgraph.schema.inference import infer_schema, merge_schemas

SAMPLES = [
    None,
    True,
    0,
    3.5,
    "",
    "hello",
    [],
    [1, "a", None],
    {},
    {"id": 1, "name": "x"},
    {"users": [{"id": 1, "tags": ["a"]}, {"id": 2, "email": "b@example.com"}]},
    {"a": {"b": {"c": {"d": {"e": {"f": 1}}}}}},
    [[[]]],
]


class TestPrimitives:
    def test_primitive_kinds(self):
        assert infer_schema(None) == NullSchema()
        assert infer_schema(True) == BooleanSchema()
        assert infer_schema(42) == NumberSchema()
        assert infer_schema(4.2) == NumberSchema()
        assert infer_schema("plain") == StringSchema()

    def test_bool_is_not_a_number(self):
        assert infer_schema(False).kind == "boolean"

    @pytest.mark.parametrize(
        "value, fmt",
        [
            ("2024-01-15T10:30:00Z", "date-time"),
            ("2024-01-15", "date"),
            ("someone@example.com", "email"),
            ("https://example.com/a", "uri"),
            ("123e4567-e89b-12d3-a456-426614174000", "uuid"),
        ],
    )
    def test_string_formats(self, value, fmt):
        assert infer_schema(value) == StringSchema(format=fmt)

    def test_non_json_values_are_unknown(self):
        assert infer_schema(object()) == UnknownSchema()
        assert infer_schema({1, 2}) == UnknownSchema()


class TestObjects:
    def test_object_is_closed_and_all_keys_required(self):
        schema = infer_schema({"id": 1, "name": "x", "deleted_at": None})
        assert isinstance(schema, ObjectSchema)
        assert schema.open is False
        assert schema.required == ["id", "name", "deleted_at"]
        assert schema.properties["id"] == NumberSchema()
        assert schema.properties["name"] == StringSchema()
        assert schema.properties["deleted_at"] == NullSchema()

    def test_nested_depth_limit(self):
        schema = infer_schema({"a": {"b": {"c": 1}}}, max_depth=2)
        inner = schema.properties["a"]
        assert isinstance(inner, ObjectSchema)
        assert inner.properties["b"] == UnknownSchema()


class TestArrays:
    def test_empty_array_items_unknown(self):
        assert infer_schema([]) == ArraySchema(items=UnknownSchema())

    def test_homogeneous_array(self):
        assert infer_schema([1, 2, 3]) == ArraySchema(items=NumberSchema())

    def test_mixed_kinds_fall_back_to_unknown(self):
        assert infer_schema([1, "a"]) == ArraySchema(items=UnknownSchema())

    def test_objects_merge_to_loosest_common_shape(self):
        schema = infer_schema([{"id": 1, "name": "a"}, {"id": 2, "email": "b@example.com"}])
        items = schema.items
        assert isinstance(items, ObjectSchema)
        assert set(items.properties) == {"id", "name", "email"}
        assert items.required == ["id"]

    def test_string_formats_merge(self):
        assert merge_schemas(StringSchema(format="date"), StringSchema(format="date")) == StringSchema(format="date")
        assert merge_schemas(StringSchema(format="date"), StringSchema(format="email")) == StringSchema()


class TestProperties:
    @pytest.mark.parametrize("sample", SAMPLES)
    def test_never_raises_and_is_self_compatible(self, sample):
        schema = infer_schema(sample)
        result = check_compatibility(schema, schema)
        assert result.status == CompatibilityStatus.compatible
