"""Tests for producer/consumer schema compatibility."""

import pytest

from flowgraph.models.schema import (
    ArraySchema,
    BooleanSchema,
    NullSchema,
    NumberSchema,
    ObjectSchema,
    StringSchema,
    UnknownSchema,
    open_object_schema,
)
from flowgraph.models.validation import CompatibilityStatus, IssueSeverity, IssueType
from flowgraph.schema.compatibility import check_compatibility


def obj(required=None, **properties) -> ObjectSchema:
    return ObjectSchema(properties=properties, required=list(properties if required is None else required))


class TestStatus:
    def test_unresolved_side_is_unknown(self):
        assert check_compatibility(None, obj()).status == CompatibilityStatus.unknown
        assert check_compatibility(obj(), None).status == CompatibilityStatus.unknown

    def test_extra_producer_properties_are_fine(self):
        producer = obj(id=NumberSchema(), name=StringSchema(), extra=BooleanSchema())
        consumer = obj(id=NumberSchema())
        result = check_compatibility(producer, consumer)
        assert result.status == CompatibilityStatus.compatible
        assert result.issues == []

    def test_open_consumer_accepts_anything(self):
        for producer in (obj(a=NumberSchema()), StringSchema(), ArraySchema(), NullSchema()):
            result = check_compatibility(producer, open_object_schema())
            assert result.status != CompatibilityStatus.error


class TestIssues:
    def test_missing_required_field(self):
        result = check_compatibility(obj(id=NumberSchema()), obj(id=NumberSchema(), email=StringSchema()))
        assert result.status == CompatibilityStatus.error
        [issue] = result.issues
        assert issue.type == IssueType.missing_field
        assert issue.path == "email"

    def test_primitive_mismatch(self):
        result = check_compatibility(obj(id=StringSchema()), obj(id=NumberSchema()))
        assert result.status == CompatibilityStatus.error
        [issue] = result.issues
        assert issue.type == IssueType.type_mismatch
        assert issue.source_value == "string"
        assert issue.target_value == "number"

    @pytest.mark.parametrize("producer", [NumberSchema(), BooleanSchema()])
    def test_safe_coercion_to_string(self, producer):
        result = check_compatibility(obj(v=producer), obj(v=StringSchema()))
        assert result.status == CompatibilityStatus.compatible

    def test_unknown_producer_field_is_warning(self):
        result = check_compatibility(obj(id=UnknownSchema()), obj(id=NumberSchema()))
        assert result.status == CompatibilityStatus.warning
        assert result.issues[0].type == IssueType.imprecise_type
        assert result.issues[0].severity == IssueSeverity.warning

    def test_null_producer_field_is_warning(self):
        result = check_compatibility(obj(id=NullSchema()), obj(id=NumberSchema()))
        assert result.status == CompatibilityStatus.warning

    def test_format_mismatch_is_warning(self):
        result = check_compatibility(
            obj(at=StringSchema(format="date")),
            obj(at=StringSchema(format="date-time")),
        )
        assert result.status == CompatibilityStatus.warning
        assert result.issues[0].type == IssueType.format_mismatch

    def test_optional_property_mismatch_is_warning(self):
        consumer = obj(required=[], id=NumberSchema())
        result = check_compatibility(obj(id=StringSchema()), consumer)
        assert result.status == CompatibilityStatus.warning


class TestNesting:
    def test_nested_object_path(self):
        producer = obj(user=obj(email=NumberSchema()))
        consumer = obj(user=obj(email=StringSchema(), name=StringSchema()))
        result = check_compatibility(producer, consumer)
        paths = {issue.path for issue in result.issues}
        assert paths == {"user.name"}
        assert result.status == CompatibilityStatus.error

    def test_array_item_path(self):
        producer = obj(items=ArraySchema(items=obj(id=StringSchema())))
        consumer = obj(items=ArraySchema(items=obj(id=NumberSchema())))
        result = check_compatibility(producer, consumer)
        assert [issue.path for issue in result.issues] == ["items[].id"]
        assert result.status == CompatibilityStatus.error

    def test_array_against_object(self):
        result = check_compatibility(obj(items=StringSchema()), obj(items=ArraySchema()))
        assert result.issues[0].type == IssueType.type_mismatch
        assert result.issues[0].path == "items"


class TestProperties:
    @pytest.mark.parametrize(
        "producer",
        [
            obj(a=StringSchema()),
            StringSchema(),
            NumberSchema(),
            ArraySchema(items=NumberSchema()),
            UnknownSchema(),
            NullSchema(),
            obj(nested=obj(x=BooleanSchema())),
        ],
    )
    def test_consumer_without_required_never_errors(self, producer):
        consumer = ObjectSchema(
            properties={"a": NumberSchema(), "nested": obj(x=StringSchema(), y=NumberSchema())},
            required=[],
        )
        assert check_compatibility(producer, consumer).status != CompatibilityStatus.error
