"""Tests for per-node schema resolution."""

from flowgraph.models.flow import NodeInstance
from flowgraph.models.schema import (
    ArraySchema,
    NumberSchema,
    ObjectSchema,
    SchemaState,
    StringSchema,
    dump_schema,
)
from flowgraph.registry.definitions import NodeCategory, NodeTypeDefinition, NodeTypeRegistry
from flowgraph.schema.inference import infer_schema
from flowgraph.services.resolver import SchemaResolver, merge_over_base


def node(node_type: str, **parameters) -> NodeInstance:
    return NodeInstance(id=f"{node_type}-1", type=node_type, name=node_type, parameters=parameters)


class TestGenericResolution:
    def test_unknown_type_degrades_to_unknown(self, registry):
        info = SchemaResolver(registry).resolve(node("Deprecated"))
        assert info.input_state == SchemaState.unknown
        assert info.output_state == SchemaState.unknown
        assert info.input_schema is None
        assert info.output_schema is None

    def test_static_schemas(self, registry):
        info = SchemaResolver(registry).resolve(node("Return"))
        assert info.input_state == SchemaState.defined
        assert info.input_schema.open is True
        assert info.output_state == SchemaState.unknown

    def test_parameter_function_wins_over_static(self):
        definition = NodeTypeDefinition(
            name="Echo",
            display_name="Echo",
            category=NodeCategory.action,
            output_schema=StringSchema(),
            get_output_schema=lambda params: NumberSchema() if params.get("numeric") else None,
        )
        resolver = SchemaResolver(NodeTypeRegistry([definition]))

        defined = resolver.resolve(node("Echo", numeric=True))
        assert defined.output_state == SchemaState.defined
        assert defined.output_schema == NumberSchema()

        undefined = resolver.resolve(node("Echo"))
        assert undefined.output_state == SchemaState.unknown
        assert undefined.output_schema is None

    def test_code_transform_uses_stored_schema(self, registry):
        resolver = SchemaResolver(registry)
        assert resolver.resolve(node("CodeTransform")).output_state == SchemaState.unknown

        stored = dump_schema(ObjectSchema(properties={"total": NumberSchema()}, required=["total"]))
        info = resolver.resolve(node("CodeTransform", resolved_output_schema=stored))
        assert info.output_state == SchemaState.defined
        assert info.output_schema.properties["total"] == NumberSchema()


class TestTriggerStrategy:
    def test_output_from_declared_parameters(self, registry):
        trigger = node(
            "UserIntent",
            parameters=[
                {"name": "city", "type": "string"},
                {"name": "days", "type": "integer", "optional": True},
                {"name": "metric", "type": "boolean"},
                {"type": "string"},
            ],
        )
        info = SchemaResolver(registry).resolve(trigger)
        schema = info.output_schema
        assert info.output_state == SchemaState.defined
        assert schema.properties["city"] == StringSchema()
        assert schema.properties["days"] == NumberSchema()
        assert schema.properties["metric"].kind == "boolean"
        assert {"type", "triggered", "tool_name"} <= set(schema.properties)
        assert schema.required == ["type", "triggered", "tool_name", "city", "metric"]

    def test_trigger_without_parameters_is_defined(self, registry):
        info = SchemaResolver(registry).resolve(node("UserIntent"))
        assert info.output_state == SchemaState.defined
        assert set(info.output_schema.properties) == {"type", "triggered", "tool_name"}


class TestApiCallStrategy:
    def test_pending_until_sample_resolved(self, registry):
        info = SchemaResolver(registry).resolve(node("ApiCall", url="https://api.example.com"))
        assert info.output_state == SchemaState.pending
        assert "_execution" in info.output_schema.properties

    def test_stored_schema_merged_over_base(self, registry):
        stored = dump_schema(infer_schema({"id": 1, "name": "x"}))
        info = SchemaResolver(registry).resolve(node("ApiCall", resolved_output_schema=stored))
        schema = info.output_schema
        assert info.output_state == SchemaState.defined
        assert schema.properties["id"] == NumberSchema()
        assert schema.properties["name"] == StringSchema()
        assert "status" in schema.properties
        assert {"id", "name", "type", "_execution"} <= set(schema.required)

    def test_malformed_stored_schema_stays_pending(self, registry):
        info = SchemaResolver(registry).resolve(
            node("ApiCall", resolved_output_schema={"kind": "bogus"})
        )
        assert info.output_state == SchemaState.pending

    def test_non_object_sample_becomes_body(self):
        base = ObjectSchema(properties={"type": StringSchema()}, required=["type"])
        merged = merge_over_base(base, ArraySchema(items=NumberSchema()))
        assert merged.properties["body"] == ArraySchema(items=NumberSchema())
        assert merged.required == ["type"]


class TestRegistryComponentStrategy:
    def test_input_from_parameters_output_open(self, registry):
        input_schema = dump_schema(ObjectSchema(properties={"title": StringSchema()}, required=["title"]))
        info = SchemaResolver(registry).resolve(node("RegistryComponent", input_schema=input_schema))
        assert info.input_state == SchemaState.defined
        assert info.input_schema.required == ["title"]
        assert info.output_state == SchemaState.defined
        assert info.output_schema.open is True

    def test_missing_input_schema_is_unknown(self, registry):
        info = SchemaResolver(registry).resolve(node("RegistryComponent"))
        assert info.input_state == SchemaState.unknown
        assert info.output_schema.open is True
