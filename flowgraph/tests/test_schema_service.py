"""Tests for the store-backed schema service."""

import httpx
import pytest

from flowgraph.errors import (
    FlowNotFoundError,
    InvalidSampleError,
    NodeNotFoundError,
    NodeTypeNotFoundError,
    WrongNodeTypeError,
)
from flowgraph.models.schema import NumberSchema, SchemaState, StringSchema
from flowgraph.models.validation import FlowStatus
from flowgraph.services.api_probe import ApiCallProbe
from flowgraph.services.schema_service import SchemaService

FLOW = "flow-1"


@pytest.fixture
def schemas(store, registry):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"temperature": 21.5, "city": "Oslo"})

    probe = ApiCallProbe(transport=httpx.MockTransport(handler))
    return SchemaService(store, registry, probe)


class TestResolveSchema:
    def test_api_call_pending_then_defined(self, graph, schemas):
        fetch = graph.add_node(FLOW, "ApiCall", "Fetch", parameters={"url": "https://api.example.com"})
        assert schemas.get_node_schema(FLOW, fetch.id).output_state == SchemaState.pending

        result = schemas.resolve_schema(FLOW, fetch.id, {"id": 1, "name": "x"})
        assert result.resolved is True

        info = schemas.get_node_schema(FLOW, fetch.id)
        assert info.output_state == SchemaState.defined
        assert info.output_schema.properties["id"] == NumberSchema()
        assert info.output_schema.properties["name"] == StringSchema()
        assert {"id", "name"} <= set(info.output_schema.required)

    def test_sample_as_json_string(self, graph, schemas):
        fetch = graph.add_node(FLOW, "ApiCall", "Fetch")
        result = schemas.resolve_schema(FLOW, fetch.id, '{"ok": true}')
        assert result.output_schema.properties["ok"].kind == "boolean"

    def test_sample_required(self, graph, schemas):
        fetch = graph.add_node(FLOW, "ApiCall", "Fetch")
        with pytest.raises(InvalidSampleError):
            schemas.resolve_schema(FLOW, fetch.id, None)

    def test_invalid_json_sample(self, graph, schemas, store):
        fetch = graph.add_node(FLOW, "ApiCall", "Fetch")
        version = store.load(FLOW).version
        with pytest.raises(InvalidSampleError):
            schemas.resolve_schema(FLOW, fetch.id, "{not json")
        assert store.load(FLOW).version == version

    def test_trigger_computed_from_parameters(self, graph, schemas):
        start = graph.add_node(
            FLOW, "UserIntent", "Start", parameters={"parameters": [{"name": "city", "type": "string"}]}
        )
        result = schemas.resolve_schema(FLOW, start.id)
        assert result.resolved is True
        assert "city" in result.output_schema.properties

    def test_other_types_return_current_resolution(self, graph, schemas):
        ret = graph.add_node(FLOW, "Return", "Done")
        result = schemas.resolve_schema(FLOW, ret.id, {"ignored": True})
        assert result.resolved is False
        assert result.output_schema is None

    def test_missing_node(self, schemas):
        with pytest.raises(NodeNotFoundError):
            schemas.resolve_schema(FLOW, "nope", {"a": 1})


class TestLookups:
    def test_flow_schemas(self, graph, schemas):
        graph.add_node(FLOW, "UserIntent", "Start")
        graph.add_node(FLOW, "ApiCall", "Fetch")
        infos = schemas.get_flow_schemas(FLOW)
        assert [i.node_type for i in infos] == ["UserIntent", "ApiCall"]

    def test_missing_flow(self, schemas):
        with pytest.raises(FlowNotFoundError):
            schemas.get_flow_schemas("missing")

    def test_node_type_schema(self, schemas):
        info = schemas.get_node_type_schema("ApiCall")
        assert info.has_dynamic_output is True
        assert info.has_dynamic_input is False
        assert "_execution" in info.output_schema.properties

        with pytest.raises(NodeTypeNotFoundError):
            schemas.get_node_type_schema("Nope")

    def test_validate_flow(self, graph, schemas):
        graph.add_node(FLOW, "CodeTransform", "Reshape")
        assert schemas.validate_flow(FLOW).status == FlowStatus.errors


class TestApiCall:
    def test_saves_schema_on_request(self, graph, schemas):
        fetch = graph.add_node(FLOW, "ApiCall", "Weather", parameters={"url": "https://api.example.com/w"})
        result = schemas.test_api_call(FLOW, fetch.id, save_schema=True)
        assert result.success is True
        assert result.schema_saved is True

        info = schemas.get_node_schema(FLOW, fetch.id)
        assert info.output_state == SchemaState.defined
        body = info.output_schema.properties["body"]
        assert set(body.properties) == {"temperature", "city"}

    def test_does_not_save_by_default(self, graph, schemas):
        fetch = graph.add_node(FLOW, "ApiCall", "Weather", parameters={"url": "https://api.example.com/w"})
        result = schemas.test_api_call(FLOW, fetch.id)
        assert result.schema_saved is False
        assert schemas.get_node_schema(FLOW, fetch.id).output_state == SchemaState.pending

    def test_wrong_node_type(self, graph, schemas):
        ret = graph.add_node(FLOW, "Return", "Done")
        with pytest.raises(WrongNodeTypeError):
            schemas.test_api_call(FLOW, ret.id)
