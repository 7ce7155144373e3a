"""API routes for node schemas, validation and live API tests."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from flowgraph.models.validation import (
    ApiTestResult,
    ConnectionValidation,
    FlowValidationReport,
    NodeSchemaInfo,
    NodeTypeSchemaInfo,
    ResolveSchemaResult,
)
from flowgraph.services.schema_service import SchemaService
from flowgraph_server.dependencies import get_schema_service

router = APIRouter()


class ResolveSchemaRequest(BaseModel):
    """sample response as a JSON value or a JSON string."""

    sample_response: Any = None


class ValidateConnectionRequest(BaseModel):
    source_node_id: str
    target_node_id: str


class TestApiCallRequest(BaseModel):
    """mock values are keyed by upstream node slug."""

    mock_values: dict[str, Any] | None = None
    save_schema: bool = False


@router.get("/flows/{flow_id}/nodes/{node_id}/schema")
def get_node_schema(
    flow_id: str,
    node_id: str,
    service: SchemaService = Depends(get_schema_service),
) -> NodeSchemaInfo:
    return service.get_node_schema(flow_id, node_id)


@router.get("/flows/{flow_id}/schemas")
def get_flow_schemas(
    flow_id: str,
    service: SchemaService = Depends(get_schema_service),
) -> list[NodeSchemaInfo]:
    """resolved schemas of every node in a flow."""
    return service.get_flow_schemas(flow_id)


@router.get("/node-types/{node_type}/schema")
def get_node_type_schema(
    node_type: str,
    service: SchemaService = Depends(get_schema_service),
) -> NodeTypeSchemaInfo:
    return service.get_node_type_schema(node_type)


@router.post("/flows/{flow_id}/nodes/{node_id}/schema/resolve")
def resolve_schema(
    flow_id: str,
    node_id: str,
    request: ResolveSchemaRequest,
    service: SchemaService = Depends(get_schema_service),
) -> ResolveSchemaResult:
    return service.resolve_schema(flow_id, node_id, request.sample_response)


@router.get("/flows/{flow_id}/validation")
def validate_flow(
    flow_id: str,
    service: SchemaService = Depends(get_schema_service),
) -> FlowValidationReport:
    return service.validate_flow(flow_id)


@router.post("/flows/{flow_id}/connections/validate")
def validate_connection(
    flow_id: str,
    request: ValidateConnectionRequest,
    service: SchemaService = Depends(get_schema_service),
) -> ConnectionValidation:
    """check a prospective connection before creating it."""
    return service.validate_connection(flow_id, request.source_node_id, request.target_node_id)


@router.post("/flows/{flow_id}/nodes/{node_id}/test")
def test_api_call(
    flow_id: str,
    node_id: str,
    request: TestApiCallRequest,
    service: SchemaService = Depends(get_schema_service),
) -> ApiTestResult:
    """execute an API call node against the real endpoint."""
    return service.test_api_call(
        flow_id,
        node_id,
        mock_values=request.mock_values,
        save_schema=request.save_schema,
    )
