"""API routes for flow documents and the node type catalog."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from flowgraph.models.flow import Flow
from flowgraph.models.schema import Schema
from flowgraph.registry.definitions import NodeTypeRegistry
from flowgraph.services.graph import GraphService
from flowgraph_server.dependencies import get_graph_service, get_registry

router = APIRouter()


class CreateFlowRequest(BaseModel):
    """request body for creating a flow."""

    name: str
    app_id: str | None = None
    description: str | None = None


class NodeTypeResponse(BaseModel):
    """a node type as listed in the node library."""

    name: str
    display_name: str
    category: str
    description: str
    input_schema: Schema | None = None
    output_schema: Schema | None = None
    has_dynamic_input: bool
    has_dynamic_output: bool
    default_parameters: dict


@router.get("/flows")
def list_flows(
    app_id: str | None = None,
    service: GraphService = Depends(get_graph_service),
) -> list[Flow]:
    """list flows, optionally only those of one app."""
    return service.list_flows(app_id)


@router.post("/flows")
def create_flow(
    request: CreateFlowRequest,
    service: GraphService = Depends(get_graph_service),
) -> Flow:
    """create an empty flow."""
    return service.create_flow(request.name, request.app_id, request.description)


@router.get("/flows/{flow_id}")
def get_flow(flow_id: str, service: GraphService = Depends(get_graph_service)) -> Flow:
    """get a flow with all of its nodes and connections."""
    return service.get_flow(flow_id)


@router.delete("/flows/{flow_id}")
def delete_flow(flow_id: str, service: GraphService = Depends(get_graph_service)) -> dict:
    """delete a flow."""
    service.delete_flow(flow_id)
    return {"deleted": flow_id}


@router.get("/node-types")
def list_node_types(
    registry: NodeTypeRegistry = Depends(get_registry),
) -> list[NodeTypeResponse]:
    """list every registered node type, ordered by category."""
    order = {info.id: info.order for info in registry.categories}
    definitions = sorted(registry, key=lambda d: (order.get(d.category, 99), d.name))
    return [
        NodeTypeResponse(
            name=d.name,
            display_name=d.display_name,
            category=d.category.value,
            description=d.description,
            input_schema=d.input_schema,
            output_schema=d.output_schema,
            has_dynamic_input=d.has_dynamic_input,
            has_dynamic_output=d.has_dynamic_output,
            default_parameters=dict(d.default_parameters),
        )
        for d in definitions
    ]
