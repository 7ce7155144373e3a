"""API routes for nodes and connections of a flow."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from flowgraph.models.flow import Connection, NodeInstance, Position, TransformerInsertion
from flowgraph.registry.definitions import CODE_TRANSFORM_NODE_TYPE
from flowgraph.services.graph import GraphService
from flowgraph_server.dependencies import get_graph_service

router = APIRouter()


class CreateNodeRequest(BaseModel):
    """request body for adding a node."""

    type: str
    name: str
    position: Position | None = None
    parameters: dict[str, Any] | None = None


class UpdateNodeRequest(BaseModel):
    """partial update; parameters are shallow-merged into the existing ones."""

    name: str | None = None
    position: Position | None = None
    parameters: dict[str, Any] | None = None


class CreateConnectionRequest(BaseModel):
    source_node_id: str
    source_handle: str | None = None
    target_node_id: str
    target_handle: str | None = None


class InsertTransformerRequest(BaseModel):
    source_node_id: str
    target_node_id: str
    transformer_type: str = CODE_TRANSFORM_NODE_TYPE
    position: Position | None = None


@router.get("/flows/{flow_id}/nodes")
def list_nodes(flow_id: str, service: GraphService = Depends(get_graph_service)) -> list[NodeInstance]:
    return service.list_nodes(flow_id)


@router.post("/flows/{flow_id}/nodes")
def create_node(
    flow_id: str,
    request: CreateNodeRequest,
    service: GraphService = Depends(get_graph_service),
) -> NodeInstance:
    return service.add_node(
        flow_id,
        request.type,
        request.name,
        position=request.position,
        parameters=request.parameters,
    )


@router.patch("/flows/{flow_id}/nodes/{node_id}")
def update_node(
    flow_id: str,
    node_id: str,
    request: UpdateNodeRequest,
    service: GraphService = Depends(get_graph_service),
) -> NodeInstance:
    return service.update_node(
        flow_id,
        node_id,
        name=request.name,
        position=request.position,
        parameters=request.parameters,
    )


@router.patch("/flows/{flow_id}/nodes/{node_id}/position")
def update_node_position(
    flow_id: str,
    node_id: str,
    position: Position,
    service: GraphService = Depends(get_graph_service),
) -> NodeInstance:
    """move a node; called on every drag so it skips all other checks."""
    return service.update_node_position(flow_id, node_id, position)


@router.delete("/flows/{flow_id}/nodes/{node_id}")
def delete_node(
    flow_id: str,
    node_id: str,
    service: GraphService = Depends(get_graph_service),
) -> dict:
    """delete a node and its connections."""
    service.delete_node(flow_id, node_id)
    return {"deleted": node_id}


@router.get("/flows/{flow_id}/connections")
def list_connections(
    flow_id: str,
    service: GraphService = Depends(get_graph_service),
) -> list[Connection]:
    return service.list_connections(flow_id)


@router.post("/flows/{flow_id}/connections")
def create_connection(
    flow_id: str,
    request: CreateConnectionRequest,
    service: GraphService = Depends(get_graph_service),
) -> Connection:
    return service.add_connection(
        flow_id,
        request.source_node_id,
        request.target_node_id,
        source_handle=request.source_handle,
        target_handle=request.target_handle,
    )


@router.delete("/flows/{flow_id}/connections/{connection_id}")
def delete_connection(
    flow_id: str,
    connection_id: str,
    service: GraphService = Depends(get_graph_service),
) -> dict:
    service.delete_connection(flow_id, connection_id)
    return {"deleted": connection_id}


@router.post("/flows/{flow_id}/transformers")
def insert_transformer(
    flow_id: str,
    request: InsertTransformerRequest,
    service: GraphService = Depends(get_graph_service),
) -> TransformerInsertion:
    """splice a transform node into an existing connection."""
    return service.insert_transformer(
        flow_id,
        request.source_node_id,
        request.target_node_id,
        transformer_type=request.transformer_type,
        position=request.position,
    )
