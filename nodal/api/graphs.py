"""Graph API: validate, hash, compute and edit graphs sent by the editor."""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from nodal.api.nodes import get_registry
from nodal.engine.errors import GraphError, InvalidConnection, UnknownType
from nodal.engine.executor import GraphExecutor
from nodal.engine.graph import apply_change, connect, delete_node, disconnect, dump_graph
from nodal.engine.hashing import graph_hash
from nodal.nodes.base import Graph, PortAddress

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/graphs", tags=["graphs"])


class GraphPayload(BaseModel):
    nodes: Graph = Field(default_factory=dict)


class ConnectionPayload(GraphPayload):
    model_config = ConfigDict(populate_by_name=True)

    from_addr: PortAddress = Field(alias="from")
    to_addr: PortAddress = Field(alias="to")


class NodeIdPayload(GraphPayload):
    model_config = ConfigDict(populate_by_name=True)

    node_id: str = Field(alias="nodeId")


@router.post("/validate")
def validate_graph(payload: GraphPayload):
    errors = GraphExecutor(get_registry()).validation_errors(payload.nodes)
    return {"valid": not errors, "errors": errors}


@router.post("/hash")
def hash_graph(payload: GraphPayload):
    return {"hash": graph_hash(payload.nodes)}


@router.post("/compute")
def compute_graph(payload: GraphPayload):
    """Compute the graph and return it with refreshed last values and its new hash."""
    executor = GraphExecutor(get_registry())
    try:
        nodes = executor.compute(payload.nodes)
    except GraphError as e:
        logger.info("Compute rejected: %s", e)
        raise HTTPException(status_code=422, detail=str(e))
    return {"nodes": dump_graph(nodes), "hash": graph_hash(nodes)}


@router.post("/connect")
def connect_ports(payload: ConnectionPayload):
    try:
        replaced = connect(payload.nodes, get_registry(), payload.from_addr, payload.to_addr)
    except (InvalidConnection, UnknownType) as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"nodes": dump_graph(payload.nodes), "replaced": replaced}


@router.post("/disconnect")
def disconnect_ports(payload: ConnectionPayload):
    removed = disconnect(payload.nodes, payload.from_addr, payload.to_addr)
    return {"nodes": dump_graph(payload.nodes), "removed": removed}


@router.post("/delete-node")
def remove_node(payload: NodeIdPayload):
    deleted = delete_node(payload.nodes, payload.node_id)
    return {"nodes": dump_graph(payload.nodes), "deleted": deleted}


@router.post("/reconcile")
def reconcile_node(payload: NodeIdPayload):
    """Run a node's on_change after the editor changed its controls."""
    if payload.node_id not in payload.nodes:
        raise HTTPException(status_code=404, detail="Node not found")
    try:
        node = apply_change(payload.nodes, get_registry(), payload.node_id)
    except UnknownType as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"node": node.model_dump(mode="json", by_alias=True),
            "nodes": dump_graph(payload.nodes)}


@router.post("/view")
def view_graph(payload: GraphPayload):
    """Per-node style overrides and rendered content (e.g. chart specs)."""
    registry = get_registry()
    view: dict[str, Any] = {}
    for node_id, node in payload.nodes.items():
        try:
            node_type = registry.get(node.type)()
            view[node_id] = {"style": node_type.style(node), "render": node_type.render(node)}
        except (UnknownType, ValueError) as e:
            view[node_id] = {"style": {}, "render": None, "error": str(e)}
    return view
