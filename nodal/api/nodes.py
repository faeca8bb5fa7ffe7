"""Node types API: palette metadata, port types and node instantiation."""

from fastapi import APIRouter, HTTPException

from nodal.engine.errors import UnknownType
from nodal.engine.graph import new_node
from nodal.engine.registry import NodeRegistry, default_registry

router = APIRouter(prefix="/api/nodes", tags=["nodes"])

_registry: NodeRegistry | None = None


def get_registry() -> NodeRegistry:
    global _registry
    if _registry is None:
        _registry = default_registry()
    return _registry


@router.get("")
def list_node_types():
    """Return metadata for all available node types."""
    return get_registry().list_meta()


@router.get("/ports")
def list_port_types():
    """Return every port type with its dtype, multi flag and default control."""
    return get_registry().port_types.list_types()


@router.post("/{type_id}", status_code=201)
def create_node(type_id: str):
    """Instantiate a fresh node of the given type."""
    try:
        node = new_node(get_registry(), type_id)
    except UnknownType as e:
        raise HTTPException(status_code=404, detail=str(e))
    return node.model_dump(mode="json", by_alias=True)
