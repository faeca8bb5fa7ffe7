"""Graph data structure: node instantiation, connections and reconciliation."""

import logging
import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from nodal.engine.errors import InvalidConnection
from nodal.engine.registry import NodeRegistry
from nodal.nodes.base import Graph, Node, NodePort, Port, PortAddress

logger = logging.getLogger(__name__)

# onChange hooks must settle well before this
_MAX_RECONCILE_ROUNDS = 10

_graph_adapter = TypeAdapter(Graph)


class Layout(BaseModel):
    """On-screen box of a node. Opaque to the engine."""
    x: float = 0
    y: float = 0
    w: float | None = None
    h: float | None = None


class GraphState(BaseModel):
    """Persisted editor session: the graph plus UI layout and last compute hash."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    nodes: Graph = Field(default_factory=dict)
    layout: dict[str, Layout] = Field(default_factory=dict)
    last_computed_hash: str | None = Field(default=None, alias="lastComputedHash")


def load_graph(data: dict[str, Any]) -> Graph:
    """Parse a JSON-shaped `{node_id: node}` mapping."""
    return _graph_adapter.validate_python(data)


def dump_graph(graph: Graph) -> dict[str, Any]:
    """JSON-ready form of a graph, using the wire (camelCase) field names."""
    return {node_id: node.model_dump(mode="json", by_alias=True)
            for node_id, node in graph.items()}


# ---- Instantiation ----

def _new_ports(registry: NodeRegistry, templates: dict[str, NodePort]) -> dict[str, Port]:
    ports: dict[str, Port] = {}
    for port_id, template in templates.items():
        port_type = registry.port_types.get(template.type)
        ports[port_id] = Port(
            type=template.type,
            label=template.label or port_type.label,
            disabled=template.disabled,
            value=port_type.control.value if port_type.control else None,
        )
    return ports


def new_node(registry: NodeRegistry, type_id: str) -> Node:
    """Instantiate a node of the given type with a fresh id."""
    node_cls = registry.get(type_id)
    meta = node_cls.meta
    return Node(
        id=uuid.uuid4().hex,
        type=type_id,
        label=meta.label,
        inputs=_new_ports(registry, meta.inputs),
        outputs=_new_ports(registry, meta.outputs),
        controls={cid: ctrl.model_copy(deep=True).value
                  for cid, ctrl in meta.controls.items()},
    )


# ---- Connections ----

def _port(graph: Graph, addr: PortAddress, side: str) -> Port:
    node_id, port_id = addr
    node = graph.get(node_id)
    if node is None:
        raise InvalidConnection(f"No node '{node_id}'")
    ports = node.outputs if side == "output" else node.inputs
    if port_id not in ports:
        raise InvalidConnection(f"Node '{node_id}' has no {side} port '{port_id}'")
    return ports[port_id]


def _unlink(graph: Graph, from_addr: PortAddress, to_addr: PortAddress) -> bool:
    removed = False
    from_node = graph.get(from_addr[0])
    if from_node is not None and from_addr[1] in from_node.outputs:
        out = from_node.outputs[from_addr[1]]
        if to_addr in out.connections:
            out.connections.remove(to_addr)
            removed = True
    to_node = graph.get(to_addr[0])
    if to_node is not None and to_addr[1] in to_node.inputs:
        inp = to_node.inputs[to_addr[1]]
        if from_addr in inp.connections:
            inp.connections.remove(from_addr)
            removed = True
    return removed


def connect(
    graph: Graph,
    registry: NodeRegistry,
    from_addr: PortAddress,
    to_addr: PortAddress,
) -> list[PortAddress]:
    """Connect output `from_addr` to input `to_addr`.

    A non-multi input drops its existing connections first; the dropped source
    addresses are returned. Connecting an existing pair changes nothing.
    Raises InvalidConnection for missing ports, self-loops or a dtype mismatch.
    """
    from_addr, to_addr = tuple(from_addr), tuple(to_addr)
    if from_addr[0] == to_addr[0]:
        raise InvalidConnection("Cannot connect a node to itself")
    out = _port(graph, from_addr, "output")
    inp = _port(graph, to_addr, "input")

    out_type = registry.port_types.get(out.type)
    in_type = registry.port_types.get(inp.type)
    if out_type.dtype != in_type.dtype:
        raise InvalidConnection(
            f"Cannot connect {out_type.dtype} output to {in_type.dtype} input"
        )

    if from_addr in inp.connections:
        return []

    replaced: list[PortAddress] = []
    if not in_type.multi:
        for prev in list(inp.connections):
            _unlink(graph, prev, to_addr)
            replaced.append(prev)

    out.connections.append(to_addr)
    inp.connections.append(from_addr)
    logger.debug("Connected %s -> %s (replaced %s)", from_addr, to_addr, replaced)
    return replaced


def disconnect(graph: Graph, from_addr: PortAddress, to_addr: PortAddress) -> bool:
    """Remove a connection from both endpoints. Returns False if it did not exist."""
    return _unlink(graph, tuple(from_addr), tuple(to_addr))


def delete_node(graph: Graph, node_id: str) -> bool:
    """Sever every connection touching the node, then drop it from the graph."""
    node = graph.get(node_id)
    if node is None:
        return False
    for port_id, inp in node.inputs.items():
        for src in list(inp.connections):
            _unlink(graph, src, (node_id, port_id))
    for port_id, out in node.outputs.items():
        for dst in list(out.connections):
            _unlink(graph, (node_id, port_id), dst)
    del graph[node_id]
    return True


# ---- Reconciliation ----

def _keep_wired_ports(before: Node, after: Node) -> None:
    # A hook may not drop a connected port; it comes back disabled instead
    for side in ("inputs", "outputs"):
        old_ports, new_ports = getattr(before, side), getattr(after, side)
        for port_id, port in old_ports.items():
            if port_id not in new_ports and port.connections:
                logger.warning("Node '%s' tried to drop connected port '%s'", after.id, port_id)
                new_ports[port_id] = port.model_copy(update={"disabled": True}, deep=True)


def reconcile(registry: NodeRegistry, node: Node) -> Node:
    """Apply the node type's on_change until it settles.

    The input node is never touched; each round works on a deep copy.
    """
    node_type = registry.get(node.type)()
    current = node
    for _ in range(_MAX_RECONCILE_ROUNDS):
        updated = node_type.on_change(current.model_copy(deep=True))
        _keep_wired_ports(current, updated)
        for port in [*updated.inputs.values(), *updated.outputs.values()]:
            registry.port_types.get(port.type)
        if updated == current:
            return updated
        current = updated
    logger.warning("on_change for node '%s' (%s) did not settle", node.id, node.type)
    return current


def apply_change(graph: Graph, registry: NodeRegistry, node_id: str) -> Node:
    """Reconcile one node and store the result in the graph (copy-on-write)."""
    updated = reconcile(registry, graph[node_id])
    graph[node_id] = updated
    return updated
