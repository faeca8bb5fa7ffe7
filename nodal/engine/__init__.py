"""Dataflow graph engine: registries, graph operations, evaluation and hashing."""

from nodal.engine.errors import (
    ComputeFailure,
    GraphError,
    InvalidConnection,
    InvalidGraph,
    UnknownType,
)
from nodal.engine.executor import GraphExecutor
from nodal.engine.graph import (
    GraphState,
    Layout,
    apply_change,
    connect,
    delete_node,
    disconnect,
    dump_graph,
    load_graph,
    new_node,
    reconcile,
)
from nodal.engine.hashing import graph_hash
from nodal.engine.registry import NodeRegistry, PortTypeRegistry, default_registry

__all__ = [
    "ComputeFailure",
    "GraphError",
    "GraphExecutor",
    "GraphState",
    "InvalidConnection",
    "InvalidGraph",
    "Layout",
    "NodeRegistry",
    "PortTypeRegistry",
    "UnknownType",
    "apply_change",
    "connect",
    "default_registry",
    "delete_node",
    "disconnect",
    "dump_graph",
    "graph_hash",
    "load_graph",
    "new_node",
    "reconcile",
]
