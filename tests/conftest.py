"""Shared test fixtures for Nodal."""

import pytest

from nodal.engine.executor import GraphExecutor
from nodal.engine.graph import new_node
from nodal.engine.registry import NodeRegistry, default_registry


@pytest.fixture
def registry() -> NodeRegistry:
    """A freshly discovered registry, never shared between tests."""
    return default_registry()


@pytest.fixture
def executor(registry) -> GraphExecutor:
    return GraphExecutor(registry)


@pytest.fixture
def make_node(registry):
    """Create a node, set port values by port id, and add it to a graph."""
    def _make(graph, type_id, controls=None, **port_values):
        node = new_node(registry, type_id)
        for port_id, value in port_values.items():
            ports = node.inputs if port_id in node.inputs else node.outputs
            ports[port_id].value = value
        node.controls.update(controls or {})
        graph[node.id] = node
        return node
    return _make
