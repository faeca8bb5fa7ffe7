import pytest

from nodal.engine.errors import UnknownType
from nodal.engine.registry import NodeRegistry, PortTypeRegistry
from nodal.nodes.base import BaseNode, NodeData, NodeMeta, NodePort, PortType


BUILTIN_TYPES = {
    "comment", "number", "json", "arithmetic", "comparison",
    "reduce", "expression", "display", "flag", "chart",
}


def test_base_node_keeps_outputs():
    """A node type without its own compute returns its outputs unchanged."""
    node = BaseNode()
    data = NodeData(outputs={"x": 3})
    assert node.compute(data) == {"x": 3}


def test_node_meta_pydantic():
    """NodeMeta should be a valid Pydantic model."""
    meta = NodeMeta(id="test", label="Test", category="compute")
    data = meta.model_dump()
    assert data["id"] == "test"
    assert data["inputs"] == {}
    assert data["resizable"] is False


def test_discover_builtin_types(registry):
    assert set(registry.node_types) == BUILTIN_TYPES


def test_list_meta_has_palette_fields(registry):
    metas = {m["id"]: m for m in registry.list_meta()}
    assert metas["arithmetic"]["label"] == "Arithmetic"
    assert metas["arithmetic"]["category"] == "compute"
    ops = [o["value"] for o in metas["arithmetic"]["controls"]["op"]["options"]]
    assert ops == ["+", "-", "/", "*"]


def test_unknown_node_type(registry):
    with pytest.raises(UnknownType, match="nope"):
        registry.get("nope")


def test_unknown_type_is_key_error(registry):
    with pytest.raises(KeyError):
        registry.get("nope")


def test_port_types():
    ports = PortTypeRegistry()
    assert ports.get("numberInput").dtype == "number"
    assert ports.get("numberInput").control.value == 0
    assert ports.get("numberList").multi is True
    assert ports.get("number").control is None
    with pytest.raises(UnknownType):
        ports.get("vector")


def test_registries_are_independent():
    """Two registries never share their tables."""
    a = NodeRegistry()
    b = NodeRegistry()
    a.port_types.port_types["vector"] = PortType(dtype="vector")
    assert "vector" not in b.port_types


def test_register_rejects_unknown_port_type():
    class BadNode(BaseNode):
        meta = NodeMeta(
            id="bad", label="Bad", category="compute",
            inputs={"in": NodePort(type="matrix")},
        )

    reg = NodeRegistry()
    with pytest.raises(UnknownType, match="matrix"):
        reg.register(BadNode)
    assert "bad" not in reg


def test_register_custom_type():
    class DoubleNode(BaseNode):
        meta = NodeMeta(
            id="double", label="Double", category="compute",
            inputs={"x": NodePort(type="numberInput")},
            outputs={"y": NodePort(type="number")},
        )

        def compute(self, data):
            return {"y": data.single("x") * 2}

    reg = NodeRegistry()
    reg.register(DoubleNode)
    assert reg.get("double") is DoubleNode
