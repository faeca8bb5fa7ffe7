"""Flag node: a colored box showing a boolean."""

from nodal.nodes.base import BaseNode, Node, NodeMeta, NodePort

_ON = "#3fc66d"
_OFF = "#ff4040"


class FlagNode(BaseNode):
    meta = NodeMeta(
        id="flag",
        label="Flag",
        category="outputs",
        description="Indicates a boolean value",
        resizable=True,
        inputs={"boolean": NodePort(type="boolean", label="")},
    )

    def style(self, node: Node) -> dict[str, str]:
        color = _ON if node.inputs["boolean"].last_value else _OFF
        return {"background": color, "borderColor": color}
