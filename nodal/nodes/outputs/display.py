"""Display node: shows the value it is wired to."""

from nodal.nodes.base import BaseNode, NodeMeta, NodePort


class DisplayNode(BaseNode):
    meta = NodeMeta(
        id="display",
        label="Display",
        category="outputs",
        description="Displays a number value.",
        inputs={"number": NodePort(type="number", label="")},
    )
