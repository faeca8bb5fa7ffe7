"""Number node: a hand-entered constant."""

from nodal.nodes.base import BaseNode, NodeMeta, NodePort


class NumberNode(BaseNode):
    # No compute: the output's own editable value is the result
    meta = NodeMeta(
        id="number",
        label="Number",
        category="inputs",
        description="A simple number node.",
        outputs={"number": NodePort(type="numberInput", label="Number")},
    )
