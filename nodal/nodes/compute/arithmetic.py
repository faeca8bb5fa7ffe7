"""Arithmetic node: one binary operation on two numbers."""

import operator
from typing import Any

from nodal.nodes.base import BaseNode, NodeData, NodeMeta, NodePort, SelectControl

_OPS = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
}


class ArithmeticNode(BaseNode):
    meta = NodeMeta(
        id="arithmetic",
        label="Arithmetic",
        category="compute",
        description="Simple arithmetic",
        inputs={
            "left": NodePort(type="numberInput", label="Left"),
            "right": NodePort(type="numberInput", label="Right"),
        },
        outputs={"result": NodePort(type="number", label="Result")},
        controls={"op": SelectControl.of("+", "-", "/", "*")},
    )

    def compute(self, data: NodeData) -> dict[str, Any]:
        op = data.controls["op"]
        op_fn = _OPS.get(op)
        if op_fn is None:
            raise ValueError(f"Unknown operator: {op}")
        left, right = data.single("left"), data.single("right")
        if op == "/" and right == 0:
            raise ValueError("Division by zero")
        return {"result": op_fn(left, right)}
