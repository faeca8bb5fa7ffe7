"""Comparison node: compares two numbers into a boolean."""

from typing import Any

from nodal.nodes.base import BaseNode, NodeData, NodeMeta, NodePort, SelectControl

# Tolerance of the "approximately equal" operator
APPROX_TOLERANCE = 0.1

_OPS = {
    "eq": lambda a, b: a == b,
    "aeq": lambda a, b: abs(a - b) < APPROX_TOLERANCE,
    "neq": lambda a, b: a != b,
    "gt": lambda a, b: a > b,
    "geq": lambda a, b: a >= b,
    "lt": lambda a, b: a < b,
    "leq": lambda a, b: a <= b,
}

_LABELS = {
    "eq": "==", "aeq": "~=", "neq": "!=",
    "gt": ">", "geq": ">=", "lt": "<", "leq": "<=",
}


class ComparisonNode(BaseNode):
    meta = NodeMeta(
        id="comparison",
        label="Comparison",
        category="compute",
        description="Compares two numerical values",
        inputs={
            "left": NodePort(type="numberInput", label="Left"),
            "right": NodePort(type="numberInput", label="Right"),
        },
        outputs={"result": NodePort(type="boolean", label="Result")},
        controls={"op": SelectControl.of(*_OPS, labels=_LABELS)},
    )

    def compute(self, data: NodeData) -> dict[str, Any]:
        op = data.controls["op"]
        op_fn = _OPS.get(op)
        if op_fn is None:
            raise ValueError(f"Unknown operator: {op}")
        return {"result": bool(op_fn(data.single("left"), data.single("right")))}
