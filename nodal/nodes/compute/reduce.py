"""Reduce node: folds any number of connected values into one."""

import math
from typing import Any

from nodal.nodes.base import BaseNode, NodeData, NodeMeta, NodePort, SelectControl


class ReduceNode(BaseNode):
    meta = NodeMeta(
        id="reduce",
        label="Reduce",
        category="compute",
        description="Reduces numerical inputs",
        inputs={"number": NodePort(type="numberList", label="Values")},
        outputs={"result": NodePort(type="number", label="Result")},
        controls={"op": SelectControl.of("sum", "prod", labels={"sum": "Sum", "prod": "Product"})},
    )

    def compute(self, data: NodeData) -> dict[str, Any]:
        values = data.multiple("number")
        if any(v is None for v in values):
            raise ValueError("Cannot reduce a missing value")
        op = data.controls["op"]
        if op == "sum":
            return {"result": sum(values)}
        if op == "prod":
            return {"result": math.prod(values)}
        raise ValueError(f"Unknown operator: {op}")
