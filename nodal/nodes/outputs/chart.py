"""Chart output node: turns its connected values into an Apache ECharts option spec."""

from typing import Any

from nodal.nodes.base import BaseNode, Node, NodeMeta, NodePort, SelectControl, TextControl


class ChartNode(BaseNode):
    meta = NodeMeta(
        id="chart",
        label="Chart",
        category="outputs",
        description="Simple chart",
        inputs={"number": NodePort(type="numberList", label="Values")},
        controls={
            "chart_type": SelectControl.of("bar", "line", "pie"),
            "title": TextControl(value=""),
        },
    )

    def render(self, node: Node) -> dict[str, Any]:
        port = node.inputs["number"]
        values = port.last_value if isinstance(port.last_value, list) else []
        # Bars are named after the source port of each connection
        names = [port_id for _node_id, port_id in port.connections][:len(values)]
        return _build_options(
            str(node.controls.get("chart_type") or "bar"),
            names,
            values[:len(names)],
            str(node.controls.get("title") or ""),
        )


def _build_options(
    chart_type: str,
    x_data: list,
    y_data: list,
    title: str,
) -> dict[str, Any]:
    """Build an ECharts option spec for the given chart type."""
    opts: dict[str, Any] = {}

    if title:
        opts["title"] = {"text": title}

    if chart_type in ("bar", "line"):
        opts["xAxis"] = {"type": "category", "data": list(x_data)}
        opts["yAxis"] = {"type": "value"}
        opts["series"] = [{"type": chart_type, "data": list(y_data)}]
        opts["tooltip"] = {"trigger": "axis"}

    elif chart_type == "pie":
        opts["series"] = [
            {
                "type": "pie",
                "data": [
                    {"name": name, "value": value}
                    for name, value in zip(x_data, y_data)
                ],
            }
        ]
        opts["tooltip"] = {"trigger": "item"}

    else:
        raise ValueError(f"Unknown chart type: {chart_type}")

    return opts
