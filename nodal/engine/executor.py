"""Graph executor: validates a node graph and computes it through a work queue."""

import logging
from collections import deque
from collections.abc import Mapping
from typing import Any, Callable

from pydantic import BaseModel

from nodal.engine.errors import ComputeFailure, InvalidGraph
from nodal.engine.registry import NodeRegistry
from nodal.nodes.base import (
    Graph,
    Multiple,
    Node,
    NodeData,
    Port,
    Resolved,
    Single,
    Value,
)

logger = logging.getLogger(__name__)

_WHITE, _GREY, _BLACK = 0, 1, 2


class GraphExecutor:
    """Evaluates a graph, retrying nodes until all their upstream results exist.

    Nothing is written into the graph unless every node computed successfully.
    """

    def __init__(self, registry: NodeRegistry):
        self.registry = registry

    # ---- Validation ----

    def validate(self, graph: Graph) -> bool:
        return not self.validation_errors(graph)

    def validation_errors(self, graph: Graph) -> list[str]:
        """Every reason the graph cannot be computed, in a stable order."""
        errors: list[str] = []
        for node_id, node in graph.items():
            if node.id != node_id:
                errors.append(f"Node '{node_id}' is stored under a different id ('{node.id}')")
            if node.type not in self.registry:
                errors.append(f"Node '{node_id}' has unknown type '{node.type}'")
            for port_id, inp in node.inputs.items():
                errors.extend(self._port_errors(graph, node_id, port_id, inp, "input"))
                if inp.disabled or inp.type not in self.registry.port_types:
                    continue
                if not inp.connections and self._control_default(inp) is None:
                    errors.append(
                        f"Input '{port_id}' on node '{node_id}' is not connected and has no default"
                    )
            for port_id, out in node.outputs.items():
                errors.extend(self._port_errors(graph, node_id, port_id, out, "output"))

        # Cycle search needs well-formed connections
        if not errors and self.has_cycles(graph):
            errors.append("Graph contains a cycle")
        return errors

    def _port_errors(
        self, graph: Graph, node_id: str, port_id: str, port: Port, side: str,
    ) -> list[str]:
        errors: list[str] = []
        where = f"{side} '{port_id}' on node '{node_id}'"
        if port.type not in self.registry.port_types:
            return [f"Unknown port type '{port.type}' on {where}"]
        if len(set(port.connections)) != len(port.connections):
            errors.append(f"Duplicate connections on {where}")
        if side == "input" and len(port.connections) > 1 \
                and not self.registry.port_types.get(port.type).multi:
            errors.append(f"Single-valued {where} has {len(port.connections)} connections")

        other_side = "outputs" if side == "input" else "inputs"
        for other_id, other_port_id in port.connections:
            other_node = graph.get(other_id)
            if other_node is None:
                errors.append(f"The {where} references missing node '{other_id}'")
                continue
            other = getattr(other_node, other_side).get(other_port_id)
            if other is None:
                errors.append(
                    f"The {where} references missing port '{other_port_id}' on node '{other_id}'"
                )
            elif (node_id, port_id) not in other.connections:
                errors.append(
                    f"Connection between {where} and '{other_id}.{other_port_id}' is one-sided"
                )
        return errors

    def has_cycles(self, graph: Graph) -> bool:
        """Depth-first search over enabled input connections, looking for a back edge."""
        color = dict.fromkeys(graph, _WHITE)
        for start in graph:
            if color[start] != _WHITE:
                continue
            color[start] = _GREY
            stack = [(start, iter(self._upstream(graph[start])))]
            while stack:
                n_id, deps = stack[-1]
                dep = next(deps, None)
                if dep is None:
                    color[n_id] = _BLACK
                    stack.pop()
                elif color.get(dep, _BLACK) == _GREY:
                    logger.debug("Cycle found through node '%s'", dep)
                    return True
                elif color.get(dep) == _WHITE:
                    color[dep] = _GREY
                    stack.append((dep, iter(self._upstream(graph[dep]))))
        return False

    @staticmethod
    def _upstream(node: Node) -> list[str]:
        return [n_id for inp in node.inputs.values() if not inp.disabled
                for n_id, _ in inp.connections]

    # ---- Evaluation ----

    def compute(
        self,
        graph: Graph,
        on_node_start: Callable[[str], None] | None = None,
        on_node_done: Callable[[str, dict[str, Any]], None] | None = None,
    ) -> Graph:
        """Compute every node and refresh all last values in place.

        Raises InvalidGraph before doing any work, or ComputeFailure if a node
        fails; in both cases the graph is left untouched.
        """
        errors = self.validation_errors(graph)
        if errors:
            raise InvalidGraph(errors)

        # Sources: nothing wired into any enabled input
        queue = deque(
            n_id for n_id, node in graph.items()
            if not any(inp.connections for inp in node.inputs.values() if not inp.disabled)
        )
        pending = set(queue)
        results: dict[str, dict[str, Any]] = {}
        resolved_inputs: dict[str, dict[str, Any]] = {}
        misses = 0

        logger.debug("Starting compute of %d nodes with %d sources", len(graph), len(queue))

        while queue:
            n_id = queue.popleft()
            pending.discard(n_id)
            if n_id in results:
                continue
            node = graph[n_id]

            if not self._ready(node, results):
                # Retry once the rest of the queue has had a turn
                queue.append(n_id)
                pending.add(n_id)
                misses += 1
                if misses > len(queue):
                    raise InvalidGraph([f"Evaluation stalled at node '{n_id}'"])
                continue
            misses = 0

            if on_node_start:
                on_node_start(n_id)
            inputs, outputs = self._process(node, results)
            results[n_id] = outputs
            resolved_inputs[n_id] = {pid: r.raw for pid, r in inputs.items()}
            logger.debug("Computed %s (%s): %r", n_id, node.type, outputs)
            if on_node_done:
                on_node_done(n_id, outputs)

            for out in node.outputs.values():
                for d_id, _ in out.connections:
                    if d_id not in pending and d_id not in results:
                        queue.append(d_id)
                        pending.add(d_id)

        # Everything succeeded: publish last values
        for n_id, outputs in results.items():
            node = graph[n_id]
            for pid, raw in resolved_inputs[n_id].items():
                node.inputs[pid].last_value = raw
            for pid, val in outputs.items():
                node.outputs[pid].last_value = val
        return graph

    @staticmethod
    def _ready(node: Node, results: dict[str, dict[str, Any]]) -> bool:
        return all(
            n_id in results and p_id in results[n_id]
            for inp in node.inputs.values() if not inp.disabled
            for n_id, p_id in inp.connections
        )

    def _control_default(self, port: Port) -> Value | None:
        control = self.registry.port_types.get(port.type).control
        return control.value if control is not None else None

    def _port_default(self, port: Port) -> Value | None:
        if port.value is not None:
            return port.value
        return self._control_default(port)

    def _resolve_input(self, port: Port, results: dict[str, dict[str, Any]]) -> Resolved:
        multi = self.registry.port_types.get(port.type).multi
        if port.connections:
            values = [results[n_id][p_id] for n_id, p_id in port.connections]
            return Multiple(tuple(values)) if multi else Single(values[0])
        default = self._port_default(port)
        if multi:
            return Multiple(() if default is None else (default,))
        return Single(default)

    def _process(
        self, node: Node, results: dict[str, dict[str, Any]],
    ) -> tuple[dict[str, Resolved], dict[str, Any]]:
        """Resolve a ready node's inputs, run its compute and check the result."""
        inputs = {pid: self._resolve_input(inp, results)
                  for pid, inp in node.inputs.items() if not inp.disabled}
        controls = {cid: val.model_copy(deep=True) if isinstance(val, BaseModel) else val
                    for cid, val in node.controls.items()}
        defaults = {pid: self._port_default(out) for pid, out in node.outputs.items()}

        node_type = self.registry.get(node.type)()
        try:
            computed = node_type.compute(
                NodeData(inputs=inputs, controls=controls, outputs=dict(defaults))
            )
        except Exception as exc:
            logger.debug("Compute raised for node '%s'", node.id, exc_info=True)
            raise ComputeFailure(node.id, str(exc) or type(exc).__name__) from exc

        if not isinstance(computed, Mapping):
            raise ComputeFailure(node.id, f"compute returned {type(computed).__name__}, not a mapping")
        unknown = sorted(set(computed) - set(node.outputs))
        if unknown:
            raise ComputeFailure(node.id, f"unknown outputs {unknown}")
        missing = sorted(pid for pid, out in node.outputs.items()
                         if not out.disabled and pid not in computed)
        if missing:
            raise ComputeFailure(node.id, f"missing outputs {missing}")

        # Disabled outputs keep their defaults so wiring on them still resolves
        outputs = {pid: computed.get(pid, defaults[pid]) for pid in node.outputs}
        return inputs, outputs
