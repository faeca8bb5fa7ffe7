"""Errors raised by the graph engine."""


class GraphError(Exception):
    """Base class for all engine errors."""


class UnknownType(GraphError, KeyError):
    """A node or port type name that is not registered."""

    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"Unknown {kind} type: '{name}'")

    def __str__(self) -> str:
        # KeyError would quote the whole message otherwise
        return self.args[0]


class InvalidGraph(GraphError, ValueError):
    """The graph failed validation; nothing was computed."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("Graph is invalid: " + "; ".join(self.errors))


class ComputeFailure(GraphError, RuntimeError):
    """A node's compute raised or returned an inconsistent result."""

    def __init__(self, node_id: str, message: str):
        self.node_id = node_id
        super().__init__(f"Node '{node_id}' failed: {message}")


class InvalidConnection(GraphError, ValueError):
    """A connection request between two ports that cannot be joined."""
