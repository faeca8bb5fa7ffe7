"""Built-in port types."""

from nodal.nodes.base import NumberControl, PortType


def builtin_port_types() -> dict[str, PortType]:
    """Return a fresh copy of the built-in port type table."""
    return {
        "number": PortType(dtype="number", label="Number"),
        "numberInput": PortType(dtype="number", label="Number",
                                control=NumberControl(value=0, step=1)),
        "numberList": PortType(dtype="number", label="Numbers", multi=True),
        "boolean": PortType(dtype="boolean", label="Boolean"),
        "string": PortType(dtype="string", label="Text"),
    }
