"""Base node definitions: values, controls, ports and the node class contract."""

from dataclasses import dataclass, field
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

Value = bool | int | float | str

# (node id, port id)
PortAddress = tuple[str, str]


# ---- Controls ----

class RangeControl(BaseModel):
    type: Literal["range"] = "range"
    min: float = 0
    max: float = 100
    step: float = 1
    value: float = 0


class NumberControl(BaseModel):
    type: Literal["number"] = "number"
    step: float = 1
    value: float = 0


class TextControl(BaseModel):
    type: Literal["text"] = "text"
    value: str = ""


class EditTextControl(BaseModel):
    type: Literal["edit-text"] = "edit-text"
    value: str = ""


class UploadedFile(BaseModel):
    """Raw contents of a file picked in a file-upload control."""
    file: str = ""
    data: str = ""


class FileUploadControl(BaseModel):
    type: Literal["file"] = "file"
    value: UploadedFile | None = None


class SelectOption(BaseModel):
    label: str
    value: str


class SelectControl(BaseModel):
    type: Literal["select"] = "select"
    options: list[SelectOption] = Field(default_factory=list)
    value: str = ""

    @classmethod
    def of(cls, *values: str, default: str | None = None,
           labels: dict[str, str] | None = None) -> "SelectControl":
        """Build a select whose option labels default to their values."""
        labels = labels or {}
        return cls(
            options=[SelectOption(label=labels.get(v, v), value=v) for v in values],
            value=default if default is not None else values[0],
        )


Control = Annotated[
    Union[RangeControl, NumberControl, TextControl, EditTextControl,
          FileUploadControl, SelectControl],
    Field(discriminator="type"),
]

# What a live node stores per control: the raw value only
ControlValue = Value | UploadedFile | None


# ---- Ports ----

class PortType(BaseModel):
    """Registry entry for a port type name."""
    dtype: str
    label: str = ""
    multi: bool = False
    control: Control | None = None


class NodePort(BaseModel):
    """Port template declared by a node type."""
    type: str
    label: str = ""
    disabled: bool = False


class Port(NodePort):
    """Live port on a node instance."""
    model_config = ConfigDict(populate_by_name=True)

    connections: list[PortAddress] = Field(default_factory=list)
    value: Value | None = None
    last_value: Value | list[Value | None] | None = Field(default=None, alias="lastValue")


# ---- Nodes ----

class NodeMeta(BaseModel):
    """Static template describing a node type for the engine and the palette."""
    id: str                                          # e.g. "arithmetic"
    label: str                                       # e.g. "Arithmetic"
    category: str                                    # "inputs" | "compute" | "outputs" | "generic"
    description: str = ""
    resizable: bool = False
    inputs: dict[str, NodePort] = Field(default_factory=dict)
    outputs: dict[str, NodePort] = Field(default_factory=dict)
    controls: dict[str, Control] = Field(default_factory=dict)


class Node(BaseModel):
    """Live node instance owned by a graph."""
    id: str
    type: str
    label: str
    inputs: dict[str, Port] = Field(default_factory=dict)
    outputs: dict[str, Port] = Field(default_factory=dict)
    controls: dict[str, ControlValue] = Field(default_factory=dict)
    comments: str | None = None


Graph = dict[str, Node]


# ---- Compute payload ----

@dataclass(frozen=True)
class Single:
    """Resolved value of an ordinary input port."""
    value: Value | None

    @property
    def raw(self) -> Value | None:
        return self.value


@dataclass(frozen=True)
class Multiple:
    """Resolved values of a multi input, in connection order."""
    values: tuple[Value | None, ...] = ()

    @property
    def raw(self) -> list[Value | None]:
        return list(self.values)


Resolved = Single | Multiple


@dataclass
class NodeData:
    """Everything a node's compute sees."""
    inputs: dict[str, Resolved] = field(default_factory=dict)
    controls: dict[str, ControlValue] = field(default_factory=dict)
    outputs: dict[str, Value | None] = field(default_factory=dict)

    def single(self, port_id: str) -> Value | None:
        resolved = self.inputs[port_id]
        if not isinstance(resolved, Single):
            raise TypeError(f"Input '{port_id}' holds multiple values")
        return resolved.value

    def multiple(self, port_id: str) -> list[Value | None]:
        resolved = self.inputs[port_id]
        if not isinstance(resolved, Multiple):
            raise TypeError(f"Input '{port_id}' holds a single value")
        return list(resolved.values)


class BaseNode:
    """Base class for all node types.

    Subclasses must define a `meta` class attribute (NodeMeta) and may override
    `compute`, `on_change`, `style` and `render`.
    """

    meta: NodeMeta  # subclasses define this

    def compute(self, data: NodeData) -> dict[str, Any]:
        """Return the node's outputs. Nodes without a computation keep their defaults."""
        return dict(data.outputs)

    def on_change(self, node: Node) -> Node:
        """Reconcile the node's ports with its controls or uploaded data.

        Receives a private copy and must be idempotent. Ports are never removed,
        only disabled, so existing connections survive.
        """
        return node

    def style(self, node: Node) -> dict[str, str]:
        """CSS-like style overrides for the node's box."""
        return {}

    def render(self, node: Node) -> dict[str, Any] | None:
        """Extra content (e.g. a chart option spec) shown inside the node."""
        return None
