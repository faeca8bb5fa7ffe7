"""Port type and node type registries with autodiscovery."""

import importlib
import logging
import pkgutil
from typing import Any

from nodal.engine.errors import UnknownType
from nodal.nodes.base import BaseNode, PortType
from nodal.nodes.ports import builtin_port_types

logger = logging.getLogger(__name__)


class PortTypeRegistry:
    """Maps port type names to their dtype, multi flag and default control."""

    def __init__(self, port_types: dict[str, PortType] | None = None):
        self.port_types: dict[str, PortType] = (
            builtin_port_types() if port_types is None else dict(port_types)
        )

    def get(self, name: str) -> PortType:
        """Get a port type by name. Raises UnknownType if not found."""
        try:
            return self.port_types[name]
        except KeyError:
            raise UnknownType("port", name) from None

    def __contains__(self, name: str) -> bool:
        return name in self.port_types

    def list_types(self) -> dict[str, dict[str, Any]]:
        """Return the whole table (for frontend controls and compatibility hints)."""
        return {name: pt.model_dump() for name, pt in self.port_types.items()}


class NodeRegistry:
    """Discovers and indexes all available node types."""

    def __init__(self, port_types: PortTypeRegistry | None = None):
        self.port_types = port_types or PortTypeRegistry()
        self.node_types: dict[str, type[BaseNode]] = {}

    def discover(self):
        """Scan nodal.nodes.* packages for BaseNode subclasses."""
        import nodal.nodes.inputs as inputs_pkg
        import nodal.nodes.compute as compute_pkg
        import nodal.nodes.generic as generic_pkg
        import nodal.nodes.outputs as outputs_pkg

        for pkg in [inputs_pkg, compute_pkg, generic_pkg, outputs_pkg]:
            for _importer, modname, _ispkg in pkgutil.iter_modules(pkg.__path__):
                mod = importlib.import_module(f"{pkg.__name__}.{modname}")
                for attr_name in dir(mod):
                    attr = getattr(mod, attr_name)
                    if (isinstance(attr, type)
                        and issubclass(attr, BaseNode)
                        and attr is not BaseNode
                        and hasattr(attr, 'meta')):
                        self.register(attr)
        logger.debug("Discovered %d node types", len(self.node_types))

    def register(self, node_cls: type[BaseNode]) -> None:
        """Add a node type. Its port templates must name registered port types."""
        meta = node_cls.meta
        for port in [*meta.inputs.values(), *meta.outputs.values()]:
            self.port_types.get(port.type)
        self.node_types[meta.id] = node_cls

    def get(self, node_type_id: str) -> type[BaseNode]:
        """Get a node class by type ID. Raises UnknownType if not found."""
        try:
            return self.node_types[node_type_id]
        except KeyError:
            raise UnknownType("node", node_type_id) from None

    def __contains__(self, node_type_id: str) -> bool:
        return node_type_id in self.node_types

    def list_meta(self) -> list[dict[str, Any]]:
        """Return metadata for all registered nodes (for frontend palette)."""
        return [cls.meta.model_dump() for cls in self.node_types.values()]


def default_registry() -> NodeRegistry:
    """A freshly discovered registry with the built-in port and node types."""
    registry = NodeRegistry()
    registry.discover()
    return registry
