"""JSON node: exposes the top-level keys of an uploaded JSON object as outputs."""

import json
import logging
import re

from nodal.nodes.base import BaseNode, FileUploadControl, Node, NodeMeta, Port, UploadedFile

logger = logging.getLogger(__name__)

_WORDS = re.compile(r"[A-Z]{2,}(?=[A-Z][a-z]|\d|\b|_)|[A-Z]?[a-z]+|[A-Z]+|\d+")


def kebab_case(key: str) -> str:
    """`fooBar Baz_qux` -> `foo-bar-baz-qux`."""
    words = _WORDS.findall(key)
    return "-".join(w.lower() for w in words) or key


def _port_type(value) -> str | None:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return None


class JsonNode(BaseNode):
    meta = NodeMeta(
        id="json",
        label="JSON",
        category="inputs",
        description="For uploading JSON data.",
        controls={"file": FileUploadControl()},
    )

    def on_change(self, node: Node) -> Node:
        upload = node.controls.get("file")
        if isinstance(upload, dict):
            upload = UploadedFile.model_validate(upload)
        if not isinstance(upload, UploadedFile) or not upload.data:
            return node

        try:
            data = json.loads(upload.data)
        except ValueError as exc:
            logger.warning("Node '%s': cannot parse %s: %s", node.id, upload.file or "upload", exc)
            return node
        if not isinstance(data, dict):
            logger.warning("Node '%s': %s is not a JSON object", node.id, upload.file or "upload")
            return node

        active: set[str] = set()
        for key, value in data.items():
            port_type = _port_type(value)
            if port_type is None:
                logger.debug("Node '%s': skipping non-scalar key '%s'", node.id, key)
                continue
            port_id = kebab_case(key)
            port = node.outputs.get(port_id)
            if port is not None and port.type != port_type and port.connections:
                logger.warning("Node '%s': key '%s' changed type; its wired port stays disabled",
                               node.id, key)
                continue
            if port is None or port.type != port_type:
                node.outputs[port_id] = Port(type=port_type, label=key, value=value)
            else:
                port.label = key
                port.value = value
            active.add(port_id)

        # Ports for vanished keys are disabled, never dropped, so wiring survives
        for port_id, port in node.outputs.items():
            port.disabled = port_id not in active
        return node
