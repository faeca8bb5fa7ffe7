"""Staleness hash: a content digest of a whole graph."""

import hashlib
import json

from nodal.engine.graph import dump_graph
from nodal.nodes.base import Graph


def graph_hash(graph: Graph) -> str:
    """MD5 of the graph's canonical JSON form.

    Only an equality oracle for "has anything changed since the last compute";
    last values are part of the digest.
    """
    canonical = json.dumps(dump_graph(graph), sort_keys=True, separators=(",", ":"))
    return hashlib.md5(canonical.encode("utf-8"), usedforsecurity=False).hexdigest()
