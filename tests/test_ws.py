"""Tests for the /ws/compute WebSocket endpoint."""

from starlette.testclient import TestClient

from nodal.app import app
from nodal.engine.graph import connect, dump_graph


def _exchange(payload):
    client = TestClient(app)
    with client.websocket_connect("/ws/compute") as ws:
        ws.send_json(payload)

        messages = []
        # Read until the terminal message
        while True:
            msg = ws.receive_json()
            messages.append(msg)
            if msg["type"] in ("graph_done", "error"):
                break
    return messages


def test_ws_compute(registry, make_node):
    graph = {}
    num = make_node(graph, "number", number=4)
    arith = make_node(graph, "arithmetic", right=5, controls={"op": "*"})
    connect(graph, registry, (num.id, "number"), (arith.id, "left"))

    messages = _exchange({"nodes": dump_graph(graph)})
    types = [m["type"] for m in messages]
    assert types == ["node_start", "node_done", "node_start", "node_done", "graph_done"]

    starts = [m["node_id"] for m in messages if m["type"] == "node_start"]
    assert starts == [num.id, arith.id]
    done = [m for m in messages if m["type"] == "node_done"]
    assert done[1]["outputs"] == {"result": 20}

    final = messages[-1]
    assert final["nodes"][arith.id]["outputs"]["result"]["lastValue"] == 20
    assert len(final["hash"]) == 32


def test_ws_invalid_payload():
    messages = _exchange({"bad_key": "bad_value"})
    assert messages == [{"type": "error", "error": "Invalid graph payload"}]


def test_ws_malformed_nodes():
    messages = _exchange({"nodes": {"n1": {"id": "n1"}}})
    assert messages[0]["type"] == "error"
    assert "Invalid graph payload" in messages[0]["error"]


def test_ws_invalid_graph(make_node):
    graph = {}
    make_node(graph, "display")
    messages = _exchange({"nodes": dump_graph(graph)})
    assert [m["type"] for m in messages] == ["error"]
    assert "not connected" in messages[0]["error"]


def test_ws_node_error(registry, make_node):
    graph = {}
    num = make_node(graph, "number", number=1)
    div = make_node(graph, "arithmetic", right=0, controls={"op": "/"})
    disp = make_node(graph, "display")
    connect(graph, registry, (num.id, "number"), (div.id, "left"))
    connect(graph, registry, (div.id, "result"), (disp.id, "number"))

    messages = _exchange({"nodes": dump_graph(graph)})
    types = [m["type"] for m in messages]
    assert "node_error" in types
    assert types[-1] == "error"

    error = next(m for m in messages if m["type"] == "node_error")
    assert error["node_id"] == div.id
    assert "Division by zero" in error["error"]

    # Nothing downstream of the failure ran
    started = [m["node_id"] for m in messages if m["type"] == "node_start"]
    assert disp.id not in started
