"""WebSocket endpoint: computes a graph with per-node status updates."""

import asyncio
import queue
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from nodal.api.nodes import get_registry
from nodal.engine.errors import ComputeFailure, GraphError
from nodal.engine.executor import GraphExecutor
from nodal.engine.graph import dump_graph, load_graph
from nodal.engine.hashing import graph_hash

router = APIRouter()


@router.websocket("/ws/compute")
async def ws_compute(ws: WebSocket):
    """Compute a graph over WebSocket, streaming per-node status messages."""
    await ws.accept()

    try:
        payload = await ws.receive_json()
    except WebSocketDisconnect:
        return

    if not isinstance(payload, dict) or not isinstance(payload.get("nodes"), dict):
        await ws.send_json({"type": "error", "error": "Invalid graph payload"})
        await ws.close()
        return
    try:
        graph = load_graph(payload["nodes"])
    except ValidationError as exc:
        await ws.send_json({"type": "error", "error": f"Invalid graph payload: {exc}"})
        await ws.close()
        return

    # Queue for sync callbacks -> async WebSocket sender
    msg_queue: queue.Queue[dict[str, Any]] = queue.Queue()

    def on_node_start(node_id: str) -> None:
        msg_queue.put({"type": "node_start", "node_id": node_id})

    def on_node_done(node_id: str, outputs: dict[str, Any]) -> None:
        msg_queue.put({"type": "node_done", "node_id": node_id, "outputs": outputs})

    executor = GraphExecutor(get_registry())

    # Run executor in a thread (it is synchronous)
    async def run_executor():
        return await asyncio.to_thread(
            executor.compute,
            graph,
            on_node_start=on_node_start,
            on_node_done=on_node_done,
        )

    executor_task = asyncio.create_task(run_executor())

    # Drain messages from the queue until executor finishes
    try:
        while not executor_task.done():
            try:
                msg = await asyncio.to_thread(msg_queue.get, timeout=0.05)
                await ws.send_json(msg)
            except queue.Empty:
                continue

        while not msg_queue.empty():
            await ws.send_json(msg_queue.get_nowait())

        try:
            nodes = await executor_task
        except GraphError as exc:
            if isinstance(exc, ComputeFailure):
                await ws.send_json({"type": "node_error", "node_id": exc.node_id,
                                    "error": str(exc)})
            await ws.send_json({"type": "error", "error": str(exc)})
        else:
            await ws.send_json({
                "type": "graph_done",
                "nodes": dump_graph(nodes),
                "hash": graph_hash(nodes),
            })
    except WebSocketDisconnect:
        executor_task.cancel()
        return

    await ws.close()
