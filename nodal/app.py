"""FastAPI entry point for Nodal."""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nodal import __version__
from nodal.api.graphs import router as graphs_router
from nodal.api.nodes import get_registry, router as nodes_router
from nodal.api.projects import router as projects_router
from nodal.api.ws import router as ws_router


def _cors_origins() -> list[str]:
    raw = os.environ.get("NODAL_CORS_ORIGINS", "http://localhost:5173")
    return [o.strip() for o in raw.split(",") if o.strip()]


app = FastAPI(title="Nodal", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(graphs_router)
app.include_router(nodes_router)
app.include_router(projects_router)
app.include_router(ws_router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "version": __version__,
            "nodeTypes": len(get_registry().node_types)}


def main():
    import uvicorn

    logging.basicConfig(
        level=os.environ.get("NODAL_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("nodal.app:app", host="0.0.0.0", port=8000, reload=True)


if __name__ == "__main__":
    main()
