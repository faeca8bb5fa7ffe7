"""Project storage: JSON-on-disk projects and their saved graph states."""

import json
import logging
import os
import re
import shutil
import time
from pathlib import Path

from pydantic import BaseModel, Field

from nodal.engine.graph import GraphState

logger = logging.getLogger(__name__)

_SAFE_NAME = re.compile(r"^[A-Za-z0-9_\-]+$")


class ProjectMeta(BaseModel):
    name: str
    slug: str
    created_at: float = Field(default_factory=time.time)


def default_root() -> Path:
    return Path(os.environ.get("NODAL_DATA_DIR", "nodal_data"))


class ProjectStore:
    def __init__(self, root: Path | None = None):
        self.root = root or default_root()

    def _projects_dir(self) -> Path:
        d = self.root / "projects"
        d.mkdir(parents=True, exist_ok=True)
        return d

    def _graph_path(self, slug: str, name: str) -> Path:
        for part in (slug, name):
            if not _SAFE_NAME.match(part):
                raise ValueError(f"Invalid name: '{part}'")
        return self._projects_dir() / slug / "graphs" / f"{name}.json"

    def list_projects(self) -> list[dict]:
        """List all projects with their metadata."""
        projects = []
        proj_dir = self._projects_dir()
        for p in sorted(proj_dir.iterdir()):
            if p.is_dir():
                meta = self._read_meta(p)
                if meta:
                    projects.append(meta)
        return projects

    def create_project(self, name: str) -> dict:
        """Create a new project directory with metadata."""
        slug = name.strip().lower().replace(" ", "_").replace("-", "_")
        if not _SAFE_NAME.match(slug):
            raise ValueError(f"Invalid project name: '{name}'")
        proj_dir = self._projects_dir() / slug
        if proj_dir.exists():
            raise FileExistsError(f"Project '{slug}' already exists")
        proj_dir.mkdir(parents=True)
        (proj_dir / "graphs").mkdir()
        meta = ProjectMeta(name=name, slug=slug)
        (proj_dir / "meta.json").write_text(meta.model_dump_json(indent=2))
        logger.info("Created project '%s'", slug)
        return meta.model_dump()

    def get_project(self, slug: str) -> dict | None:
        """Get a single project's metadata."""
        proj_dir = self._projects_dir() / slug
        if not _SAFE_NAME.match(slug) or not proj_dir.exists():
            return None
        return self._read_meta(proj_dir)

    def delete_project(self, slug: str) -> bool:
        """Delete a project and all its contents."""
        proj_dir = self._projects_dir() / slug
        if not _SAFE_NAME.match(slug) or not proj_dir.exists():
            return False
        shutil.rmtree(proj_dir)
        logger.info("Deleted project '%s'", slug)
        return True

    # ---- Graph states ----

    def list_graphs(self, slug: str) -> list[str]:
        """List saved graph names in a project."""
        graph_dir = self._projects_dir() / slug / "graphs"
        if not _SAFE_NAME.match(slug) or not graph_dir.exists():
            return []
        return [p.stem for p in sorted(graph_dir.glob("*.json"))]

    def save_graph(self, slug: str, name: str, state: GraphState):
        """Save a graph state (nodes, layout, last computed hash) to a project."""
        path = self._graph_path(slug, name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(state.model_dump_json(indent=2, by_alias=True))

    def load_graph(self, slug: str, name: str) -> GraphState | None:
        """Load a graph state from a project."""
        path = self._graph_path(slug, name)
        if not path.exists():
            return None
        return GraphState.model_validate_json(path.read_text())

    def delete_graph(self, slug: str, name: str) -> bool:
        """Delete a saved graph from a project."""
        path = self._graph_path(slug, name)
        if not path.exists():
            return False
        path.unlink()
        return True

    def _read_meta(self, proj_dir: Path) -> dict | None:
        meta_file = proj_dir / "meta.json"
        if meta_file.exists():
            return json.loads(meta_file.read_text())
        return None
