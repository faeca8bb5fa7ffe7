"""Projects API: CRUD for projects and their saved graph states."""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from nodal.engine.graph import GraphState
from nodal.storage.projects import ProjectStore

router = APIRouter(prefix="/api/projects", tags=["projects"])

_store: ProjectStore | None = None


def get_store() -> ProjectStore:
    global _store
    if _store is None:
        _store = ProjectStore()
    return _store


class CreateProjectRequest(BaseModel):
    name: str


@router.get("")
def list_projects():
    return get_store().list_projects()


@router.post("", status_code=201)
def create_project(body: CreateProjectRequest):
    try:
        return get_store().create_project(body.name)
    except FileExistsError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/{slug}")
def get_project(slug: str):
    project = get_store().get_project(slug)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.delete("/{slug}")
def delete_project(slug: str):
    if not get_store().delete_project(slug):
        raise HTTPException(status_code=404, detail="Project not found")
    return {"status": "deleted"}


@router.get("/{slug}/graphs")
def list_graphs(slug: str):
    return get_store().list_graphs(slug)


@router.get("/{slug}/graphs/{name}")
def get_graph(slug: str, name: str):
    try:
        state = get_store().load_graph(slug, name)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    if state is None:
        raise HTTPException(status_code=404, detail="Graph not found")
    return state.model_dump(mode="json", by_alias=True)


@router.put("/{slug}/graphs/{name}")
def save_graph(slug: str, name: str, body: GraphState):
    store = get_store()
    if not store.get_project(slug):
        raise HTTPException(status_code=404, detail="Project not found")
    try:
        store.save_graph(slug, name, body)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"status": "saved"}


@router.delete("/{slug}/graphs/{name}")
def delete_graph(slug: str, name: str):
    try:
        deleted = get_store().delete_graph(slug, name)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Graph not found")
    return {"status": "deleted"}
