from fastapi import APIRouter, Query, Response
from typing import List, Optional

from castgraph.db.graph_state import get_store, graph_lock
from castgraph.models.graph import ActorCreate, ActorOut, ActorUpdate, NamesOut
from castgraph.services.graph import GraphError, NodeKind, new_node
from castgraph.services.graph import analytics
from .common import path_name, to_http_error

router = APIRouter(tags=["actors"])


@router.get("/actors", response_model=List[ActorOut])
def api_list_actors(
    name: Optional[str] = Query(None, description="Case-sensitive name substring"),
    age: Optional[int] = Query(None, description="Exact age"),
):
    """Actors filtered by name and/or age. No filter returns an empty list."""
    with graph_lock:
        nodes = get_store().query(NodeKind.ACTOR, name=name, value=age)
        return [n.to_dict() for n in nodes]


@router.get("/actors/{actor_name}", response_model=ActorOut)
def api_get_actor(actor_name: str):
    with graph_lock:
        try:
            return get_store().get(NodeKind.ACTOR, path_name(actor_name)).to_dict()
        except GraphError as exc:
            raise to_http_error(exc)


@router.get("/actors/{actor_name}/movies", response_model=NamesOut)
def api_get_actor_movies(actor_name: str):
    with graph_lock:
        try:
            items = analytics.movies_containing_actor(get_store(), path_name(actor_name))
        except GraphError as exc:
            raise to_http_error(exc)
    return {"count": len(items), "items": items}


@router.post("/actors", status_code=201, response_model=ActorOut)
def api_create_actor(payload: ActorCreate):
    with graph_lock:
        try:
            node = get_store().add_node(new_node(NodeKind.ACTOR, payload.name, age=payload.age))
        except GraphError as exc:
            raise to_http_error(exc)
        return node.to_dict()


@router.put("/actors/{actor_name}", response_model=ActorOut)
def api_put_actor(actor_name: str, payload: ActorUpdate, response: Response):
    """Update the actor, or create it (201) when it does not exist yet."""
    name = path_name(actor_name)
    changes = payload.model_dump(exclude_none=True)
    with graph_lock:
        store = get_store()
        try:
            if store.contains(NodeKind.ACTOR, name):
                node = store.update_node(NodeKind.ACTOR, name, **changes)
                response.status_code = 200
            else:
                node = store.add_node(new_node(NodeKind.ACTOR, changes.pop("name", name), **changes))
                response.status_code = 201
        except GraphError as exc:
            raise to_http_error(exc)
        return node.to_dict()


@router.delete("/actors/{actor_name}")
def api_delete_actor(actor_name: str):
    name = path_name(actor_name)
    with graph_lock:
        try:
            get_store().delete_node(NodeKind.ACTOR, name)
        except GraphError as exc:
            raise to_http_error(exc)
    return {"status": "ok", "deleted": name}
