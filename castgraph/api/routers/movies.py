from fastapi import APIRouter, Query, Response
from typing import List, Optional

from castgraph.db.graph_state import get_store, graph_lock
from castgraph.models.graph import MovieCreate, MovieOut, MovieUpdate, NamesOut
from castgraph.services.graph import GraphError, NodeKind, new_node
from castgraph.services.graph import analytics
from .common import path_name, to_http_error

router = APIRouter(tags=["movies"])


@router.get("/movies", response_model=List[MovieOut])
def api_list_movies(
    name: Optional[str] = Query(None, description="Case-sensitive name substring"),
    year: Optional[int] = Query(None, description="Exact release year"),
):
    """Movies filtered by name and/or year. No filter returns an empty list."""
    with graph_lock:
        nodes = get_store().query(NodeKind.MOVIE, name=name, value=year)
        return [n.to_dict() for n in nodes]


@router.get("/movies/{movie_name}", response_model=MovieOut)
def api_get_movie(movie_name: str):
    with graph_lock:
        try:
            return get_store().get(NodeKind.MOVIE, path_name(movie_name)).to_dict()
        except GraphError as exc:
            raise to_http_error(exc)


@router.get("/movies/{movie_name}/actors", response_model=NamesOut)
def api_get_movie_actors(movie_name: str):
    with graph_lock:
        try:
            items = analytics.actors_in_movie(get_store(), path_name(movie_name))
        except GraphError as exc:
            raise to_http_error(exc)
    return {"count": len(items), "items": items}


@router.post("/movies", status_code=201, response_model=MovieOut)
def api_create_movie(payload: MovieCreate):
    with graph_lock:
        try:
            node = get_store().add_node(new_node(NodeKind.MOVIE, payload.name, box_office=payload.box_office, year=payload.year))
        except GraphError as exc:
            raise to_http_error(exc)
        return node.to_dict()


@router.put("/movies/{movie_name}", response_model=MovieOut)
def api_put_movie(movie_name: str, payload: MovieUpdate, response: Response):
    """Update the movie, or create it (201) when it does not exist yet."""
    name = path_name(movie_name)
    changes = payload.model_dump(exclude_none=True)
    with graph_lock:
        store = get_store()
        try:
            if store.contains(NodeKind.MOVIE, name):
                node = store.update_node(NodeKind.MOVIE, name, **changes)
                response.status_code = 200
            else:
                node = store.add_node(new_node(NodeKind.MOVIE, changes.pop("name", name), **changes))
                response.status_code = 201
        except GraphError as exc:
            raise to_http_error(exc)
        return node.to_dict()


@router.delete("/movies/{movie_name}")
def api_delete_movie(movie_name: str):
    name = path_name(movie_name)
    with graph_lock:
        try:
            get_store().delete_node(NodeKind.MOVIE, name)
        except GraphError as exc:
            raise to_http_error(exc)
    return {"status": "ok", "deleted": name}


@router.get("/movies/{movie_name}/box-office")
def api_get_box_office(movie_name: str):
    name = path_name(movie_name)
    with graph_lock:
        try:
            amount = analytics.box_office_of(get_store(), name)
        except GraphError as exc:
            raise to_http_error(exc)
    return {"name": name, "box_office": amount}
