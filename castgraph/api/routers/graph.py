from fastapi import APIRouter, HTTPException, Query
from typing import List

from castgraph.db.graph_state import get_store, graph_lock, save_store
from castgraph.models.graph import NamesOut
from castgraph.services.graph import GraphError, NodeKind, distribute_all, repair
from castgraph.services.graph import analytics
from .common import to_http_error

router = APIRouter(tags=["graph"])


def _names(items: List[str]) -> dict:
    return {"count": len(items), "items": items}


@router.get("/stats/top-grossing-actors", response_model=NamesOut)
def api_top_grossing_actors(count: int = Query(5, ge=0)):
    with graph_lock:
        try:
            return _names(analytics.top_grossing_actors(get_store(), count))
        except GraphError as exc:
            raise to_http_error(exc)


@router.get("/stats/oldest-actors", response_model=NamesOut)
def api_oldest_actors(count: int = Query(5, ge=0)):
    with graph_lock:
        try:
            return _names(analytics.oldest_actors(get_store(), count))
        except GraphError as exc:
            raise to_http_error(exc)


@router.get("/stats/hub-actors", response_model=NamesOut)
def api_hub_actors(count: int = Query(5, ge=0)):
    """Actors with the most distinct co-stars."""
    with graph_lock:
        try:
            return _names(analytics.hub_actors(get_store(), count))
        except GraphError as exc:
            raise to_http_error(exc)


@router.get("/stats/money-per-age")
def api_money_per_age():
    with graph_lock:
        averages = analytics.money_per_age(get_store())
    return {"ages": list(range(len(averages))), "average_grossing": averages}


@router.get("/years/{year}/movies", response_model=NamesOut)
def api_movies_for_year(year: int):
    with graph_lock:
        return _names(analytics.movies_for_year(get_store(), year))


@router.get("/years/{year}/actors", response_model=NamesOut)
def api_actors_for_year(year: int):
    with graph_lock:
        return _names(analytics.actors_for_year(get_store(), year))


@router.get("/graph/summary")
def api_graph_summary():
    with graph_lock:
        store = get_store()
        return {
            "actors": store.count(NodeKind.ACTOR),
            "movies": store.count(NodeKind.MOVIE),
            "asymmetric_edges": len(store.asymmetric_edges()),
        }


@router.post("/graph/repair")
def api_repair_graph():
    """Consistency pass, then grossing credit for every movie and actor."""
    with graph_lock:
        store = get_store()
        try:
            report = repair(store)
            weighted = distribute_all(store)
        except GraphError as exc:
            raise to_http_error(exc)
        return {"status": "ok", "consistency": report.to_dict(), "weighted_movies": weighted}


@router.post("/graph/snapshot")
def api_save_snapshot():
    try:
        path = save_store()
    except OSError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to save snapshot: {exc}")
    return {"status": "ok", "path": path}
