from __future__ import annotations

from typing import List, Optional

from .errors import BoundsError
from .nodes import NodeKind
from .store import GraphStore

MAX_AGE = 100


def box_office_of(store: GraphStore, movie: str) -> Optional[float]:
    return store.get(NodeKind.MOVIE, movie).box_office


def movies_containing_actor(store: GraphStore, actor: str) -> List[str]:
    return store.neighbors_of(NodeKind.ACTOR, actor)


def actors_in_movie(store: GraphStore, movie: str) -> List[str]:
    return store.neighbors_of(NodeKind.MOVIE, movie)


def top_grossing_actors(store: GraphStore, count: int) -> List[str]:
    return store.top_by_metric(NodeKind.ACTOR, "total_grossing_value", count)


def oldest_actors(store: GraphStore, count: int) -> List[str]:
    return store.top_by_metric(NodeKind.ACTOR, "age", count)


def movies_for_year(store: GraphStore, year: int) -> List[str]:
    return [m.name for m in store.filter_by_attribute(store.movies, "year", year)]


def actors_for_year(store: GraphStore, year: int) -> List[str]:
    """Everyone cast in a movie from ``year``, first-seen order, no repeats."""
    seen = {}
    for movie in store.filter_by_attribute(store.movies, "year", year):
        for name in movie.neighbor_names():
            seen.setdefault(name, None)
    return list(seen)


def co_star_count(store: GraphStore, actor: str) -> int:
    co_stars = set()
    for movie_name in store.neighbors_of(NodeKind.ACTOR, actor):
        movie = store.find(NodeKind.MOVIE, movie_name)
        if movie is not None:
            co_stars.update(movie.neighbor_names())
    co_stars.discard(actor)
    return len(co_stars)


def hub_actors(store: GraphStore, count: int) -> List[str]:
    """Actors with the most distinct co-stars, ties in insertion order."""
    actors = store.actors
    if count < 0 or count > len(actors):
        raise BoundsError(f"requested {count} hub actors but only {len(actors)} exist")
    scored = [(co_star_count(store, a.name), a.name) for a in actors]
    scored = sorted(scored, key=lambda item: item[0], reverse=True)
    return [name for _, name in scored[:count]]


def money_per_age(store: GraphStore) -> List[float]:
    """Average total grossing value per age 0..100 (0.0 for empty ages)."""
    totals = [0.0] * (MAX_AGE + 1)
    counts = [0] * (MAX_AGE + 1)
    for actor in store.actors:
        if actor.age is None or not 0 <= actor.age <= MAX_AGE:
            continue
        totals[actor.age] += actor.total_grossing_value or 0.0
        counts[actor.age] += 1
    return [t / c if c else 0.0 for t, c in zip(totals, counts)]
