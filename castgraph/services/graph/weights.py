"""Grossing credit: how a movie's box office is split across its cast.

For a cast of ``n`` ordered youngest first and box office ``B``, rank ``j``
gets ``B * 0.5 ** (j + 1)`` plus an even share of what the halving leaves
over, so the weights of one movie always sum to ``B``.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from .errors import InvalidState
from .nodes import MovieNode, NodeKind
from .store import GraphStore

logger = logging.getLogger(__name__)

DECAY = 0.5


def decayed_shares(box_office: float, n: int) -> List[float]:
    if n <= 0:
        raise InvalidState("cannot split box office across an empty cast")
    shares = [box_office * DECAY ** (j + 1) for j in range(n)]
    even_split = (box_office - sum(shares)) / n
    return [s + even_split for s in shares]


def _age_key(age: Optional[int]):
    # Unset ages go last: they get the smallest shares.
    return (age is None, age if age is not None else 0)


class WeightDistributor:
    def __init__(self, store: GraphStore) -> None:
        self.store = store

    def compute_edge_weights(self, movie: MovieNode) -> List[float]:
        """Sort the cast by age and write the weight of each edge pair.

        Every actor and mirror edge is checked before any write, so a failure
        leaves the movie untouched. Returns the weights in the new order.
        """
        if not movie.adjacency:
            raise InvalidState(f"movie {movie.name!r} has no cast")

        cast = []
        for edge in movie.adjacency:
            actor = self.store.find(NodeKind.ACTOR, edge.target_name)
            if actor is None:
                raise InvalidState(
                    f"movie {movie.name!r} references missing actor {edge.target_name!r}; run the consistency pass first"
                )
            back = actor.edge_to(movie.name)
            if back is None:
                raise InvalidState(
                    f"actor {actor.name!r} lacks a mirror edge to {movie.name!r}; run the consistency pass first"
                )
            cast.append((edge, actor, back))

        # sorted() is stable, so equal ages keep discovery order.
        cast.sort(key=lambda item: _age_key(item[1].age))
        weights = decayed_shares(float(movie.box_office or 0.0), len(cast))

        movie.adjacency[:] = [edge for edge, _, _ in cast]
        for (edge, _, back), weight in zip(cast, weights):
            edge.weight = weight
            back.weight = weight
        return weights

    def compute_actor_totals(self) -> None:
        """Set ``total_grossing_value`` to the sum of each actor's edge weights.

        Raises InvalidState, without writing anything, if any edge is still
        unweighted.
        """
        for actor in self.store.actors:
            for edge in actor.adjacency:
                if edge.weight is None:
                    raise InvalidState(
                        f"edge {actor.name!r} -> {edge.target_name!r} has no weight; compute movie weights first"
                    )
        for actor in self.store.actors:
            actor.total_grossing_value = float(sum(e.weight for e in actor.adjacency))

    def distribute_all(self) -> int:
        """Weights for every movie, then actor totals. Returns movies weighted."""
        movies = self.store.movies
        for movie in movies:
            self.compute_edge_weights(movie)
        self.compute_actor_totals()
        logger.info("Distributed grossing credit over %d movies", len(movies))
        return len(movies)


def distribute_all(store: GraphStore) -> int:
    return WeightDistributor(store).distribute_all()
