"""Frontier crawl that grows the actor/movie graph one page at a time.

Traversal order: drain the whole movie frontier (while the movie budget
lasts), then the whole actor frontier, and repeat until both budgets are
spent or both frontiers are empty. Movies still queued at the end never had
their page verified and are removed from the graph.
"""
from __future__ import annotations

import logging
import random
import time
from collections import deque
from dataclasses import dataclass, asdict
from typing import Callable, Deque, Dict, Optional, Set, Tuple

from castgraph.services.graph import FetchFailure, GraphStore, NodeKind

from .base import PageFetcher, PageRecord

logger = logging.getLogger(__name__)

DEFAULT_ACTOR_BUDGET = 250
DEFAULT_MOVIE_BUDGET = 125
DEFAULT_MAX_DELAY = 0.125


@dataclass
class CrawlStats:
    fetched: int = 0
    failed: int = 0
    discarded_movies: int = 0
    actors_left: int = 0
    movies_left: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


class CrawlOrchestrator:
    """Owns all crawl state for one run over a shared GraphStore.

    ``sleep`` and ``rng`` are injectable so tests can run without delays.
    """

    def __init__(
        self,
        store: GraphStore,
        fetcher: PageFetcher,
        *,
        actor_budget: int = DEFAULT_ACTOR_BUDGET,
        movie_budget: int = DEFAULT_MOVIE_BUDGET,
        max_delay: float = DEFAULT_MAX_DELAY,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.max_delay = float(max_delay)
        self.sleep = sleep
        self.rng = rng or random.Random()
        self.budget: Dict[NodeKind, int] = {
            NodeKind.ACTOR: int(actor_budget),
            NodeKind.MOVIE: int(movie_budget),
        }
        self.frontier: Dict[NodeKind, Deque[Tuple[str, str]]] = {k: deque() for k in NodeKind}
        # Names currently queued, mirrors ``frontier`` for O(1) membership.
        self.queued: Dict[NodeKind, Set[str]] = {k: set() for k in NodeKind}
        self.completed: Dict[NodeKind, Set[str]] = {k: set() for k in NodeKind}
        self.stats = CrawlStats()

    @property
    def actors_left(self) -> int:
        return self.budget[NodeKind.ACTOR]

    @property
    def movies_left(self) -> int:
        return self.budget[NodeKind.MOVIE]

    # --- Frontier helpers ---
    def _enqueue(self, kind: NodeKind, name: str, link: str) -> None:
        self.frontier[kind].append((name, link))
        self.queued[kind].add(name)

    def _pop(self, kind: NodeKind) -> Tuple[str, str]:
        name, link = self.frontier[kind].popleft()
        self.queued[kind].discard(name)
        self.completed[kind].add(name)
        return name, link

    def _has_work(self) -> bool:
        budget_left = self.actors_left > 0 or self.movies_left > 0
        return budget_left and any(self.frontier[k] for k in NodeKind)

    def _wait(self) -> None:
        self.sleep(self.rng.uniform(0.0, self.max_delay))

    # --- Main loop ---
    def seed(self, name: str, link: str) -> None:
        """Queue the starting actor; it counts as completed from the start."""
        self.store.ensure_node(NodeKind.ACTOR, name)
        self._enqueue(NodeKind.ACTOR, name, link)
        self.completed[NodeKind.ACTOR].add(name)

    def run(self, seed_name: Optional[str] = None, seed_link: Optional[str] = None) -> CrawlStats:
        if seed_name is not None:
            self.seed(seed_name, seed_link or "")

        while self._has_work():
            steps = 0
            while self.frontier[NodeKind.MOVIE] and self.movies_left > 0:
                self._step(NodeKind.MOVIE)
                steps += 1
            while self.frontier[NodeKind.ACTOR]:
                self._step(NodeKind.ACTOR)
                steps += 1
            if not steps:
                # Only movies are queued and their budget is spent.
                break

        self._discard_unverified_movies()
        self.stats.actors_left = self.actors_left
        self.stats.movies_left = self.movies_left
        logger.info("Crawl finished: %s", self.stats.to_dict())
        return self.stats

    def _step(self, kind: NodeKind) -> None:
        logger.debug(
            "Movies left: %d, actors left: %d, movie frontier: %d, actor frontier: %d",
            self.movies_left,
            self.actors_left,
            len(self.frontier[NodeKind.MOVIE]),
            len(self.frontier[NodeKind.ACTOR]),
        )
        self._wait()
        name, link = self._pop(kind)
        self.process(kind, name, link)

    def _discard_unverified_movies(self) -> None:
        frontier = self.frontier[NodeKind.MOVIE]
        while frontier:
            name, _ = frontier.popleft()
            self.queued[NodeKind.MOVIE].discard(name)
            if self.store.contains(NodeKind.MOVIE, name):
                self.store.delete_node(NodeKind.MOVIE, name)
                self.stats.discarded_movies += 1

    # --- Per page ---
    def process(self, kind: NodeKind, name: str, link: str) -> None:
        """Fetch one page and fold it into the graph, repairing on failure."""
        logger.info("Scraping %s %r (%s)", kind.value, name, link)
        try:
            record = self.fetcher.fetch(kind, link)
        except FetchFailure as exc:
            self.stats.failed += 1
            self._repair_failed(kind, name, exc)
            return
        self.stats.fetched += 1
        self.budget[kind] -= 1
        self._apply(kind, name, record)

    def process_movie(self, name: str, link: str) -> None:
        self.process(NodeKind.MOVIE, name, link)

    def process_actor(self, name: str, link: str) -> None:
        self.process(NodeKind.ACTOR, name, link)

    def _apply(self, kind: NodeKind, name: str, record: PageRecord) -> None:
        node, _ = self.store.ensure_node(kind, name)
        for attr in node.attributes:
            if attr in record.attributes:
                setattr(node, attr, record.attributes[attr])
        logger.info("%s %r: %s", kind.value.capitalize(), name, record.attributes)

        other = kind.opposite
        for n_name, n_link in record.neighbors:
            if n_name in self.completed[other] or n_name in self.queued[other]:
                continue
            self.store.ensure_node(other, n_name)
            if kind is NodeKind.ACTOR:
                self.store.link(name, n_name)
            else:
                self.store.link(n_name, name)
            self._enqueue(other, n_name, n_link)

    def _repair_failed(self, kind: NodeKind, name: str, exc: FetchFailure) -> None:
        if self.store.contains(kind, name):
            self.store.delete_node(kind, name)
            logger.error("%s could not be scraped (%s); removed %s %r", exc.link, exc.reason, kind.value, name)
        else:
            removed = self.store.strip_references(kind, name)
            logger.error("%s could not be scraped (%s); stripped %d edges to %r", exc.link, exc.reason, removed, name)
