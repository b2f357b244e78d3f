import random

import pytest

from castgraph.services.crawl.base import PageFetcher, PageRecord
from castgraph.services.crawl.orchestrator import CrawlOrchestrator
from castgraph.services.graph import (
    ActorNode,
    Edge,
    FetchFailure,
    GraphStore,
    MovieNode,
    NodeKind,
    graph_to_dict,
)


PAGES = {
    "/wiki/Morgan_Freeman": PageRecord(
        kind=NodeKind.ACTOR,
        attributes={"age": 87},
        neighbors=[("Glory", "/wiki/Glory"), ("Se7en", "/wiki/Se7en")],
    ),
    "/wiki/Glory": PageRecord(
        kind=NodeKind.MOVIE,
        attributes={"box_office": 26800000.0, "year": 1989},
        neighbors=[("Morgan Freeman", "/wiki/Morgan_Freeman"), ("Denzel Washington", "/wiki/Denzel_Washington")],
    ),
    "/wiki/Denzel_Washington": PageRecord(
        kind=NodeKind.ACTOR,
        attributes={"age": 69},
        neighbors=[("Glory", "/wiki/Glory"), ("Training Day", "/wiki/Training_Day")],
    ),
    "/wiki/Training_Day": PageRecord(
        kind=NodeKind.MOVIE,
        attributes={"box_office": 104900000.0, "year": 2001},
        neighbors=[("Denzel Washington", "/wiki/Denzel_Washington"), ("Ethan Hawke", "/wiki/Ethan_Hawke")],
    ),
}


class FakeFetcher(PageFetcher):
    """Serves PAGES; any other link fails like an unreachable page."""

    def __init__(self, pages=None):
        self.pages = PAGES if pages is None else pages
        self.calls = []

    def fetch(self, kind, link):
        self.calls.append((kind, link))
        record = self.pages.get(link)
        if record is None or record.kind is not kind:
            raise FetchFailure(link, "missing page")
        return record


class FakeSleep:
    def __init__(self):
        self.delays = []

    def __call__(self, seconds):
        self.delays.append(seconds)


def make(store=None, fetcher=None, **kwargs):
    sleep = FakeSleep()
    orch = CrawlOrchestrator(
        store if store is not None else GraphStore(),
        fetcher or FakeFetcher(),
        sleep=sleep,
        rng=random.Random(7),
        **kwargs,
    )
    return orch, sleep


def test_full_crawl_builds_symmetric_graph_and_repairs_failures():
    orch, _ = make(actor_budget=10, movie_budget=10)
    stats = orch.run("Morgan Freeman", "/wiki/Morgan_Freeman")
    store = orch.store

    assert store.names(NodeKind.ACTOR) == ["Morgan Freeman", "Denzel Washington"]
    assert store.names(NodeKind.MOVIE) == ["Glory", "Training Day"]
    assert store.neighbors_of(NodeKind.ACTOR, "Morgan Freeman") == ["Glory"]
    assert store.neighbors_of(NodeKind.ACTOR, "Denzel Washington") == ["Glory", "Training Day"]
    assert store.neighbors_of(NodeKind.MOVIE, "Training Day") == ["Denzel Washington"]
    assert store.get(NodeKind.ACTOR, "Denzel Washington").age == 69
    assert store.get(NodeKind.MOVIE, "Glory").box_office == 26800000.0
    assert store.asymmetric_edges() == []
    # every edge unweighted until the distributor runs
    assert all(e.weight is None for node in store for e in node.adjacency)

    assert stats.fetched == 4
    assert stats.failed == 2
    assert stats.actors_left == 8
    assert stats.movies_left == 8


def test_traversal_drains_movies_then_actors():
    orch, _ = make(actor_budget=10, movie_budget=10)
    orch.run("Morgan Freeman", "/wiki/Morgan_Freeman")
    assert [link for _, link in orch.fetcher.calls] == [
        "/wiki/Morgan_Freeman",
        "/wiki/Glory",
        "/wiki/Se7en",
        "/wiki/Denzel_Washington",
        "/wiki/Training_Day",
        "/wiki/Ethan_Hawke",
    ]


def test_zero_budget_never_fetches():
    orch, sleep = make(actor_budget=0, movie_budget=0)
    orch.run("Morgan Freeman", "/wiki/Morgan_Freeman")
    assert orch.fetcher.calls == []
    assert sleep.delays == []
    assert graph_to_dict(orch.store) == {
        "actor_nodes": [{"name": "Morgan Freeman", "age": None, "total_grossing_value": None, "adjacency_list": []}],
        "movie_nodes": [],
    }


def test_movie_budget_discards_unverified_movies():
    orch, _ = make(actor_budget=10, movie_budget=1)
    stats = orch.run("Morgan Freeman", "/wiki/Morgan_Freeman")
    store = orch.store

    # Glory used the only movie fetch; Se7en and Training Day were never verified
    assert store.names(NodeKind.MOVIE) == ["Glory"]
    assert stats.discarded_movies == 2
    assert store.neighbors_of(NodeKind.ACTOR, "Morgan Freeman") == ["Glory"]
    assert store.neighbors_of(NodeKind.ACTOR, "Denzel Washington") == ["Glory"]
    assert store.asymmetric_edges() == []
    assert ("movie", "/wiki/Training_Day") not in [(k.value, l) for k, l in orch.fetcher.calls]


def test_random_delay_before_every_fetch():
    orch, sleep = make(actor_budget=10, movie_budget=10, max_delay=0.125)
    orch.run("Morgan Freeman", "/wiki/Morgan_Freeman")
    assert len(sleep.delays) == len(orch.fetcher.calls)
    assert all(0.0 <= d <= 0.125 for d in sleep.delays)


def test_completed_and_queued_neighbors_are_not_requeued():
    pages = dict(PAGES)
    pages["/wiki/Morgan_Freeman"] = PageRecord(
        kind=NodeKind.ACTOR,
        attributes={"age": 87},
        neighbors=[("Glory", "/wiki/Glory"), ("Glory", "/wiki/Glory_(film)")],
    )
    orch, _ = make(fetcher=FakeFetcher(pages), actor_budget=10, movie_budget=10)
    orch.run("Morgan Freeman", "/wiki/Morgan_Freeman")
    glory_fetches = [l for _, l in orch.fetcher.calls if l.startswith("/wiki/Glory")]
    assert glory_fetches == ["/wiki/Glory"]
    assert orch.store.neighbors_of(NodeKind.ACTOR, "Morgan Freeman").count("Glory") == 1


def test_failed_seed_is_removed():
    orch, _ = make(fetcher=FakeFetcher({}), actor_budget=5, movie_budget=5)
    stats = orch.run("Nobody", "/wiki/Nobody")
    assert orch.store.count(NodeKind.ACTOR) == 0
    assert stats.failed == 1
    assert stats.actors_left == 5


def test_failure_for_stub_only_neighbor_strips_edges_only():
    store = GraphStore()
    store.add_node(ActorNode("Morgan Freeman", age=87, adjacency=[Edge("Glory")]))
    store.add_node(ActorNode("Denzel Washington", age=69, adjacency=[Edge("Glory")]))
    store.add_node(MovieNode("Glory", box_office=1.0, adjacency=[
        Edge("Morgan Freeman"), Edge("Ghost Actor"), Edge("Denzel Washington"),
    ]))
    store.add_node(MovieNode("Other Film", box_office=1.0, adjacency=[Edge("Ghost Actor")]))
    orch, _ = make(store=store, fetcher=FakeFetcher({}))

    orch.process_actor("Ghost Actor", "/wiki/Ghost_Actor")

    assert store.neighbors_of(NodeKind.MOVIE, "Glory") == ["Morgan Freeman", "Denzel Washington"]
    assert store.neighbors_of(NodeKind.MOVIE, "Other Film") == []
    assert store.names(NodeKind.ACTOR) == ["Morgan Freeman", "Denzel Washington"]
    assert store.names(NodeKind.MOVIE) == ["Glory", "Other Film"]


def test_failure_for_existing_node_cascades():
    store = GraphStore()
    store.add_node(ActorNode("Morgan Freeman"))
    store.add_node(MovieNode("Se7en"))
    store.link("Morgan Freeman", "Se7en")
    orch, _ = make(store=store, fetcher=FakeFetcher({}))

    orch.process_movie("Se7en", "/wiki/Se7en")

    assert not store.contains(NodeKind.MOVIE, "Se7en")
    assert store.neighbors_of(NodeKind.ACTOR, "Morgan Freeman") == []


def test_success_enriches_existing_stub_in_place():
    store = GraphStore()
    stub, _ = store.ensure_node(NodeKind.MOVIE, "Glory")
    orch, _ = make(store=store)
    orch.process_movie("Glory", "/wiki/Glory")
    assert store.get(NodeKind.MOVIE, "Glory") is stub
    assert stub.year == 1989
    assert orch.movies_left == 124


@pytest.mark.parametrize("actors, movies", [(1, 0), (0, 1)])
def test_single_budget_still_runs(actors, movies):
    orch, _ = make(actor_budget=actors, movie_budget=movies)
    orch.run("Morgan Freeman", "/wiki/Morgan_Freeman")
    assert orch.fetcher.calls[0] == (NodeKind.ACTOR, "/wiki/Morgan_Freeman")
