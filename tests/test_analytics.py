import pytest

from castgraph.services.graph import ActorNode, BoundsError, GraphStore, MovieNode, distribute_all
from castgraph.services.graph import analytics


@pytest.fixture
def store():
    s = GraphStore()
    s.add_node(ActorNode("Morgan Freeman", age=52))
    s.add_node(ActorNode("Denzel Washington", age=35))
    s.add_node(ActorNode("Jessica Tandy", age=80))
    s.add_node(ActorNode("Dan Aykroyd", age=37))
    s.add_node(MovieNode("Glory", box_office=26800000.0, year=1989))
    s.add_node(MovieNode("Driving Miss Daisy", box_office=145800000.0, year=1989))
    s.add_node(MovieNode("Lean on Me", box_office=31900000.0, year=1989))
    s.add_node(MovieNode("Ricochet", box_office=21800000.0, year=1991))
    s.link("Morgan Freeman", "Glory")
    s.link("Denzel Washington", "Glory")
    s.link("Morgan Freeman", "Driving Miss Daisy")
    s.link("Jessica Tandy", "Driving Miss Daisy")
    s.link("Dan Aykroyd", "Driving Miss Daisy")
    s.link("Morgan Freeman", "Lean on Me")
    s.link("Denzel Washington", "Ricochet")
    distribute_all(s)
    return s


def test_box_office_and_neighbor_queries(store):
    assert analytics.box_office_of(store, "Glory") == 26800000.0
    assert analytics.movies_containing_actor(store, "Morgan Freeman") == ["Glory", "Driving Miss Daisy", "Lean on Me"]
    assert analytics.actors_in_movie(store, "Glory") == ["Denzel Washington", "Morgan Freeman"]


def test_year_queries(store):
    assert analytics.movies_for_year(store, 1989) == ["Glory", "Driving Miss Daisy", "Lean on Me"]
    assert analytics.actors_for_year(store, 1989) == [
        "Denzel Washington",
        "Morgan Freeman",
        "Dan Aykroyd",
        "Jessica Tandy",
    ]
    assert analytics.movies_for_year(store, 2020) == []


def test_hub_actors_count_distinct_co_stars(store):
    assert analytics.co_star_count(store, "Morgan Freeman") == 3
    assert analytics.co_star_count(store, "Denzel Washington") == 1
    assert analytics.hub_actors(store, 2) == ["Morgan Freeman", "Jessica Tandy"]
    with pytest.raises(BoundsError):
        analytics.hub_actors(store, 10)


def test_top_grossing_and_oldest(store):
    assert analytics.oldest_actors(store, 2) == ["Jessica Tandy", "Morgan Freeman"]
    top = analytics.top_grossing_actors(store, 4)
    assert top[0] == "Morgan Freeman"
    assert sorted(top) == sorted(["Morgan Freeman", "Denzel Washington", "Jessica Tandy", "Dan Aykroyd"])


def test_money_per_age(store):
    averages = analytics.money_per_age(store)
    assert len(averages) == 101
    assert averages[52] == pytest.approx(store.get("actor", "Morgan Freeman").total_grossing_value)
    assert averages[0] == 0.0
