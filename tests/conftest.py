import pytest
from fastapi.testclient import TestClient

from castgraph.db.graph_state import set_store
from castgraph.main import app
from castgraph.services.graph import ActorNode, GraphStore, MovieNode


def build_store():
    store = GraphStore()
    store.add_node(ActorNode("Morgan Freeman", age=52))
    store.add_node(ActorNode("Denzel Washington", age=35))
    store.add_node(MovieNode("Glory", box_office=26800000.0, year=1989))
    store.add_node(MovieNode("Se7en", box_office=327300000.0, year=1995))
    store.link("Morgan Freeman", "Glory")
    store.link("Denzel Washington", "Glory")
    store.link("Morgan Freeman", "Se7en")
    return store


@pytest.fixture
def client():
    # Without the context manager TestClient skips the lifespan, so no snapshot is read.
    set_store(build_store())
    yield TestClient(app)
    set_store(None)
