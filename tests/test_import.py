import json
import os
import tempfile

import pytest

from castgraph.services.graph import NodeKind, ValidationFailure
from castgraph.services.import_service import build_graph_from_dataset, import_dataset


DATASET = [
    {
        "Bruce+Willis": {
            "json_class": "Actor",
            "name": "Bruce+Willis",
            "age": 61,
            "total_gross": 562709189,
            "movies": ["The Verdict", "Pulp Fiction", "Lost Film"],
        },
        "Uma+Thurman": {
            "json_class": "Actor",
            "name": "Uma+Thurman",
            "age": 46,
            "movies": [],
        },
        "Orphan+Actor": {
            "json_class": "Actor",
            "name": "Orphan+Actor",
            "age": 30,
            "movies": ["Unknown Film"],
        },
    },
    {
        "Pulp+Fiction": {
            "json_class": "Movie",
            "name": "Pulp+Fiction",
            "box_office": 213900000,
            "year": 1994,
            "actors": ["Uma Thurman", "Bruce Willis"],
        },
        "The+Verdict": {
            "json_class": "Movie",
            "name": "The+Verdict",
            "box_office": 54000000,
            "year": 1982,
            "actors": ["Paul Newman"],
        },
    },
]


def test_build_graph_unescapes_names_and_keeps_one_directional_edges():
    store = build_graph_from_dataset(DATASET)
    assert store.names(NodeKind.ACTOR) == ["Bruce Willis", "Uma Thurman", "Orphan Actor"]
    assert store.names(NodeKind.MOVIE) == ["Pulp Fiction", "The Verdict"]
    assert store.neighbors_of(NodeKind.ACTOR, "Uma Thurman") == []
    assert store.get(NodeKind.MOVIE, "Pulp Fiction").box_office == 213900000.0


def test_duplicate_records_fold_into_first():
    data = [
        {"a": {"json_class": "Actor", "name": "Same", "age": None, "movies": ["M1"]}},
        {"b": {"json_class": "Actor", "name": "Same", "age": 40, "movies": ["M1", "M2"]}},
    ]
    store = build_graph_from_dataset(data)
    node = store.get(NodeKind.ACTOR, "Same")
    assert node.age == 40
    assert node.neighbor_names() == ["M1", "M2"]


def test_bad_numeric_field_rejected():
    data = [{"x": {"json_class": "Movie", "name": "Bad", "box_office": "lots", "actors": []}}]
    with pytest.raises(ValidationFailure):
        build_graph_from_dataset(data)


def test_import_dataset_repairs_and_weighs():
    with tempfile.TemporaryDirectory() as tmp:
        with open(os.path.join(tmp, "data.json"), "w", encoding="utf-8") as f:
            json.dump(DATASET, f)
        store, summary = import_dataset("data.json", project_root=tmp)

    assert summary["loaded"] == {"actors": 3, "movies": 2}
    # The Verdict lists only an unknown actor but Bruce Willis lists it
    assert store.neighbors_of(NodeKind.MOVIE, "The Verdict") == ["Bruce Willis"]
    assert not store.contains(NodeKind.ACTOR, "Orphan Actor")
    assert store.neighbors_of(NodeKind.ACTOR, "Bruce Willis") == ["The Verdict", "Pulp Fiction"]
    assert store.asymmetric_edges() == []
    pulp = store.get(NodeKind.MOVIE, "Pulp Fiction")
    assert sum(e.weight for e in pulp.adjacency) == pytest.approx(213900000.0)
    # Uma (46) is younger than Bruce (61)
    assert pulp.neighbor_names() == ["Uma Thurman", "Bruce Willis"]
    assert summary["weighted_movies"] == 2


def test_import_dataset_injected_stages():
    calls = []

    def fake_repair(store):
        calls.append("repair")
        from castgraph.services.graph import ConsistencyReport
        return ConsistencyReport()

    def fake_distribute(store):
        calls.append("distribute")
        return 0

    with tempfile.TemporaryDirectory() as tmp:
        with open(os.path.join(tmp, "data.json"), "w", encoding="utf-8") as f:
            json.dump(DATASET, f)
        _, summary = import_dataset("data.json", project_root=tmp, repair_fn=fake_repair, distribute_fn=fake_distribute)
    assert calls == ["repair", "distribute"]
    assert summary["consistency"] == {"mirrored_edges": 0, "pruned_edges": 0, "removed_nodes": 0}


def test_import_dataset_missing_file():
    with tempfile.TemporaryDirectory() as tmp:
        with pytest.raises(FileNotFoundError):
            import_dataset("missing.json", project_root=tmp)
