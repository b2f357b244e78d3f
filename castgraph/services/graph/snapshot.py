"""JSON snapshot of the whole graph.

Format::

    {
      "actor_nodes": [{"name", "age", "total_grossing_value", "adjacency_list": [{"name", "weight"}]}],
      "movie_nodes": [{"name", "box_office", "year", "adjacency_list": [...]}]
    }

Node order and edge order round-trip unchanged.
"""
from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Optional

from .errors import ValidationFailure
from .nodes import Edge, NodeKind, new_node
from .store import GraphStore

logger = logging.getLogger(__name__)

SECTIONS = {NodeKind.ACTOR: "actor_nodes", NodeKind.MOVIE: "movie_nodes"}
INT_FIELDS = {"age", "year"}


def graph_to_dict(store: GraphStore) -> Dict[str, List[Dict[str, Any]]]:
    """Pure projection; the live nodes are only read."""
    return {section: [n.to_dict() for n in store.nodes(kind)] for kind, section in SECTIONS.items()}


def _number(value: Any, field: str, *, integer: bool) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationFailure(f"{field} must be a number, got {value!r}")
    if integer:
        if isinstance(value, float) and not value.is_integer():
            raise ValidationFailure(f"{field} must be an integer, got {value!r}")
        return int(value)
    return float(value)


def _edge_from_dict(raw: Any) -> Edge:
    if not isinstance(raw, dict):
        raise ValidationFailure(f"adjacency entry must be an object, got {raw!r}")
    name = raw.get("name")
    if not isinstance(name, str) or not name:
        raise ValidationFailure("adjacency entry is missing its name")
    return Edge(name, _number(raw.get("weight"), "weight", integer=False))


def node_from_dict(kind: NodeKind, raw: Any):
    if not isinstance(raw, dict):
        raise ValidationFailure(f"{kind.value} record must be an object, got {type(raw).__name__}")
    name = raw.get("name")
    if not isinstance(name, str) or not name:
        raise ValidationFailure(f"{kind.value} record is missing its name")
    node = new_node(kind, name)
    for attr in node.attributes:
        setattr(node, attr, _number(raw.get(attr), attr, integer=attr in INT_FIELDS))
    adjacency = raw.get("adjacency_list") or []
    if not isinstance(adjacency, list):
        raise ValidationFailure(f"adjacency_list of {name!r} must be a list")
    for raw_edge in adjacency:
        edge = _edge_from_dict(raw_edge)
        # One edge per target; later repeats are dropped.
        if not node.has_edge_to(edge.target_name):
            node.adjacency.append(edge)
    return node


def graph_from_dict(data: Any) -> GraphStore:
    """Build a new store from a snapshot dict; nothing is shared with ``data``."""
    if not isinstance(data, dict):
        raise ValidationFailure("snapshot must be a JSON object")
    store = GraphStore()
    for kind, section in SECTIONS.items():
        records = data.get(section, [])
        if not isinstance(records, list):
            raise ValidationFailure(f"{section} must be a list")
        for raw in records:
            store.add_node(node_from_dict(kind, raw))
    return store


def save_snapshot(store: GraphStore, path: str) -> str:
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(graph_to_dict(store), f, ensure_ascii=False, indent=2)
    logger.info("Saved graph snapshot to %s (%d actors, %d movies)", path, store.count(NodeKind.ACTOR), store.count(NodeKind.MOVIE))
    return path


def load_snapshot(path: str) -> GraphStore:
    """Read a snapshot file. Raises FileNotFoundError / ValidationFailure."""
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Graph snapshot not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValidationFailure(f"Invalid JSON in snapshot {path}: {exc.msg}") from exc
    store = graph_from_dict(data)
    logger.info("Loaded graph snapshot from %s (%d actors, %d movies)", path, store.count(NodeKind.ACTOR), store.count(NodeKind.MOVIE))
    return store
