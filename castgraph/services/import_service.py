import json
import logging
import os
import urllib.parse
from typing import Any, Callable, Dict, Optional

from castgraph.services.graph import (
    ConsistencyReport,
    GraphStore,
    NodeKind,
    ValidationFailure,
    distribute_all,
    new_node,
    repair,
)
from castgraph.services.graph.nodes import Edge

logger = logging.getLogger(__name__)

ACTOR_CLASS = "Actor"
NEIGHBOR_FIELDS = {NodeKind.ACTOR: "movies", NodeKind.MOVIE: "actors"}


def _resolve_path(path: str, project_root: str) -> str:
    """Resolve a possibly relative path against the project root.

    If path is absolute, return it unchanged. Otherwise, join to project_root.
    """
    if os.path.isabs(path):
        return path
    return os.path.join(project_root, path)


def _unescape(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationFailure(f"record name must be a non-empty string, got {name!r}")
    return urllib.parse.unquote_plus(name)


def _coerce(value: Any, field: str, cast: Callable[[Any], Any]) -> Optional[Any]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationFailure(f"{field} must be numeric, got {value!r}")
    try:
        return cast(value)
    except (TypeError, ValueError) as exc:
        raise ValidationFailure(f"{field} must be numeric, got {value!r}") from exc


def _merge(store: GraphStore, node) -> None:
    """Add ``node``, or fold it into an earlier record with the same name.

    The first record wins for attributes it already has; new edges are appended.
    """
    existing = store.find(node.kind, node.name)
    if existing is None:
        store.add_node(node)
        return
    logger.debug("Merging duplicate %s record %r", node.kind.value, node.name)
    for attr in node.attributes:
        if getattr(existing, attr) is None:
            setattr(existing, attr, getattr(node, attr))
    for edge in node.adjacency:
        if not existing.has_edge_to(edge.target_name):
            existing.adjacency.append(edge)


def record_to_node(record: Dict[str, Any]):
    """Convert one legacy dataset record into an unlinked node."""
    if not isinstance(record, dict):
        raise ValidationFailure(f"dataset record must be an object, got {type(record).__name__}")
    kind = NodeKind.ACTOR if record.get("json_class") == ACTOR_CLASS else NodeKind.MOVIE
    name = _unescape(record.get("name"))
    if kind is NodeKind.ACTOR:
        node = new_node(kind, name, age=_coerce(record.get("age"), "age", int))
    else:
        node = new_node(
            kind,
            name,
            box_office=_coerce(record.get("box_office"), "box_office", float),
            year=_coerce(record.get("year"), "year", int),
        )
    neighbors = record.get(NEIGHBOR_FIELDS[kind]) or []
    if not isinstance(neighbors, list):
        raise ValidationFailure(f"{NEIGHBOR_FIELDS[kind]} of {name!r} must be a list")
    for neighbor in neighbors:
        if isinstance(neighbor, str) and neighbor and not node.has_edge_to(neighbor):
            node.adjacency.append(Edge(neighbor))
    return node


def build_graph_from_dataset(data: Any) -> GraphStore:
    """Load the legacy dataset shape into a fresh, unrepaired store.

    ``data`` is a list of sections; each section maps keys to records tagged
    with ``json_class``. Edges are one-directional as listed in the records.
    """
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise ValidationFailure("dataset must be a list of sections")
    store = GraphStore()
    for section in data:
        if not isinstance(section, dict):
            raise ValidationFailure("dataset section must be an object")
        for record in section.values():
            _merge(store, record_to_node(record))
    return store


def import_dataset(
    dataset_json: str,
    *,
    project_root: str,
    repair_fn: Callable[[GraphStore], ConsistencyReport] = repair,
    distribute_fn: Callable[[GraphStore], int] = distribute_all,
):
    """Import the legacy external dataset and derive grossing credit.

    Contract:
    - Inputs: path to the dataset JSON (may be relative to project_root)
    - Outputs: (store, summary dict with counts from each stage)
    - Errors: FileNotFoundError for a missing file; ValidationFailure for malformed content
    """
    path = _resolve_path(dataset_json, os.path.abspath(project_root))
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Dataset JSON not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValidationFailure(f"Invalid JSON in dataset {path}: {exc.msg}") from exc

    store = build_graph_from_dataset(data)
    loaded = {"actors": store.count(NodeKind.ACTOR), "movies": store.count(NodeKind.MOVIE)}
    report = repair_fn(store)
    weighted = distribute_fn(store)
    summary = {
        "loaded": loaded,
        "consistency": report.to_dict(),
        "weighted_movies": weighted,
        "actors": store.count(NodeKind.ACTOR),
        "movies": store.count(NodeKind.MOVIE),
    }
    logger.info("Imported dataset %s: %s", path, summary)
    return store, summary
