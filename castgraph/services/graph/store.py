"""In-memory actor/movie graph.

Nodes are kept in one name-keyed dict per kind. Python dicts preserve
insertion order, which gives "first inserted" iteration for filters and a
stable base order for the top-N queries.

Edges are weak references (target name only). The store never holds a
pointer from one node to another; every hop goes through ``get``.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import BoundsError, DuplicateNode, NotFound, ValidationFailure
from .nodes import ActorNode, Edge, MovieNode, NodeKind, new_node

logger = logging.getLogger(__name__)

FILTERABLE_ATTRIBUTES = {NodeKind.ACTOR: "age", NodeKind.MOVIE: "year"}
RANKABLE_METRICS = {
    NodeKind.ACTOR: ("total_grossing_value", "age"),
    NodeKind.MOVIE: ("box_office", "year"),
}


class GraphStore:
    def __init__(self) -> None:
        self._nodes: Dict[NodeKind, Dict[str, Any]] = {
            NodeKind.ACTOR: {},
            NodeKind.MOVIE: {},
        }

    # --- Collections ---
    @property
    def actors(self) -> List[ActorNode]:
        return list(self._nodes[NodeKind.ACTOR].values())

    @property
    def movies(self) -> List[MovieNode]:
        return list(self._nodes[NodeKind.MOVIE].values())

    def nodes(self, kind: NodeKind) -> List[Any]:
        return list(self._nodes[NodeKind(kind)].values())

    def names(self, kind: NodeKind) -> List[str]:
        return list(self._nodes[NodeKind(kind)].keys())

    def count(self, kind: NodeKind) -> int:
        return len(self._nodes[NodeKind(kind)])

    def __iter__(self) -> Iterator[Any]:
        for kind in NodeKind:
            yield from self._nodes[kind].values()

    def clear(self) -> None:
        for kind in NodeKind:
            self._nodes[kind].clear()

    # --- Lookup ---
    def contains(self, kind: NodeKind, name: str) -> bool:
        return name in self._nodes[NodeKind(kind)]

    def find(self, kind: NodeKind, name: str) -> Optional[Any]:
        return self._nodes[NodeKind(kind)].get(name)

    def get(self, kind: NodeKind, name: str) -> Any:
        node = self.find(kind, name)
        if node is None:
            raise NotFound(NodeKind(kind), name)
        return node

    # --- Mutation ---
    def add_node(self, node: Any) -> Any:
        """Append ``node`` to its kind's collection.

        Raises DuplicateNode when the name is already taken in that kind.
        """
        if not isinstance(node.name, str) or not node.name:
            raise ValidationFailure("node name must be a non-empty string")
        bucket = self._nodes[node.kind]
        if node.name in bucket:
            raise DuplicateNode(node.kind, node.name)
        bucket[node.name] = node
        return node

    def ensure_node(self, kind: NodeKind, name: str) -> Tuple[Any, bool]:
        """Return ``(node, created)``; a missing node is added as a stub."""
        kind = NodeKind(kind)
        node = self.find(kind, name)
        if node is not None:
            return node, False
        return self.add_node(new_node(kind, name)), True

    def link(self, actor_name: str, movie_name: str, weight: Optional[float] = None) -> None:
        """Add a mirrored edge pair between an existing actor and movie.

        An edge that already exists on either side is left as is.
        """
        actor = self.get(NodeKind.ACTOR, actor_name)
        movie = self.get(NodeKind.MOVIE, movie_name)
        if not actor.has_edge_to(movie_name):
            actor.adjacency.append(Edge(movie_name, weight))
        if not movie.has_edge_to(actor_name):
            movie.adjacency.append(Edge(actor_name, weight))

    def delete_node(self, kind: NodeKind, name: str) -> Any:
        """Remove a node and every back-edge that points at it.

        Mirror nodes left with no edges are kept; pruning them is the
        consistency pass's job.
        """
        kind = NodeKind(kind)
        node = self.get(kind, name)
        other = self._nodes[kind.opposite]
        for edge in node.adjacency:
            mirror = other.get(edge.target_name)
            if mirror is not None:
                mirror.remove_edges_to(name)
        del self._nodes[kind][name]
        logger.debug("Deleted %s %r (%d edges)", kind.value, name, len(node.adjacency))
        return node

    def strip_references(self, kind: NodeKind, name: str) -> int:
        """Drop edges naming ``name`` from every node of the opposite kind.

        Used when ``name`` only ever existed as somebody's neighbor.
        Returns the number of edges removed.
        """
        kind = NodeKind(kind)
        removed = 0
        for node in self._nodes[kind.opposite].values():
            removed += node.remove_edges_to(name)
        return removed

    def update_node(self, kind: NodeKind, node_name: str, **changes: Any) -> Any:
        """Set attributes on an existing node; ``name`` in changes renames it.

        A rename keeps the node's position and retargets every mirror edge.
        All checks run before anything is written.
        """
        kind = NodeKind(kind)
        node = self.get(kind, node_name)
        new_name = changes.pop("name", None)
        unknown = set(changes) - set(node.attributes)
        if unknown:
            raise ValidationFailure(f"unknown {kind.value} field(s): {', '.join(sorted(unknown))}")
        if new_name is not None:
            if not isinstance(new_name, str) or not new_name:
                raise ValidationFailure("node name must be a non-empty string")
            if new_name != node_name and new_name in self._nodes[kind]:
                raise DuplicateNode(kind, new_name)

        for attr, value in changes.items():
            setattr(node, attr, value)
        if new_name is not None and new_name != node_name:
            self._rename(kind, node, new_name)
        return node

    def _rename(self, kind: NodeKind, node: Any, new_name: str) -> None:
        old_name = node.name
        other = self._nodes[kind.opposite]
        for edge in node.adjacency:
            mirror = other.get(edge.target_name)
            if mirror is None:
                continue
            for back in mirror.adjacency:
                if back.target_name == old_name:
                    back.target_name = new_name
        node.name = new_name
        self._nodes[kind] = {
            (new_name if key == old_name else key): value
            for key, value in self._nodes[kind].items()
        }

    # --- Queries ---
    @staticmethod
    def filter_by_name(nodes: Iterable[Any], needle: str) -> List[Any]:
        """Case-sensitive substring match on the node name, order kept."""
        return [n for n in nodes if needle in n.name]

    @staticmethod
    def filter_by_attribute(nodes: Iterable[Any], field: str, value: Any) -> List[Any]:
        """Exact match on ``age`` (actors) or ``year`` (movies)."""
        if field not in FILTERABLE_ATTRIBUTES.values():
            raise ValidationFailure(f"cannot filter on {field!r}")
        return [n for n in nodes if getattr(n, field, None) == value]

    def query(self, kind: NodeKind, name: Optional[str] = None, value: Optional[int] = None) -> List[Any]:
        """Combined filter used by the list endpoints.

        Name filter first, then the attribute filter on the reduced set. With
        neither filter requested the result is empty.
        """
        kind = NodeKind(kind)
        if name is None and value is None:
            return []
        subset = self.nodes(kind)
        if name is not None:
            subset = self.filter_by_name(subset, name)
        if value is not None:
            subset = self.filter_by_attribute(subset, FILTERABLE_ATTRIBUTES[kind], value)
        return subset

    def neighbors_of(self, kind: NodeKind, name: str) -> List[str]:
        """Names adjacent to a node, in adjacency order."""
        return self.get(kind, name).neighbor_names()

    def top_by_metric(self, kind: NodeKind, metric: str, count: int) -> List[str]:
        """Names of the ``count`` highest nodes by ``metric``.

        The sort is stable: nodes with equal values keep insertion order.
        Unset values rank below every set value.
        """
        kind = NodeKind(kind)
        if metric not in RANKABLE_METRICS[kind]:
            raise ValidationFailure(f"cannot rank {kind.value}s by {metric!r}")
        nodes = self.nodes(kind)
        if count < 0 or count > len(nodes):
            raise BoundsError(f"requested top {count} {kind.value}s but only {len(nodes)} exist")

        def sort_key(node: Any):
            val = getattr(node, metric)
            return (val is not None, val if val is not None else 0)

        ranked = sorted(nodes, key=sort_key, reverse=True)
        return [n.name for n in ranked[:count]]

    def asymmetric_edges(self) -> List[Tuple[NodeKind, str, str]]:
        """Edges whose mirror is missing or carries a different weight.

        Returns ``(kind, source, target)`` triples; empty when symmetric.
        Dangling edges (target absent) are reported too.
        """
        out: List[Tuple[NodeKind, str, str]] = []
        for kind in NodeKind:
            other = self._nodes[kind.opposite]
            for node in self._nodes[kind].values():
                for edge in node.adjacency:
                    mirror = other.get(edge.target_name)
                    back = mirror.edge_to(node.name) if mirror is not None else None
                    if back is None or back.weight != edge.weight:
                        out.append((kind, node.name, edge.target_name))
        return out
