from __future__ import annotations

import logging
from dataclasses import dataclass, asdict
from typing import Dict

from .nodes import Edge, NodeKind
from .store import GraphStore

logger = logging.getLogger(__name__)


@dataclass
class ConsistencyReport:
    mirrored_edges: int = 0
    pruned_edges: int = 0
    removed_nodes: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


class ConsistencyEnforcer:
    """Batch repair after bulk ingestion.

    1. Mirror pass: every edge whose target exists gets a back-edge
       (weight unset) if it lacks one.
    2. Prune pass: edges to absent targets are dropped, then nodes left
       without edges are removed.

    The mirror pass must come first, otherwise a valid one-directional edge
    would look dangling from the side missing its mirror.
    """

    # Movies are pruned before actors so an actor losing its last movie in
    # this pass is still caught.
    PRUNE_ORDER = (NodeKind.MOVIE, NodeKind.ACTOR)

    def __init__(self, store: GraphStore) -> None:
        self.store = store

    def run(self) -> ConsistencyReport:
        report = ConsistencyReport()
        for kind in NodeKind:
            report.mirrored_edges += self._mirror(kind)
        for kind in self.PRUNE_ORDER:
            pruned, removed = self._prune(kind)
            report.pruned_edges += pruned
            report.removed_nodes += removed
        logger.info(
            "Consistency pass: %d mirrored, %d pruned, %d nodes removed",
            report.mirrored_edges,
            report.pruned_edges,
            report.removed_nodes,
        )
        return report

    def _mirror(self, kind: NodeKind) -> int:
        added = 0
        for node in self.store.nodes(kind):
            for edge in node.adjacency:
                target = self.store.find(kind.opposite, edge.target_name)
                if target is not None and not target.has_edge_to(node.name):
                    target.adjacency.append(Edge(node.name))
                    added += 1
        return added

    def _prune(self, kind: NodeKind):
        pruned = 0
        removed = 0
        for node in self.store.nodes(kind):
            keep = [e for e in node.adjacency if self.store.contains(kind.opposite, e.target_name)]
            pruned += len(node.adjacency) - len(keep)
            node.adjacency[:] = keep
            if not node.adjacency:
                # No edges left, so there is nothing to cascade.
                self.store.delete_node(kind, node.name)
                removed += 1
                logger.debug("Pruned incomplete %s %r", kind.value, node.name)
        return pruned, removed


def repair(store: GraphStore) -> ConsistencyReport:
    return ConsistencyEnforcer(store).run()
