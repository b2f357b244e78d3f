from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional


class NodeKind(str, Enum):
    ACTOR = "actor"
    MOVIE = "movie"

    @property
    def opposite(self) -> "NodeKind":
        return NodeKind.MOVIE if self is NodeKind.ACTOR else NodeKind.ACTOR


@dataclass
class Edge:
    """Weak reference to a node of the opposite kind, by name."""

    target_name: str
    weight: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.target_name, "weight": self.weight}


@dataclass
class _Node:
    kind: ClassVar[NodeKind]
    # Fields editable through update_node(); adjacency is never set that way.
    attributes: ClassVar[tuple] = ()

    def edge_to(self, name: str) -> Optional[Edge]:
        for edge in self.adjacency:
            if edge.target_name == name:
                return edge
        return None

    def has_edge_to(self, name: str) -> bool:
        return self.edge_to(name) is not None

    def remove_edges_to(self, name: str) -> int:
        before = len(self.adjacency)
        self.adjacency[:] = [e for e in self.adjacency if e.target_name != name]
        return before - len(self.adjacency)

    def neighbor_names(self) -> List[str]:
        return [e.target_name for e in self.adjacency]

    def to_dict(self) -> Dict[str, Any]:
        """Read-only JSON projection; never shares state with the live node."""
        out: Dict[str, Any] = {"name": self.name}
        for attr in self.attributes:
            out[attr] = getattr(self, attr)
        out["adjacency_list"] = [e.to_dict() for e in self.adjacency]
        return out


@dataclass
class ActorNode(_Node):
    kind: ClassVar[NodeKind] = NodeKind.ACTOR
    attributes: ClassVar[tuple] = ("age", "total_grossing_value")

    name: str
    age: Optional[int] = None
    total_grossing_value: Optional[float] = None
    adjacency: List[Edge] = field(default_factory=list)


@dataclass
class MovieNode(_Node):
    kind: ClassVar[NodeKind] = NodeKind.MOVIE
    attributes: ClassVar[tuple] = ("box_office", "year")

    name: str
    box_office: Optional[float] = None
    year: Optional[int] = None
    adjacency: List[Edge] = field(default_factory=list)


NODE_TYPES = {NodeKind.ACTOR: ActorNode, NodeKind.MOVIE: MovieNode}


def new_node(kind: NodeKind, name: str, **attrs: Any) -> _Node:
    """Build a node of ``kind``; with no attrs this is a stub node."""
    return NODE_TYPES[NodeKind(kind)](name=name, **attrs)
