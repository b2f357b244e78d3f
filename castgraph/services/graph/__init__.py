"""Actor/movie graph engine.

Everything callers normally need is re-exported at package level:

    from castgraph.services.graph import GraphStore, NodeKind, repair, distribute_all
"""
from .errors import (
    GraphError,
    NotFound,
    InvalidState,
    ValidationFailure,
    DuplicateNode,
    FetchFailure,
    BoundsError,
)
from .nodes import NodeKind, Edge, ActorNode, MovieNode, new_node
from .store import GraphStore
from .consistency import ConsistencyEnforcer, ConsistencyReport, repair
from .weights import WeightDistributor, decayed_shares, distribute_all
from .snapshot import graph_to_dict, graph_from_dict, save_snapshot, load_snapshot

__all__ = [
    # errors
    'GraphError','NotFound','InvalidState','ValidationFailure','DuplicateNode','FetchFailure','BoundsError',
    # model
    'NodeKind','Edge','ActorNode','MovieNode','new_node',
    # store
    'GraphStore',
    # repair
    'ConsistencyEnforcer','ConsistencyReport','repair',
    # weights
    'WeightDistributor','decayed_shares','distribute_all',
    # persistence
    'graph_to_dict','graph_from_dict','save_snapshot','load_snapshot',
]
