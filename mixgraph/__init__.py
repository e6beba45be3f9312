"""mixgraph: an immutable Python graph with mixed directed/undirected edges, multi-edges and attributes."""

__version__ = "0.1.0"

from mixgraph.engine import (
    Edge,
    EdgeWithAttrs,
    Graph,
    GraphLike,
    NodeWithAttrs,
    UndirectedEdge,
    build_graph,
    digraph,
    edge_with_attrs,
    graph,
    is_directed_edge,
    is_edge,
    is_mirror_edge,
    is_undirected_edge,
    load_graph,
    multidigraph,
    multigraph,
    node_with_attrs,
    other_direction,
    save_graph,
    structurally_equal,
)
from mixgraph.exceptions import GraphError, InvalidEdgeDescriptor, InvalidEntityDescriptor
from mixgraph.models import GraphData, GraphStats, ValidationResult

__all__ = [
    "Edge",
    "EdgeWithAttrs",
    "Graph",
    "GraphData",
    "GraphError",
    "GraphLike",
    "GraphStats",
    "InvalidEdgeDescriptor",
    "InvalidEntityDescriptor",
    "NodeWithAttrs",
    "UndirectedEdge",
    "ValidationResult",
    "__version__",
    "build_graph",
    "digraph",
    "edge_with_attrs",
    "graph",
    "is_directed_edge",
    "is_edge",
    "is_mirror_edge",
    "is_undirected_edge",
    "load_graph",
    "multidigraph",
    "multigraph",
    "node_with_attrs",
    "other_direction",
    "save_graph",
    "structurally_equal",
]
