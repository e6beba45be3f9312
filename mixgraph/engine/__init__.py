from mixgraph.engine.build import (
    EdgeWithAttrs,
    NodeWithAttrs,
    build,
    build_graph,
    digraph,
    edge_with_attrs,
    graph,
    multidigraph,
    multigraph,
    node_with_attrs,
)
from mixgraph.engine.core import Graph, NodeInfo, parse_edge_description, structurally_equal
from mixgraph.engine.edges import (
    Edge,
    EdgeId,
    EdgeKind,
    UndirectedEdge,
    is_directed_edge,
    is_edge,
    is_mirror_edge,
    is_undirected_edge,
    other_direction,
)
from mixgraph.engine.persistence import load_graph, save_graph
from mixgraph.engine.protocol import GraphLike

__all__ = [
    "Edge",
    "EdgeId",
    "EdgeKind",
    "EdgeWithAttrs",
    "Graph",
    "GraphLike",
    "NodeInfo",
    "NodeWithAttrs",
    "UndirectedEdge",
    "build",
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
    "parse_edge_description",
    "save_graph",
    "structurally_equal",
]
