"""Graph construction from heterogeneous inputs.

Each input item passed to ``build`` (or to the ``graph``/``digraph``/
``multigraph``/``multidigraph`` presets) is interpreted as follows:

- a ``Graph``: its nodes with attributes and every logical edge with its
  attributes, each edge keeping its own kind
- an edge value: added as its own kind (directed or undirected)
- ``NodeWithAttrs(node, attrs)`` or a 2-sequence ``(node, mapping)``: a node
  with attributes
- ``EdgeWithAttrs(src, dest, attrs)`` or a 2-/3-sequence: an edge description
- a mapping: an adjacency map, node -> neighbors or node -> {neighbor: weight}
- anything else: a bare node id

The tag types resolve inputs that would otherwise be ambiguous, e.g. a node
whose id is itself a 2-tuple.

Example:
    ```python
    g = graph(("a", "b"), ("a", "c", 3), ("d", {"color": "red"}), "e")
    dg = digraph({"a": ["b", "c"], "b": {"c": 2.5}})
    ```
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from mixgraph.engine.core import Graph, _Transaction, parse_edge_description
from mixgraph.engine.edges import is_edge, is_mirror_edge
from mixgraph.exceptions import InvalidEdgeDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeWithAttrs:
    """Tag forcing an input to be read as a node with attributes."""

    node: Any
    attrs: Mapping[Any, Any]


@dataclass(frozen=True)
class EdgeWithAttrs:
    """Tag forcing an input to be read as an edge description."""

    src: Any
    dest: Any
    attrs: Mapping[Any, Any]


def node_with_attrs(node: Any, attrs: Mapping[Any, Any] | None = None, **more: Any) -> NodeWithAttrs:
    """Build a ``NodeWithAttrs`` from a mapping and/or keyword attributes."""
    return NodeWithAttrs(node, {**(attrs or {}), **more})


def edge_with_attrs(
    src: Any, dest: Any, attrs: Mapping[Any, Any] | None = None, **more: Any
) -> EdgeWithAttrs:
    """Build an ``EdgeWithAttrs`` from a mapping and/or keyword attributes."""
    return EdgeWithAttrs(src, dest, {**(attrs or {}), **more})


def _is_vector(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _merge_graph(txn: _Transaction, other: Graph) -> None:
    for node in other.nodes():
        txn.add_node(node)
        txn.merge_attrs(node, other.attrs.get(node))
    for edge in other.edges():
        if is_mirror_edge(edge):
            continue
        txn.add_edge_value(edge, other.attrs.get(edge.id))


def _merge_adjacency(txn: _Transaction, adjacency: Mapping[Any, Any]) -> None:
    for node, neighbors in adjacency.items():
        txn.add_node(node)
        if isinstance(neighbors, Mapping):
            for nbr, weight in neighbors.items():
                txn.add_edge(node, nbr, {"weight": weight})
        else:
            for nbr in neighbors:
                txn.add_edge(node, nbr, None)


def _apply(txn: _Transaction, init: Any, seen_edge_ids: set[Any]) -> None:
    if isinstance(init, Graph):
        _merge_graph(txn, init)
    elif is_edge(init):
        if init.id in seen_edge_ids:
            logger.debug("Skipping %r: its logical edge was already supplied", init)
            return
        seen_edge_ids.add(init.id)
        txn.add_edge_value(init)
    elif isinstance(init, NodeWithAttrs):
        txn.add_node(init.node)
        txn.merge_attrs(init.node, init.attrs)
    elif isinstance(init, EdgeWithAttrs):
        txn.add_edge(init.src, init.dest, dict(init.attrs))
    elif isinstance(init, Mapping):
        _merge_adjacency(txn, init)
    elif _is_vector(init) and len(init) == 2 and isinstance(init[1], Mapping):
        txn.add_node(init[0])
        txn.merge_attrs(init[0], init[1])
    elif _is_vector(init) and len(init) in (2, 3):
        txn.add_edge(*parse_edge_description(init))
    elif isinstance(init, list):
        raise InvalidEdgeDescriptor(
            f"Edge description must have 2 or 3 elements, got {len(init)}: {init!r}"
        )
    else:
        txn.add_node(init)


def build(graph: Graph, *inits: Any) -> Graph:
    """Merge each of ``inits`` into ``graph`` and return the new graph."""
    txn = _Transaction(graph)
    seen_edge_ids: set[Any] = set()
    for init in inits:
        _apply(txn, init, seen_edge_ids)
    return txn.commit()


def build_graph(*inits: Any, allow_parallel: bool = False, undirected: bool = True) -> Graph:
    """Build a graph with explicit flags."""
    return build(Graph(allow_parallel=allow_parallel, undirected=undirected), *inits)


def graph(*inits: Any) -> Graph:
    """Undirected graph without parallel edges."""
    return build_graph(*inits, allow_parallel=False, undirected=True)


def digraph(*inits: Any) -> Graph:
    """Directed graph without parallel edges."""
    return build_graph(*inits, allow_parallel=False, undirected=False)


def multigraph(*inits: Any) -> Graph:
    """Undirected graph allowing parallel edges."""
    return build_graph(*inits, allow_parallel=True, undirected=True)


def multidigraph(*inits: Any) -> Graph:
    """Directed graph allowing parallel edges."""
    return build_graph(*inits, allow_parallel=True, undirected=False)


__all__ = [
    "EdgeWithAttrs",
    "NodeWithAttrs",
    "build",
    "build_graph",
    "digraph",
    "edge_with_attrs",
    "graph",
    "multidigraph",
    "multigraph",
    "node_with_attrs",
]
