"""GraphLike protocol -- the read interface graph algorithms consume.

Public API:
    GraphLike: Runtime-checkable protocol satisfied by ``Graph``.

Algorithms should treat edges as opaque values exposing ``src``, ``dest``
and attribute lookup through the graph, never as raw pairs, so they stay
correct on graphs with parallel edges. Edge-kind predicates and
``other_direction`` live in ``mixgraph.engine.edges``.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Protocol, runtime_checkable

from .edges import AnyEdge


@runtime_checkable
class GraphLike(Protocol):
    """Capabilities an algorithm may rely on."""

    # ========== Nodes ==========

    def nodes(self) -> Iterator[Any]:
        """Iterate over node ids."""
        ...

    def has_node(self, node: Any) -> bool:
        ...

    def successors(self, node: Any) -> Iterator[Any]:
        ...

    def predecessors(self, node: Any) -> Iterator[Any]:
        ...

    def out_degree(self, node: Any) -> int:
        ...

    def in_degree(self, node: Any) -> int:
        ...

    # ========== Edges ==========

    def edges(self) -> Iterator[AnyEdge]:
        """Iterate over every stored edge, undirected mirrors included."""
        ...

    def out_edges(self, node: Any) -> Iterator[AnyEdge]:
        ...

    def in_edges(self, node: Any) -> Iterator[AnyEdge]:
        ...

    def has_edge(self, src: Any, dest: Any = ...) -> bool:
        ...

    def find_edges(self, *args: Any, **filters: Any) -> Iterator[AnyEdge]:
        """Edges matching endpoints and/or an attribute sub-mapping."""
        ...

    def find_edge(self, *args: Any, **filters: Any) -> AnyEdge | None:
        ...

    # ========== Attributes ==========

    def weight(self, entity: Any, dest: Any = ...) -> Any:
        """The ``"weight"`` attribute of an edge, 1 when unset."""
        ...

    def attrs_of(self, entity: Any) -> dict[Any, Any]:
        ...

    def attr(self, entity: Any, key: Any, default: Any = None) -> Any:
        ...

    def set_attrs(self, entity: Any, attrs: dict[Any, Any]) -> GraphLike:
        """A new graph with the entity's attributes replaced."""
        ...

    def add_attrs(self, entity: Any, attrs: dict[Any, Any]) -> GraphLike:
        """A new graph with attributes merged into the entity's."""
        ...


__all__ = ["GraphLike"]
