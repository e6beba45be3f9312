"""Edge values and edge identity.

Two edge variants exist:

- ``Edge``: a directed edge from ``src`` to ``dest``.
- ``UndirectedEdge``: one traversal direction of an undirected edge. The two
  directions of a logical undirected edge are two ``UndirectedEdge`` values
  with swapped endpoints, opposite ``mirror`` flags and the *same* ``id``.
  The primary instance (``mirror=False``) keeps the orientation the edge was
  created with.

Edge ids are ``EdgeId`` records ``(kind, endpoints, token)``. The token is a
fresh random string per created edge, so two parallel edges never share an
id even when their attributes are identical. Undirected ids order their
endpoints deterministically so both halves of a pair agree.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any


class EdgeKind(str, Enum):
    """Closed set of edge kinds."""

    DIRECTED = "directed"
    UNDIRECTED = "undirected"


@dataclass(frozen=True)
class EdgeId:
    """Identity of a logical edge; also the key of its attribute entry."""

    kind: EdgeKind
    endpoints: tuple[Any, Any]
    token: str

    def reversed(self) -> EdgeId:
        """The id of the same directed edge with swapped endpoints."""
        if self.kind is not EdgeKind.DIRECTED:
            return self
        src, dest = self.endpoints
        return EdgeId(self.kind, (dest, src), self.token)


def endpoint_sort_key(node: Any) -> tuple[str, str]:
    return (type(node).__name__, repr(node))


def _new_token() -> str:
    return uuid.uuid4().hex


def directed_edge_id(src: Any, dest: Any) -> EdgeId:
    """Synthesize a fresh id for a directed edge src -> dest."""
    return EdgeId(EdgeKind.DIRECTED, (src, dest), _new_token())


def undirected_edge_id(src: Any, dest: Any) -> EdgeId:
    """Synthesize a fresh id for an undirected edge; independent of argument order."""
    lo, hi = sorted((src, dest), key=endpoint_sort_key)
    return EdgeId(EdgeKind.UNDIRECTED, (lo, hi), _new_token())


@dataclass(frozen=True)
class Edge:
    """A directed edge.

    Attributes:
        id: Identity of the logical edge (key of its attribute entry)
        src: Source node
        dest: Destination node
    """

    id: EdgeId
    src: Any
    dest: Any

    @property
    def kind(self) -> EdgeKind:
        return EdgeKind.DIRECTED

    @property
    def mirror(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Edge({self.src!r} -> {self.dest!r})"


@dataclass(frozen=True)
class UndirectedEdge:
    """One traversal direction of an undirected edge.

    Attributes:
        id: Identity shared by both directions of the logical edge
        src: Node this direction leaves from
        dest: Node this direction arrives at
        mirror: False for the primary instance, True for its reverse
    """

    id: EdgeId
    src: Any
    dest: Any
    mirror: bool = False

    @property
    def kind(self) -> EdgeKind:
        return EdgeKind.UNDIRECTED

    def __repr__(self) -> str:
        suffix = ", mirror" if self.mirror else ""
        return f"UndirectedEdge({self.src!r} -- {self.dest!r}{suffix})"


AnyEdge = Edge | UndirectedEdge


def make_directed_edge(src: Any, dest: Any) -> Edge:
    """Create a new directed edge with a fresh id."""
    return Edge(directed_edge_id(src, dest), src, dest)


def make_undirected_pair(src: Any, dest: Any) -> tuple[UndirectedEdge, UndirectedEdge]:
    """Create the (primary, mirror) instances of a new undirected edge."""
    edge_id = undirected_edge_id(src, dest)
    return UndirectedEdge(edge_id, src, dest, False), UndirectedEdge(edge_id, dest, src, True)


def is_edge(value: Any) -> bool:
    """True for directed and undirected edge values."""
    return isinstance(value, (Edge, UndirectedEdge))


def is_directed_edge(value: Any) -> bool:
    return isinstance(value, Edge)


def is_undirected_edge(value: Any) -> bool:
    return isinstance(value, UndirectedEdge)


def is_mirror_edge(value: Any) -> bool:
    """True only for the reverse instance of an undirected edge."""
    return isinstance(value, UndirectedEdge) and value.mirror


def other_direction(edge: Any) -> UndirectedEdge | None:
    """The paired instance of an undirected edge; None for anything else."""
    if not isinstance(edge, UndirectedEdge):
        return None
    return UndirectedEdge(edge.id, edge.dest, edge.src, not edge.mirror)


def reverse_directed_edge(edge: Edge) -> Edge:
    """A directed edge pointing the other way, with its id recomputed."""
    return Edge(edge.id.reversed(), edge.dest, edge.src)
