"""Core graph data structures and operations.

An in-memory graph value supporting directed edges, undirected edges, both
kinds mixed in one graph, parallel edges, and attributes on nodes and edges.

Immutability:
    A ``Graph`` is never modified after construction. Every mutating method
    returns a new ``Graph``. Mutations run inside a private ``_Transaction``
    that copies the top-level maps once and copies each touched node record
    at most once, so graphs derived from the same base share untouched node
    records and never observe each other's changes. No locking is required
    for concurrent readers.

Representation:
    node_map: node id -> NodeInfo (per-neighbor out/in edge sets + degrees)
    attrs:    node id or EdgeId -> attribute dict

    A directed edge s->d lives in ``out_edges[d]`` of s and ``in_edges[s]`` of d.
    An undirected edge is stored as its primary instance (as a directed s->d
    would be) plus its mirror instance d->s. Both share one ``EdgeId`` and
    therefore one attribute entry. An undirected self-loop stores only its
    primary instance.

Edge descriptions:
    Wherever an edge is expected, a description may be used instead:
    ``(src, dest)``, ``(src, dest, weight)`` or ``(src, dest, attr_mapping)``.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from itertools import chain
from numbers import Number
from typing import Any

from mixgraph.engine.edges import (
    AnyEdge,
    Edge,
    EdgeId,
    UndirectedEdge,
    endpoint_sort_key,
    is_directed_edge,
    is_edge,
    is_mirror_edge,
    is_undirected_edge,
    make_directed_edge,
    make_undirected_pair,
    other_direction,
    reverse_directed_edge,
)
from mixgraph.exceptions import InvalidEdgeDescriptor, InvalidEntityDescriptor
from mixgraph.models import EdgeRecord, GraphData, GraphStats, NodeRecord, ValidationResult

logger = logging.getLogger(__name__)

_MISSING = object()

LABEL_KEY = "label"


@dataclass(frozen=True)
class NodeInfo:
    """Adjacency record of one node.

    Attributes:
        out_edges: neighbor -> edges leaving this node toward that neighbor
        in_edges: neighbor -> edges arriving at this node from that neighbor
        out_degree: total number of edges across ``out_edges``
        in_degree: total number of edges across ``in_edges``
    """

    out_edges: dict[Any, frozenset[AnyEdge]] = field(default_factory=dict)
    in_edges: dict[Any, frozenset[AnyEdge]] = field(default_factory=dict)
    out_degree: int = 0
    in_degree: int = 0

    # Edge sets live in dicts, so records compare by value but do not hash
    __hash__ = None  # type: ignore[assignment]


class _NodeDraft:
    """Mutable working copy of a NodeInfo, owned by a single transaction."""

    __slots__ = ("out_edges", "in_edges", "out_degree", "in_degree")

    def __init__(self, info: NodeInfo) -> None:
        self.out_edges = dict(info.out_edges)
        self.in_edges = dict(info.in_edges)
        self.out_degree = info.out_degree
        self.in_degree = info.in_degree

    def freeze(self) -> NodeInfo:
        return NodeInfo(self.out_edges, self.in_edges, self.out_degree, self.in_degree)


def _add_to_slot(slots: dict[Any, frozenset[AnyEdge]], key: Any, edge: AnyEdge) -> None:
    slots[key] = slots.get(key, frozenset()) | {edge}


def _discard_from_slot(slots: dict[Any, frozenset[AnyEdge]], key: Any, edge: AnyEdge) -> None:
    remaining = slots.get(key, frozenset()) - {edge}
    if remaining:
        slots[key] = remaining
    else:
        # Empty neighbor entries are never kept
        slots.pop(key, None)


# ========== Edge Descriptions ==========


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def parse_edge_description(description: Any) -> tuple[Any, Any, dict[Any, Any] | None]:
    """Split an edge description into ``(src, dest, attrs)``.

    A numeric third element is shorthand for ``{"weight": n}``.

    Raises:
        InvalidEdgeDescriptor: If the description is not a 2- or 3-element
            sequence, or its third element is neither a number nor a mapping
    """
    if not _is_sequence(description) or len(description) not in (2, 3):
        raise InvalidEdgeDescriptor(
            f"Edge description must be (src, dest) or (src, dest, weight-or-attrs), "
            f"got: {description!r}"
        )
    if len(description) == 2:
        src, dest = description
        return src, dest, None
    src, dest, extra = description
    if _is_number(extra):
        return src, dest, {"weight": extra}
    if isinstance(extra, Mapping):
        return src, dest, dict(extra)
    raise InvalidEdgeDescriptor(
        f"Third element of an edge description must be a number or a mapping, "
        f"got: {type(extra).__name__}"
    )


# ========== Query Engine ==========


def _candidate_edges(node_map: Mapping[Any, Any], src: Any, dest: Any) -> Iterator[AnyEdge]:
    if src is not _MISSING and dest is not _MISSING:
        info = node_map.get(src)
        return iter(info.out_edges.get(dest, ())) if info is not None else iter(())
    if src is not _MISSING:
        info = node_map.get(src)
        return chain.from_iterable(info.out_edges.values()) if info is not None else iter(())
    if dest is not _MISSING:
        info = node_map.get(dest)
        return chain.from_iterable(info.in_edges.values()) if info is not None else iter(())
    return chain.from_iterable(
        chain.from_iterable(info.out_edges.values()) for info in node_map.values()
    )


def _iter_matching(
    node_map: Mapping[Any, Any],
    attrs: Mapping[Any, dict[Any, Any]],
    src: Any,
    dest: Any,
    query: Mapping[Any, Any],
) -> Iterator[AnyEdge]:
    for edge in _candidate_edges(node_map, src, dest):
        if not query:
            yield edge
            continue
        edge_attrs = attrs.get(edge.id, {})
        if all(edge_attrs.get(k, _MISSING) == v for k, v in query.items()):
            yield edge


def _split_query(args: tuple[Any, ...], filters: dict[str, Any]) -> tuple[Any, Any, dict]:
    if len(args) == 0:
        query: dict[Any, Any] = dict(filters)
    elif len(args) == 1:
        if not isinstance(args[0], Mapping):
            raise TypeError(
                f"find_edges() takes (src, dest) or a query mapping, got: {type(args[0]).__name__}"
            )
        query = {**args[0], **filters}
    elif len(args) == 2:
        query = {"src": args[0], "dest": args[1], **filters}
    else:
        raise TypeError(f"find_edges() takes at most 2 positional arguments ({len(args)} given)")
    src = query.pop("src", _MISSING)
    dest = query.pop("dest", _MISSING)
    return src, dest, query


def _lookup_description(
    node_map: Mapping[Any, Any],
    attrs: Mapping[Any, dict[Any, Any]],
    description: Any,
) -> AnyEdge | None:
    src, dest, query = parse_edge_description(description)
    return next(_iter_matching(node_map, attrs, src, dest, query or {}), None)


# ========== Transaction ==========


class _Transaction:
    """Copy-on-write mutation context producing one new Graph.

    The source graph's node records are copied into drafts on first touch;
    both the source-side and destination-side updates of a self-loop land
    on the same draft.
    """

    def __init__(self, graph: Graph) -> None:
        self.allow_parallel = graph.allow_parallel
        self.undirected = graph.undirected
        self._node_map: dict[Any, NodeInfo | _NodeDraft] = dict(graph.node_map)
        self._attrs: dict[Any, dict[Any, Any]] = dict(graph.attrs)
        self._drafted: set[Any] = set()

    # ---------- reads ----------

    def has_node(self, node: Any) -> bool:
        return node in self._node_map

    def contains(self, edge: AnyEdge) -> bool:
        info = self._node_map.get(edge.src)
        return info is not None and edge in info.out_edges.get(edge.dest, ())

    def find_edge(self, src: Any, dest: Any) -> AnyEdge | None:
        info = self._node_map.get(src)
        if info is None:
            return None
        return next(iter(info.out_edges.get(dest, ())), None)

    def lookup(self, description: Any) -> AnyEdge | None:
        return _lookup_description(self._node_map, self._attrs, description)

    def attrs_of(self, key: Any) -> dict[Any, Any]:
        return self._attrs.get(key, {})

    def edges_of_node(self, node: Any) -> list[AnyEdge]:
        info = self._node_map[node]
        return list(
            chain(
                chain.from_iterable(info.out_edges.values()),
                chain.from_iterable(info.in_edges.values()),
            )
        )

    # ---------- attributes ----------

    def set_attrs(self, key: Any, attrs: Mapping[Any, Any] | None) -> None:
        if attrs:
            self._attrs[key] = dict(attrs)
        else:
            self._attrs.pop(key, None)

    def merge_attrs(self, key: Any, attrs: Mapping[Any, Any] | None) -> None:
        if attrs:
            self._attrs[key] = {**self._attrs.get(key, {}), **attrs}

    # ---------- nodes ----------

    def _draft(self, node: Any) -> _NodeDraft:
        info = self._node_map[node]
        if node not in self._drafted:
            info = _NodeDraft(info)
            self._node_map[node] = info
            self._drafted.add(node)
        return info  # type: ignore[return-value]

    def add_node(self, node: Any) -> None:
        if node not in self._node_map:
            self._node_map[node] = NodeInfo()

    def remove_node(self, node: Any) -> bool:
        if node not in self._node_map:
            logger.debug("remove_node: %r not present, nothing to do", node)
            return False
        for edge in self.edges_of_node(node):
            self.remove_edge(edge)
        del self._node_map[node]
        self._drafted.discard(node)
        self._attrs.pop(node, None)
        return True

    # ---------- edges ----------

    def _link(self, edge: AnyEdge) -> None:
        src_info = self._draft(edge.src)
        _add_to_slot(src_info.out_edges, edge.dest, edge)
        src_info.out_degree += 1
        dest_info = self._draft(edge.dest)
        _add_to_slot(dest_info.in_edges, edge.src, edge)
        dest_info.in_degree += 1

    def _unlink(self, edge: AnyEdge) -> None:
        src_info = self._draft(edge.src)
        _discard_from_slot(src_info.out_edges, edge.dest, edge)
        src_info.out_degree -= 1
        dest_info = self._draft(edge.dest)
        _discard_from_slot(dest_info.in_edges, edge.src, edge)
        dest_info.in_degree -= 1

    def add_edge(self, src: Any, dest: Any, attrs: Mapping[Any, Any] | None) -> None:
        """Add an edge using the graph's default orientation."""
        if self.undirected:
            self.add_undirected_edge(src, dest, attrs, upgrade=False)
        else:
            self.add_directed_edge(src, dest, attrs)

    def add_directed_edge(self, src: Any, dest: Any, attrs: Mapping[Any, Any] | None) -> None:
        self.add_node(src)
        self.add_node(dest)
        if not self.allow_parallel:
            existing = self.find_edge(src, dest)
            if existing is not None:
                if attrs:
                    logger.debug("Merging attributes into existing edge %r", existing)
                self.merge_attrs(existing.id, attrs)
                return
        edge = make_directed_edge(src, dest)
        self._link(edge)
        self.set_attrs(edge.id, attrs)

    def add_undirected_edge(
        self,
        src: Any,
        dest: Any,
        attrs: Mapping[Any, Any] | None,
        upgrade: bool = True,
    ) -> None:
        """Add an undirected edge.

        With ``upgrade`` (the forced path), existing edges between the pair in
        either direction are replaced by one undirected edge carrying the
        union of their attributes and ``attrs``. Without it, attributes are
        merged into whichever existing edge is found first.
        """
        self.add_node(src)
        self.add_node(dest)
        if not self.allow_parallel:
            forward = self.find_edge(src, dest)
            backward = self.find_edge(dest, src)
            existing = forward if forward is not None else backward
            if existing is not None:
                conflicts = {e.id: e for e in (forward, backward) if e is not None}
                if not upgrade or (len(conflicts) == 1 and is_undirected_edge(existing)):
                    self.merge_attrs(existing.id, attrs)
                    return
                merged: dict[Any, Any] = {}
                for edge in (forward, backward):
                    if edge is not None:
                        merged.update(self.attrs_of(edge.id))
                merged.update(attrs or {})
                logger.debug(
                    "Upgrading %d edge(s) between %r and %r to one undirected edge",
                    len(conflicts),
                    src,
                    dest,
                )
                for edge in conflicts.values():
                    self.remove_edge(edge)
                attrs = merged
        primary, mirror = make_undirected_pair(src, dest)
        self._link(primary)
        if src != dest:
            self._link(mirror)
        self.set_attrs(primary.id, attrs)

    def add_edge_value(self, edge: AnyEdge, attrs: Mapping[Any, Any] | None = None) -> None:
        """Add an edge value as its own kind (orientation taken from the primary)."""
        if is_undirected_edge(edge):
            if edge.mirror:
                edge = other_direction(edge)
            self.add_undirected_edge(edge.src, edge.dest, attrs)
        else:
            self.add_directed_edge(edge.src, edge.dest, attrs)

    def remove_edge(self, edge: AnyEdge) -> bool:
        if not self.contains(edge):
            twin = other_direction(edge)
            if twin is None or not self.contains(twin):
                logger.debug("remove_edge: %r not present, nothing to do", edge)
                return False
            edge = twin
        self._unlink(edge)
        twin = other_direction(edge)
        if twin is not None and self.contains(twin):
            self._unlink(twin)
        self._attrs.pop(edge.id, None)
        return True

    def commit(self) -> Graph:
        for node in self._drafted:
            self._node_map[node] = self._node_map[node].freeze()  # type: ignore[union-attr]
        self._drafted = set()
        return Graph(
            node_map=self._node_map,  # type: ignore[arg-type]
            allow_parallel=self.allow_parallel,
            undirected=self.undirected,
            attrs=self._attrs,
        )


# ========== Graph ==========


@dataclass(frozen=True)
class Graph:
    """An immutable graph with mixed edge kinds, parallel edges and attributes.

    Attributes:
        node_map: node id -> NodeInfo
        allow_parallel: Whether distinct edges may connect the same pair
        undirected: Orientation of edges added through ``add_edges``
        attrs: node id or EdgeId -> attribute dict

    Equality compares all four fields exactly, including synthetic edge ids.
    Use ``structurally_equal`` to compare graphs up to edge ids.
    Graphs are not hashable.
    """

    node_map: dict[Any, NodeInfo] = field(default_factory=dict)
    allow_parallel: bool = False
    undirected: bool = True
    attrs: dict[Any, dict[Any, Any]] = field(default_factory=dict)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"Graph(nodes={len(self.node_map)}, edges={self.count_unique_edges()}, "
            f"undirected={self.undirected}, allow_parallel={self.allow_parallel})"
        )

    def __len__(self) -> int:
        return len(self.node_map)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.node_map)

    def __contains__(self, node: Any) -> bool:
        return self.has_node(node)

    def _transaction(self) -> _Transaction:
        return _Transaction(self)

    # ========== Node Operations ==========

    def nodes(self) -> Iterator[Any]:
        """Iterate over all node ids."""
        return iter(self.node_map)

    def has_node(self, node: Any) -> bool:
        try:
            return node in self.node_map
        except TypeError:
            return False

    def count_nodes(self) -> int:
        return len(self.node_map)

    def successors(self, node: Any) -> Iterator[Any]:
        """Nodes reachable from ``node`` over one outgoing edge."""
        info = self.node_map.get(node)
        return iter(info.out_edges) if info is not None else iter(())

    def predecessors(self, node: Any) -> Iterator[Any]:
        """Nodes with an edge arriving at ``node``."""
        info = self.node_map.get(node)
        return iter(info.in_edges) if info is not None else iter(())

    def out_degree(self, node: Any) -> int:
        info = self.node_map.get(node)
        return info.out_degree if info is not None else 0

    def in_degree(self, node: Any) -> int:
        info = self.node_map.get(node)
        return info.in_degree if info is not None else 0

    def add_nodes(self, *nodes: Any) -> Graph:
        """Add nodes; nodes that already exist are left untouched."""
        txn = self._transaction()
        for node in nodes:
            txn.add_node(node)
        return txn.commit()

    def add_nodes_with_attrs(self, *pairs: tuple[Any, Mapping[Any, Any]]) -> Graph:
        """Add ``(node, attrs)`` pairs, merging attrs into any existing ones."""
        txn = self._transaction()
        for node, attrs in pairs:
            txn.add_node(node)
            txn.merge_attrs(node, attrs)
        return txn.commit()

    def remove_nodes(self, *nodes: Any) -> Graph:
        """Remove nodes together with all their incident edges.

        Nodes that do not exist are ignored.
        """
        txn = self._transaction()
        for node in nodes:
            txn.remove_node(node)
        return txn.commit()

    def remove_all(self) -> Graph:
        """An empty graph with the same flags."""
        return Graph(allow_parallel=self.allow_parallel, undirected=self.undirected)

    # ========== Edge Operations ==========

    def edges(self) -> Iterator[AnyEdge]:
        """Iterate over all stored edges, mirror instances included."""
        return _candidate_edges(self.node_map, _MISSING, _MISSING)

    def out_edges(self, node: Any) -> Iterator[AnyEdge]:
        return _candidate_edges(self.node_map, node, _MISSING)

    def in_edges(self, node: Any) -> Iterator[AnyEdge]:
        return _candidate_edges(self.node_map, _MISSING, node)

    def count_edges(self) -> int:
        """Number of stored edges; an undirected edge usually counts twice."""
        return sum(info.out_degree for info in self.node_map.values())

    def count_unique_edges(self) -> int:
        """Number of logical edges; mirror instances are not counted."""
        return sum(1 for edge in self.edges() if not is_mirror_edge(edge))

    def _stores(self, edge: AnyEdge) -> bool:
        info = self.node_map.get(edge.src)
        return info is not None and edge in info.out_edges.get(edge.dest, ())

    def has_edge(self, src: Any, dest: Any = _MISSING) -> bool:
        """Check for an edge value, an edge description, or any edge from ``src`` to ``dest``.

        A description's third element filters by attributes, as in ``find_edges``.
        """
        if dest is _MISSING:
            if is_edge(src):
                return self._stores(src)
            return _lookup_description(self.node_map, self.attrs, src) is not None
        return self.find_edge(src, dest) is not None

    def find_edges(self, *args: Any, **filters: Any) -> Iterator[AnyEdge]:
        """Lazily find edges by endpoints and/or attributes.

        Call forms:
            find_edges(src, dest)
            find_edges({"src": a, "color": "red"})
            find_edges(dest=b, color="red")

        ``src`` and ``dest`` select candidates from the adjacency index (both,
        either or neither); every other key must be present in the edge's
        attributes with an equal value.

        Returns:
            Generator over matching edges, in adjacency order
        """
        src, dest, query = _split_query(args, filters)
        return _iter_matching(self.node_map, self.attrs, src, dest, query)

    def find_edge(self, *args: Any, **filters: Any) -> AnyEdge | None:
        """First edge matching ``find_edges(...)``, or None."""
        return next(self.find_edges(*args, **filters), None)

    def edge_description_to_edge(self, description: Any) -> AnyEdge | None:
        """Resolve an edge value or edge description to a stored edge."""
        if is_edge(description):
            return description
        return _lookup_description(self.node_map, self.attrs, description)

    def add_edges(self, *descriptions: Any) -> Graph:
        """Add edges in the graph's default orientation.

        Each description is ``(src, dest)``, ``(src, dest, weight)`` or
        ``(src, dest, attrs)``. Missing endpoints are created. Unless
        ``allow_parallel`` is set, an edge that already connects the pair
        receives the new attributes instead of a second edge being created.
        """
        txn = self._transaction()
        for description in descriptions:
            txn.add_edge(*parse_edge_description(description))
        return txn.commit()

    def add_directed_edges(self, *descriptions: Any) -> Graph:
        """Add directed edges regardless of the graph's default orientation."""
        txn = self._transaction()
        for description in descriptions:
            txn.add_directed_edge(*parse_edge_description(description))
        return txn.commit()

    def add_undirected_edges(self, *descriptions: Any) -> Graph:
        """Add undirected edges regardless of the graph's default orientation.

        Unless ``allow_parallel`` is set, existing edges between the pair in
        either direction are replaced by a single undirected edge whose
        attributes are the union of the old forward, old backward and new
        attributes (later sources win).
        """
        txn = self._transaction()
        for description in descriptions:
            txn.add_undirected_edge(*parse_edge_description(description))
        return txn.commit()

    def remove_edges(self, *descriptors: Any) -> Graph:
        """Remove edges given as edge values or descriptions.

        Descriptors that do not match a stored edge are ignored.
        """
        txn = self._transaction()
        for descriptor in descriptors:
            edge = descriptor if is_edge(descriptor) else txn.lookup(descriptor)
            if edge is None:
                logger.debug("remove_edges: no edge matches %r", descriptor)
                continue
            txn.remove_edge(edge)
        return txn.commit()

    def build(self, *inits: Any) -> Graph:
        """Merge heterogeneous inputs into this graph (see ``engine.build``)."""
        from mixgraph.engine.build import build

        return build(self, *inits)

    # ========== Attribute Operations ==========

    def resolve(self, entity: Any) -> Any:
        """Return the attribute key of a node, edge value or edge description.

        Raises:
            InvalidEntityDescriptor: If ``entity`` names no node or edge, or is
                an edge value this graph does not store
            InvalidEdgeDescriptor: If ``entity`` is a malformed 3-element description
        """
        if is_edge(entity):
            twin = other_direction(entity)
            if self._stores(entity) or (twin is not None and self._stores(twin)):
                return entity.id
            raise InvalidEntityDescriptor(f"Edge is not in this graph: {entity!r}")
        if self.has_node(entity):
            return entity
        if _is_sequence(entity) and len(entity) in (2, 3):
            edge = _lookup_description(self.node_map, self.attrs, entity)
            if edge is not None:
                return edge.id
        raise InvalidEntityDescriptor(f"No node or edge matches: {entity!r}")

    def attrs_of(self, entity: Any) -> dict[Any, Any]:
        """Attributes of a node or edge (empty dict if none are set)."""
        return dict(self.attrs.get(self.resolve(entity), {}))

    def attr(self, entity: Any, key: Any, default: Any = None) -> Any:
        return self.attrs.get(self.resolve(entity), {}).get(key, default)

    def weight(self, entity: Any, dest: Any = _MISSING) -> Any:
        """The ``"weight"`` attribute of an edge, defaulting to 1.

        Accepts an edge value, an edge description, or ``(src, dest)`` as
        two arguments.
        """
        if dest is not _MISSING:
            entity = (entity, dest)
        return self.attr(entity, "weight", 1)

    def _with_attrs(self, key: Any, attrs: Mapping[Any, Any]) -> Graph:
        new_attrs = dict(self.attrs)
        if attrs:
            new_attrs[key] = dict(attrs)
        else:
            new_attrs.pop(key, None)
        return dataclasses.replace(self, attrs=new_attrs)

    def set_attrs(self, entity: Any, attrs: Mapping[Any, Any]) -> Graph:
        """Replace the attributes of a node or edge."""
        return self._with_attrs(self.resolve(entity), attrs)

    def add_attrs(self, entity: Any, attrs: Mapping[Any, Any]) -> Graph:
        """Merge attributes into a node or edge; new values win."""
        key = self.resolve(entity)
        return self._with_attrs(key, {**self.attrs.get(key, {}), **attrs})

    def add_attr(self, entity: Any, key: Any, value: Any) -> Graph:
        return self.add_attrs(entity, {key: value})

    def remove_attrs(self, entity: Any, keys: Iterable[Any]) -> Graph:
        """Delete the named attribute keys; unknown keys are ignored."""
        resolved = self.resolve(entity)
        drop = set(keys)
        return self._with_attrs(
            resolved, {k: v for k, v in self.attrs.get(resolved, {}).items() if k not in drop}
        )

    def remove_attr(self, entity: Any, key: Any) -> Graph:
        return self.remove_attrs(entity, [key])

    # ========== Labels ==========

    def label(self, entity: Any) -> Any:
        """The label of a node or edge, or None."""
        return self.attr(entity, LABEL_KEY)

    def has_label(self, entity: Any) -> bool:
        return LABEL_KEY in self.attrs.get(self.resolve(entity), {})

    def add_label(self, entity: Any, label: Any) -> Graph:
        """Label a node or edge, replacing any previous label."""
        return self.add_attr(entity, LABEL_KEY, label)

    def remove_label(self, entity: Any) -> Graph:
        return self.remove_attr(entity, LABEL_KEY)

    def add_labeled_nodes(self, *pairs: tuple[Any, Any]) -> Graph:
        """Add ``(node, label)`` pairs; existing nodes are relabeled."""
        txn = self._transaction()
        for node, label in pairs:
            txn.add_node(node)
            txn.merge_attrs(node, {LABEL_KEY: label})
        return txn.commit()

    def add_labeled_edges(self, *pairs: tuple[Any, Any]) -> Graph:
        """Add ``(edge_description, label)`` pairs in the default orientation.

        The label is merged like any other attribute, so an edge that already
        connects the pair is relabeled unless ``allow_parallel`` is set.
        """
        txn = self._transaction()
        for description, label in pairs:
            src, dest, attrs = parse_edge_description(description)
            txn.add_edge(src, dest, {**(attrs or {}), LABEL_KEY: label})
        return txn.commit()

    # ========== Derived Graphs ==========

    def nodes_filtered_by(self, pred: Callable[[Any], bool]) -> Graph:
        """Keep only the nodes for which ``pred(node)`` is true.

        Edges touching a dropped node are dropped with it. Flags and the
        attributes of everything kept are preserved.
        """
        txn = self._transaction()
        for node in [n for n in self.node_map if not pred(n)]:
            txn.remove_node(node)
        return txn.commit()

    def subgraph(self, nodes: Iterable[Any]) -> Graph:
        """The subgraph induced by ``nodes``; ids not in the graph are ignored."""
        keep = set(nodes)
        return self.nodes_filtered_by(keep.__contains__)

    def edges_filtered_by(self, pred: Callable[[AnyEdge], bool]) -> Graph:
        """Keep only the edges for which ``pred(edge)`` is true.

        ``pred`` is called once per logical edge, with the primary instance of
        an undirected edge; its mirror is kept or dropped along with it. All
        nodes are kept.
        """
        txn = self._transaction()
        for edge in [e for e in self.edges() if not is_mirror_edge(e) and not pred(e)]:
            txn.remove_edge(edge)
        return txn.commit()

    def mapped_by(self, fn: Callable[[Any], Any]) -> Graph:
        """Rename every node to ``fn(node)``.

        Nodes that map to the same id are merged, along with their attributes.
        Edges keep their kind and attributes; edges that end up connecting the
        same pair follow the usual parallel-edge policy.
        """
        txn = Graph(allow_parallel=self.allow_parallel, undirected=self.undirected)._transaction()
        for node in self.node_map:
            mapped = fn(node)
            txn.add_node(mapped)
            txn.merge_attrs(mapped, self.attrs.get(node))
        for edge in self.edges():
            if is_mirror_edge(edge):
                continue
            src, dest, attrs = fn(edge.src), fn(edge.dest), self.attrs.get(edge.id)
            if is_undirected_edge(edge):
                txn.add_undirected_edge(src, dest, attrs)
            else:
                txn.add_directed_edge(src, dest, attrs)
        return txn.commit()

    # ========== Transformations ==========

    def transpose(self) -> Graph:
        """Reverse every directed edge.

        Directed edges get swapped endpoints and recomputed ids, and their
        attribute entries move to the new ids. Undirected edges are symmetric
        and keep their instances, ids and attributes.
        """

        def flip(edge: AnyEdge) -> AnyEdge:
            if is_directed_edge(edge):
                return reverse_directed_edge(edge)
            if edge.src == edge.dest:
                return edge
            return other_direction(edge)  # type: ignore[return-value]

        def flip_slots(slots: dict[Any, frozenset[AnyEdge]]) -> dict[Any, frozenset[AnyEdge]]:
            return {nbr: frozenset(flip(e) for e in edges) for nbr, edges in slots.items()}

        node_map = {
            node: NodeInfo(
                out_edges=flip_slots(info.in_edges),
                in_edges=flip_slots(info.out_edges),
                out_degree=info.in_degree,
                in_degree=info.out_degree,
            )
            for node, info in self.node_map.items()
        }
        attrs = {
            (key.reversed() if isinstance(key, EdgeId) else key): value
            for key, value in self.attrs.items()
        }
        return dataclasses.replace(self, node_map=node_map, attrs=attrs)

    # ========== Utility Methods ==========

    def stats(self) -> GraphStats:
        """Node and logical edge counts."""
        directed = undirected = loops = 0
        for edge in self.edges():
            if is_mirror_edge(edge):
                continue
            if is_directed_edge(edge):
                directed += 1
            else:
                undirected += 1
            if edge.src == edge.dest:
                loops += 1
        return GraphStats(
            node_count=len(self.node_map),
            edge_count=directed + undirected,
            directed_edge_count=directed,
            undirected_edge_count=undirected,
            self_loop_count=loops,
            allow_parallel=self.allow_parallel,
            undirected=self.undirected,
        )

    def validate(self) -> ValidationResult:
        """Check adjacency, degree and attribute invariants.

        Checks for:
        - Degree counters that disagree with the stored edge sets
        - Edges stored under the wrong node or neighbor slot
        - Edges missing their counterpart entry on the other endpoint
        - Undirected edges missing their mirror
        - Parallel edges in a graph that forbids them
        - Attribute entries for unknown nodes or edges

        Returns:
            ValidationResult with ``valid``, ``errors`` and ``warnings``
        """
        errors: list[str] = []
        warnings: list[str] = []
        edge_ids: set[EdgeId] = set()

        for node, info in self.node_map.items():
            out_total = sum(len(edges) for edges in info.out_edges.values())
            in_total = sum(len(edges) for edges in info.in_edges.values())
            if info.out_degree != out_total:
                errors.append(
                    f"Node {node!r} out_degree is {info.out_degree} but stores {out_total} edges"
                )
            if info.in_degree != in_total:
                errors.append(
                    f"Node {node!r} in_degree is {info.in_degree} but stores {in_total} edges"
                )

            for nbr, edges in info.out_edges.items():
                if not edges:
                    warnings.append(f"Node {node!r} has an empty out-edge entry for {nbr!r}")
                if nbr not in self.node_map:
                    errors.append(f"Node {node!r} has out-edges to non-existent node {nbr!r}")
                    continue
                if not self.allow_parallel and len({e.id for e in edges}) > 1:
                    errors.append(f"Parallel edges from {node!r} to {nbr!r} are not allowed")
                for edge in edges:
                    edge_ids.add(edge.id)
                    if edge.src != node or edge.dest != nbr:
                        errors.append(f"Edge {edge!r} stored as out-edge {node!r} -> {nbr!r}")
                    if edge not in self.node_map[nbr].in_edges.get(node, ()):
                        errors.append(f"Edge {edge!r} missing from in-edges of {nbr!r}")
                    twin = other_direction(edge)
                    if twin is not None and edge.src != edge.dest:
                        twin_info = self.node_map.get(edge.dest)
                        if twin_info is None or twin not in twin_info.out_edges.get(edge.src, ()):
                            errors.append(f"Undirected edge {edge!r} is missing its mirror")

            for nbr, edges in info.in_edges.items():
                if not edges:
                    warnings.append(f"Node {node!r} has an empty in-edge entry for {nbr!r}")
                nbr_info = self.node_map.get(nbr)
                if nbr_info is None:
                    errors.append(f"Node {node!r} has in-edges from non-existent node {nbr!r}")
                    continue
                for edge in edges:
                    if edge.dest != node or edge.src != nbr:
                        errors.append(f"Edge {edge!r} stored as in-edge {nbr!r} -> {node!r}")
                    if edge not in nbr_info.out_edges.get(node, ()):
                        errors.append(f"Edge {edge!r} missing from out-edges of {nbr!r}")

        for key, value in self.attrs.items():
            if isinstance(key, EdgeId):
                if key not in edge_ids:
                    errors.append(f"Attributes stored for non-existent edge {key!r}")
            elif key not in self.node_map:
                errors.append(f"Attributes stored for non-existent node {key!r}")
            if not value:
                warnings.append(f"Empty attribute entry for {key!r}")

        return ValidationResult(valid=not errors, errors=errors, warnings=warnings)

    # ========== Serialization ==========

    def to_dict(self) -> dict[str, Any]:
        """Export to the portable structural form.

        Undirected edges appear once, as their primary (non-mirror) instance.
        """
        return self.to_data().model_dump()

    def to_data(self) -> GraphData:
        directed: list[EdgeRecord] = []
        undirected: list[EdgeRecord] = []
        for edge in self.edges():
            if is_mirror_edge(edge):
                continue
            record = EdgeRecord(src=edge.src, dest=edge.dest, attrs=self.attrs.get(edge.id, {}))
            (directed if is_directed_edge(edge) else undirected).append(record)
        return GraphData(
            allow_parallel=self.allow_parallel,
            undirected=self.undirected,
            nodes=[NodeRecord(id=n, attrs=self.attrs.get(n, {})) for n in self.node_map],
            directed_edges=directed,
            undirected_edges=undirected,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | GraphData) -> Graph:
        """Import from the portable structural form.

        Nodes are replayed first, then directed edges, then undirected edges.
        """
        if not isinstance(data, GraphData):
            data = GraphData.model_validate(data)
        txn = cls(allow_parallel=data.allow_parallel, undirected=data.undirected)._transaction()
        for node in data.nodes:
            txn.add_node(node.id)
            txn.merge_attrs(node.id, node.attrs)
        for record in data.directed_edges:
            txn.add_directed_edge(record.src, record.dest, record.attrs)
        for record in data.undirected_edges:
            txn.add_undirected_edge(record.src, record.dest, record.attrs)
        return txn.commit()


# ========== Structural Comparison ==========


def _logical_edges(graph: Graph) -> list[tuple[Any, ...]]:
    result = []
    for edge in graph.edges():
        if is_mirror_edge(edge):
            continue
        if is_undirected_edge(edge):
            endpoints = tuple(sorted((edge.src, edge.dest), key=endpoint_sort_key))
        else:
            endpoints = (edge.src, edge.dest)
        result.append((edge.kind, endpoints, graph.attrs.get(edge.id, {})))
    return result


def structurally_equal(a: Graph, b: Graph) -> bool:
    """Compare two graphs ignoring synthetic edge ids.

    Equal when flags, nodes, node attributes and the multiset of logical
    edges (kind, endpoints, attributes) all agree.
    """
    if (a.allow_parallel, a.undirected) != (b.allow_parallel, b.undirected):
        return False
    if set(a.node_map) != set(b.node_map):
        return False
    if any(a.attrs.get(n, {}) != b.attrs.get(n, {}) for n in a.node_map):
        return False
    remaining = _logical_edges(b)
    for item in _logical_edges(a):
        try:
            remaining.remove(item)
        except ValueError:
            return False
    return not remaining


__all__ = [
    "Edge",
    "Graph",
    "NodeInfo",
    "UndirectedEdge",
    "parse_edge_description",
    "structurally_equal",
]
