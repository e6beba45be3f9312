"""Pydantic models for mixgraph's portable and reporting types.

``GraphData`` is the portable structural form of a graph: flags, nodes with
attributes, directed edges and one entry per logical undirected edge. It is
what ``Graph.to_dict()`` produces and ``Graph.from_dict()`` consumes, and what
the JSON persistence layer writes to disk.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


def _hashable(value: Any) -> Any:
    """Turn JSON arrays back into tuples so they can serve as node ids."""
    if isinstance(value, list):
        return tuple(_hashable(v) for v in value)
    return value


def _require_hashable(value: Any) -> Any:
    value = _hashable(value)
    try:
        hash(value)
    except TypeError:
        raise ValueError(f"Node ids must be hashable, got: {type(value).__name__}") from None
    return value


def _is_record_sequence(data: Any) -> bool:
    return isinstance(data, Sequence) and not isinstance(data, (str, bytes))


class NodeRecord(BaseModel):
    """A node and its attributes.

    Accepts either ``{"id": ..., "attrs": {...}}`` or an ``[id, attrs]`` pair.
    """

    id: Any
    attrs: dict[Any, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, data: Any) -> Any:
        if _is_record_sequence(data):
            if len(data) == 1:
                return {"id": data[0]}
            if len(data) == 2:
                return {"id": data[0], "attrs": data[1] if data[1] is not None else {}}
            raise ValueError(f"Node record must be [id] or [id, attrs], got {len(data)} items")
        return data

    @field_validator("id")
    @classmethod
    def _check_id(cls, value: Any) -> Any:
        return _require_hashable(value)


class EdgeRecord(BaseModel):
    """An edge between two nodes and its attributes.

    Accepts either ``{"src": ..., "dest": ..., "attrs": {...}}`` or a
    ``[src, dest]`` / ``[src, dest, attrs]`` sequence.
    """

    src: Any
    dest: Any
    attrs: dict[Any, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _from_sequence(cls, data: Any) -> Any:
        if _is_record_sequence(data):
            if len(data) == 2:
                return {"src": data[0], "dest": data[1]}
            if len(data) == 3:
                return {"src": data[0], "dest": data[1], "attrs": data[2] or {}}
            raise ValueError(
                f"Edge record must be [src, dest] or [src, dest, attrs], got {len(data)} items"
            )
        return data

    @field_validator("src", "dest")
    @classmethod
    def _check_endpoint(cls, value: Any) -> Any:
        return _require_hashable(value)


class GraphData(BaseModel):
    """Portable structural form of a graph."""

    allow_parallel: bool = False
    undirected: bool = True
    nodes: list[NodeRecord] = Field(default_factory=list)
    directed_edges: list[EdgeRecord] = Field(default_factory=list)
    undirected_edges: list[EdgeRecord] = Field(default_factory=list)

    def __repr__(self) -> str:
        return (
            f"GraphData(nodes={len(self.nodes)}, directed_edges={len(self.directed_edges)}, "
            f"undirected_edges={len(self.undirected_edges)})"
        )


class ValidationResult(BaseModel):
    """Result of a graph consistency check.

    Contains a pass/fail flag, a list of errors, and a list of warnings
    found during validation.
    """

    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class GraphStats(BaseModel):
    """Summary counts for a graph.

    Edge counts are logical: an undirected edge counts once even though it
    is stored as two mirrored instances.
    """

    node_count: int
    edge_count: int
    directed_edge_count: int
    undirected_edge_count: int
    self_loop_count: int
    allow_parallel: bool
    undirected: bool
