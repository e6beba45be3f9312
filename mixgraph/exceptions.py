"""Custom exceptions for mixgraph."""


class GraphError(Exception):
    """Base exception for graph operations."""


class InvalidEdgeDescriptor(GraphError, ValueError):
    """Raised when an edge description is not (src, dest) or (src, dest, weight-or-attrs)."""


class InvalidEntityDescriptor(GraphError, KeyError):
    """Raised when an attribute target is neither a node, an edge, nor a known edge description."""

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0]) if self.args else ""
