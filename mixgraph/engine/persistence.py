"""Persistence utilities for graph save/load.

Graphs are written as the portable structural form (``GraphData``) in JSON.
Edge ids are not stored; loading replays nodes, directed edges and
undirected edges, so a loaded graph is structurally equal to the saved one.

JSON has no tuples, so tuple node ids come back from JSON arrays as tuples.
Node ids and attribute keys otherwise need to be JSON-compatible.

Security:
    Path validation is performed to prevent path traversal attacks.
    All paths are resolved to absolute paths and validated.
"""

from __future__ import annotations

import logging
from pathlib import Path

from mixgraph.models import GraphData

from .core import Graph

logger = logging.getLogger(__name__)


def _validate_path(path: str | Path, base_dir: Path | None = None) -> Path:
    """Validate and resolve a file path.

    Args:
        path: The path to validate
        base_dir: Optional base directory that the path must be within

    Returns:
        Resolved absolute Path

    Raises:
        ValueError: If path is invalid or attempts path traversal
    """
    # Check for null bytes before any path operations (common attack vector)
    if "\x00" in str(path):
        raise ValueError(f"Invalid path (contains null bytes): {str(path)!r}")

    resolved = Path(path).resolve()

    if base_dir is not None:
        base_resolved = base_dir.resolve()
        try:
            resolved.relative_to(base_resolved)
        except ValueError:
            raise ValueError(
                f"Path traversal detected: {path} is outside base directory {base_dir}"
            )

    return resolved


def save_graph(graph: Graph, path: str | Path, base_dir: Path | None = None) -> Path:
    """Save a graph to a JSON file.

    Args:
        graph: The graph to save
        path: Output file path
        base_dir: Optional directory the path must stay within

    Returns:
        The resolved path written to

    Raises:
        ValueError: If path is invalid
    """
    validated_path = _validate_path(path, base_dir)

    # Ensure parent directory exists
    validated_path.parent.mkdir(parents=True, exist_ok=True)

    data = graph.to_data()
    validated_path.write_text(data.model_dump_json(indent=2), encoding="utf-8")
    logger.info(
        "Saved graph with %d nodes and %d edges to %s",
        len(data.nodes),
        len(data.directed_edges) + len(data.undirected_edges),
        validated_path,
    )
    return validated_path


def load_graph(path: str | Path, base_dir: Path | None = None) -> Graph:
    """Load a graph from a JSON file written by ``save_graph``.

    Args:
        path: Input file path
        base_dir: Optional directory the path must stay within

    Returns:
        Loaded Graph

    Raises:
        ValueError: If path is invalid
        FileNotFoundError: If file does not exist
        pydantic.ValidationError: If the file content is not a valid graph
    """
    validated_path = _validate_path(path, base_dir)
    data = GraphData.model_validate_json(validated_path.read_text(encoding="utf-8"))
    graph = Graph.from_dict(data)
    logger.info("Loaded graph with %d nodes from %s", graph.count_nodes(), validated_path)
    return graph
