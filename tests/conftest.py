"""Shared fixtures for mixgraph tests."""

import pytest

from mixgraph import Graph, digraph, graph


@pytest.fixture()
def empty():
    """Fresh undirected graph without parallel edges."""
    return Graph()


@pytest.fixture()
def tmp_graph_path(tmp_path):
    """Temporary graph file path with automatic cleanup."""
    return str(tmp_path / "graph.json")


@pytest.fixture()
def road_map():
    """Undirected weighted graph of towns.

    Nodes (5):
        amsterdam, utrecht, rotterdam, den_haag (capital=False)
        groningen (isolated)

    Edges (4):
        amsterdam -- utrecht    weight 45
        amsterdam -- rotterdam  weight 78, toll=True
        utrecht -- rotterdam    weight 57
        rotterdam -- den_haag   weight 27
    """
    return graph(
        ("amsterdam", "utrecht", 45),
        ("amsterdam", "rotterdam", {"weight": 78, "toll": True}),
        ("utrecht", "rotterdam", 57),
        ("rotterdam", "den_haag", 27),
        ("den_haag", {"capital": False}),
        "groningen",
    )


@pytest.fixture()
def pipeline():
    """Directed graph of build steps.

    fetch -> compile -> test -> package, compile -> lint, lint -> package
    """
    return digraph(
        ("fetch", "compile"),
        ("compile", "test", {"stage": "verify"}),
        ("compile", "lint", {"stage": "verify"}),
        ("test", "package"),
        ("lint", "package"),
    )
