"""mixgraph CLI: command-line interface for graphs stored as JSON files."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import click

from mixgraph.engine import Graph, is_directed_edge, load_graph, save_graph

DEFAULT_FILE = "graph.json"

logger = logging.getLogger("mixgraph.cli")


def _load(ctx: click.Context) -> Graph:
    path = ctx.obj["file"]
    if not Path(path).exists():
        raise click.ClickException(f"No graph at {path}. Run 'mixgraph init' first.")
    logger.debug("Loading graph from %s", path)
    return load_graph(path)


def _parse_props(props: str | None) -> dict[str, Any]:
    if not props:
        return {}
    try:
        parsed = json.loads(props)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"Invalid JSON: {exc}", param_hint="--props")
    if not isinstance(parsed, dict):
        raise click.BadParameter("Properties must be a JSON object", param_hint="--props")
    return parsed


def _parse_where(clauses: tuple[str, ...]) -> dict[str, Any]:
    query: dict[str, Any] = {}
    for clause in clauses:
        key, sep, raw = clause.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected KEY=VALUE, got {clause!r}", param_hint="--where")
        try:
            query[key] = json.loads(raw)
        except json.JSONDecodeError:
            query[key] = raw
    return query


def _format_edge(graph: Graph, edge: Any) -> str:
    arrow = "->" if is_directed_edge(edge) else "--"
    attrs = graph.attrs_of(edge)
    suffix = f"  {json.dumps(attrs, default=str)}" if attrs else ""
    return f"  {edge.src} {arrow} {edge.dest}{suffix}"


@click.group()
@click.option(
    "--file",
    "-f",
    "file",
    default=DEFAULT_FILE,
    envvar="MIXGRAPH_FILE",
    show_default=True,
    help="Path to the graph JSON file (env: MIXGRAPH_FILE).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, file: str, verbose: bool) -> None:
    """mixgraph CLI: manage graphs from the command line."""
    # Logging goes to stderr, stdout carries command output
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["file"] = file


@cli.command()
@click.option("--multi", is_flag=True, help="Allow parallel edges.")
@click.option("--directed", is_flag=True, help="Default to directed edges.")
@click.option("--force", is_flag=True, help="Overwrite an existing file.")
@click.pass_context
def init(ctx: click.Context, multi: bool, directed: bool, force: bool) -> None:
    """Create a new, empty graph file."""
    path = ctx.obj["file"]
    if Path(path).exists() and not force:
        click.echo(f"Graph already exists at {path}")
        return
    save_graph(Graph(allow_parallel=multi, undirected=not directed), path)
    kind = ("multi" if multi else "") + ("digraph" if directed else "graph")
    click.echo(f"Initialized empty {kind} at {path}")


@cli.command("add-node")
@click.argument("id")
@click.option("--props", default=None, help="JSON attributes.")
@click.pass_context
def add_node(ctx: click.Context, id: str, props: str | None) -> None:
    """Create a node, merging attributes into an existing one."""
    graph = _load(ctx)
    graph = graph.add_nodes_with_attrs((id, _parse_props(props)))
    save_graph(graph, ctx.obj["file"])
    click.echo(f"Node: {id}")


@cli.command("add-edge")
@click.argument("src")
@click.argument("dest")
@click.option("--weight", default=None, type=float, help="Edge weight.")
@click.option("--props", default=None, help="JSON attributes.")
@click.option(
    "--directed/--undirected",
    "directed",
    default=None,
    help="Force the edge kind (default: the graph's orientation).",
)
@click.pass_context
def add_edge(
    ctx: click.Context,
    src: str,
    dest: str,
    weight: float | None,
    props: str | None,
    directed: bool | None,
) -> None:
    """Add an edge between two nodes, creating them if needed."""
    graph = _load(ctx)
    attrs = _parse_props(props)
    if weight is not None:
        attrs["weight"] = weight
    description = (src, dest, attrs)
    if directed is None:
        graph = graph.add_edges(description)
    elif directed:
        graph = graph.add_directed_edges(description)
    else:
        graph = graph.add_undirected_edges(description)
    save_graph(graph, ctx.obj["file"])
    if directed is None:
        directed = not graph.undirected
    click.echo(f"Edge: {src} {'->' if directed else '--'} {dest}")


@cli.command("remove-node")
@click.argument("id")
@click.pass_context
def remove_node(ctx: click.Context, id: str) -> None:
    """Remove a node and every edge touching it."""
    graph = _load(ctx)
    if not graph.has_node(id):
        click.echo(f"No node {id}")
        return
    save_graph(graph.remove_nodes(id), ctx.obj["file"])
    click.echo(f"Removed node {id}")


@cli.command("remove-edge")
@click.argument("src")
@click.argument("dest")
@click.pass_context
def remove_edge(ctx: click.Context, src: str, dest: str) -> None:
    """Remove one edge from SRC to DEST."""
    graph = _load(ctx)
    if not graph.has_edge(src, dest):
        click.echo(f"No edge {src} -> {dest}")
        return
    save_graph(graph.remove_edges((src, dest)), ctx.obj["file"])
    click.echo(f"Removed edge {src} -> {dest}")


@cli.command()
@click.option("--src", default=None, help="Source node.")
@click.option("--dest", default=None, help="Destination node.")
@click.option("--where", multiple=True, help="Attribute filter KEY=VALUE (VALUE as JSON).")
@click.option("--all", "show_all", is_flag=True, help="List both instances of undirected edges.")
@click.pass_context
def edges(
    ctx: click.Context,
    src: str | None,
    dest: str | None,
    where: tuple[str, ...],
    show_all: bool,
) -> None:
    """Query edges by endpoints and attributes."""
    graph = _load(ctx)
    query = _parse_where(where)
    if src is not None:
        query["src"] = src
    if dest is not None:
        query["dest"] = dest
    results = []
    seen: set[Any] = set()
    for edge in graph.find_edges(query):
        # One line per logical edge unless mirrors were asked for
        if not show_all and edge.id in seen:
            continue
        seen.add(edge.id)
        results.append(edge)
    if not results:
        click.echo("No edges found.")
        return
    for edge in results:
        click.echo(_format_edge(graph, edge))


@cli.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Show graph statistics."""
    s = _load(ctx).stats()
    click.echo(f"Nodes: {s.node_count}  Edges: {s.edge_count}")
    click.echo(f"  directed: {s.directed_edge_count}")
    click.echo(f"  undirected: {s.undirected_edge_count}")
    click.echo(f"  self-loops: {s.self_loop_count}")
    click.echo(f"Parallel edges allowed: {s.allow_parallel}  Default undirected: {s.undirected}")


@cli.command()
@click.pass_context
def validate(ctx: click.Context) -> None:
    """Validate internal consistency of the graph."""
    result = _load(ctx).validate()
    if result.valid:
        click.echo("Graph is valid.")
    else:
        click.echo("Validation errors:")
        for err in result.errors:
            click.echo(f"  ERROR: {err}")
    for warn in result.warnings:
        click.echo(f"  WARNING: {warn}")
    if not result.valid:
        ctx.exit(1)


@cli.command()
@click.argument("output", type=click.Path())
@click.pass_context
def transpose(ctx: click.Context, output: str) -> None:
    """Write the graph with every directed edge reversed to OUTPUT."""
    save_graph(_load(ctx).transpose(), output)
    click.echo(f"Transposed graph written to {output}")


if __name__ == "__main__":
    cli()
