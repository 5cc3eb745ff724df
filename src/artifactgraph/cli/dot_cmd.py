"""``artifactgraph dot <root>`` -- Draw the dependency graph with GraphViz.

Writes DOT source to stdout or ``--output``; ``--png`` additionally runs
``dot -Tpng`` to render an image.

Exit Codes:
    0 -- Diagram written.
    1 -- Graph could not be built, or GraphViz failed.
    2 -- Unusable repository description or bad arguments.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from artifactgraph.cli.common import (
    build_effective_graph,
    fail,
    open_repository,
    parse_coordinate,
    repository_options,
)
from artifactgraph.core.graph.artifact import ArtifactDescriptor
from artifactgraph.exceptions import MetadataResolutionError, VisualizationError
from artifactgraph.visualize.graphviz import render_png, to_dot


@click.command("dot")
@click.argument("root", callback=parse_coordinate)
@repository_options
@click.option(
    "--scope", "scopes",
    multiple=True,
    help="Only follow dependencies of this scope (repeatable).",
)
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write DOT source to this file instead of stdout.",
)
@click.option(
    "--png",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also render the graph to this PNG file (requires GraphViz).",
)
def dot_command(
    root: ArtifactDescriptor,
    repository: str,
    local_repository: str | None,
    scopes: tuple[str, ...],
    output: str | None,
    png: str | None,
) -> None:
    """Write the dependency graph of ROOT in GraphViz DOT format."""
    repo = open_repository(repository, local_repository)
    try:
        graph, _ = build_effective_graph(repo, root, scopes=scopes)
    except MetadataResolutionError as exc:
        fail(str(exc))

    source = to_dot(graph)
    if output:
        Path(output).write_text(source, encoding="utf-8")
        click.echo(f"DOT written to: {output}")
    elif not png:
        click.echo(source, nl=False)

    if png:
        try:
            render_png(source, Path(png))
        except VisualizationError as exc:
            fail(str(exc))
        click.echo(f"PNG written to: {png}")
    sys.exit(0)
