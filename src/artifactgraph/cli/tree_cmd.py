"""``artifactgraph tree <root>`` -- Print the dependency tree of an artifact.

Builds the full graph of ROOT from the repository description, applies the
dependency exclusions, and optionally narrows it to some scopes.

Exit Codes:
    0 -- Graph printed.
    1 -- Metadata of some artifact could not be loaded.
    2 -- Unusable repository description or bad arguments.
"""

from __future__ import annotations

import json
import sys

import click

from artifactgraph.cli.common import (
    build_effective_graph,
    fail,
    format_option,
    open_repository,
    parse_coordinate,
    repository_options,
)
from artifactgraph.core.graph.artifact import ArtifactDescriptor
from artifactgraph.exceptions import MetadataResolutionError


@click.command("tree")
@click.argument("root", callback=parse_coordinate)
@repository_options
@click.option(
    "--scope", "scopes",
    multiple=True,
    help="Only follow dependencies of this scope (repeatable).",
)
@click.option(
    "--tolerate-broken",
    is_flag=True,
    default=False,
    help="Leave out dependencies whose metadata cannot be loaded.",
)
@format_option
def tree_command(
    root: ArtifactDescriptor,
    repository: str,
    local_repository: str | None,
    scopes: tuple[str, ...],
    tolerate_broken: bool,
    output_format: str,
) -> None:
    """Print the dependency tree of ROOT (group:name:version[:type[:classifier]]).

    Exit code 0 on success, 1 if metadata cannot be loaded, 2 on bad input.
    """
    repo = open_repository(repository, local_repository, output_format)
    try:
        graph, broken = build_effective_graph(repo, root, tolerate_broken, scopes)
    except MetadataResolutionError as exc:
        fail(str(exc), 1, output_format)

    if output_format == "json":
        from artifactgraph.cli.output import graph_to_json
        click.echo(json.dumps(graph_to_json(graph, broken), indent=2))
    else:
        from artifactgraph.cli.output import print_broken, print_tree
        print_tree(graph)
        print_broken(broken)
    sys.exit(0)
