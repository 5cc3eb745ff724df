"""``artifactgraph why <root> <artifact>`` -- Explain how an artifact got in.

Prints the dependency trail from ROOT to ARTIFACT: the chain of
declarations through which the artifact was first reached.
"""

from __future__ import annotations

import sys

import click

from artifactgraph.cli.common import (
    build_effective_graph,
    fail,
    open_repository,
    parse_coordinate,
    repository_options,
)
from artifactgraph.core.graph.artifact import ArtifactDescriptor, parse_identity
from artifactgraph.core.graph.model import format_trail
from artifactgraph.exceptions import MetadataResolutionError


@click.command("why")
@click.argument("root", callback=parse_coordinate)
@click.argument("artifact")
@repository_options
@click.option(
    "--tolerate-broken",
    is_flag=True,
    default=False,
    help="Leave out dependencies whose metadata cannot be loaded.",
)
def why_command(
    root: ArtifactDescriptor,
    artifact: str,
    repository: str,
    local_repository: str | None,
    tolerate_broken: bool,
) -> None:
    """Show why ARTIFACT (group:name[:classifier]) is a dependency of ROOT.

    Exit code 0 if the artifact is in the graph, 1 if it is not or the
    graph cannot be built, 2 on bad input.
    """
    try:
        identity = parse_identity(artifact)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="ARTIFACT") from exc

    repo = open_repository(repository, local_repository)
    try:
        graph, _ = build_effective_graph(repo, root, tolerate_broken)
    except MetadataResolutionError as exc:
        fail(str(exc))

    node = graph.find(identity)
    if node is None:
        fail(f"{artifact} is not a dependency of {root}")

    from artifactgraph.cli.output import print_trail
    edges = graph.trail(node)
    print_trail(format_trail(graph.root, edges), edges)
    sys.exit(0)
