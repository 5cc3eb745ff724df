"""``artifactgraph filter <pipeline>`` -- Run a filter pipeline.

Loads a pipeline document (see ``artifactgraph.core.pipeline.config``),
builds the graph of its root artifact, and prints the filtered result.

Exit Codes:
    0 -- Pipeline ran.
    1 -- Graph building or a filter failed.
    2 -- Unusable pipeline or repository description, or bad arguments.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from artifactgraph.cli.common import fail, format_option, open_repository, repository_options
from artifactgraph.core.pipeline import load_pipeline, run_pipeline
from artifactgraph.exceptions import ArtifactGraphError, ConfigurationError


@click.command("filter")
@click.argument("pipeline", type=click.Path(exists=True, dir_okay=False))
@repository_options
@format_option
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also write the resulting graph as JSON to this file.",
)
def filter_command(
    pipeline: str,
    repository: str,
    local_repository: str | None,
    output_format: str,
    output: str | None,
) -> None:
    """Run the filter PIPELINE (YAML) and print the resulting graph.

    Exit code 0 on success, 1 if building or filtering fails, 2 if the
    pipeline or repository cannot be loaded.
    """
    try:
        config = load_pipeline(pipeline)
    except ConfigurationError as exc:
        fail(str(exc), 2, output_format)

    repo = open_repository(repository, local_repository, output_format)
    try:
        result = run_pipeline(config, repo.resolve_metadata, repo.resolve_file)
    except ArtifactGraphError as exc:
        fail(str(exc), 1, output_format)

    from artifactgraph.cli.output import graph_to_json
    data = graph_to_json(result.graph, result.broken)
    if output:
        Path(output).write_text(json.dumps(data, indent=2), encoding="utf-8")

    if output_format == "json":
        click.echo(json.dumps(data, indent=2))
    else:
        from artifactgraph.cli.output import print_broken, print_graph_summaries, print_tree
        print_graph_summaries(result.graphs)
        print_tree(result.graph)
        print_broken(result.broken)
        if output:
            click.echo(f"\nGraph written to: {output}")
    sys.exit(0)
