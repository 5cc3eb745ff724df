"""``artifactgraph files <pipeline>`` -- Deliver the artifact files of a pipeline result.

Runs a pipeline like ``artifactgraph filter`` and resolves the backing file
of every artifact left in the resulting graph. The files can be listed,
printed as a class path, or copied into a directory.

Exit Codes:
    0 -- Files delivered.
    1 -- Graph building, a filter, or file resolution failed.
    2 -- Unusable pipeline or repository description, or bad arguments.
"""

from __future__ import annotations

import json
import sys

import click

from artifactgraph.cli.common import fail, format_option, open_repository, repository_options
from artifactgraph.core.pipeline import load_pipeline, run_pipeline
from artifactgraph.delivery import class_path, collect_files, copy_files
from artifactgraph.exceptions import ArtifactGraphError, ConfigurationError


@click.command("files")
@click.argument("pipeline", type=click.Path(exists=True, dir_okay=False))
@repository_options
@format_option
@click.option(
    "--classifier",
    default=None,
    help="Resolve this classifier of every artifact instead (e.g. sources).",
)
@click.option(
    "--copy-to", "todir",
    type=click.Path(file_okay=False),
    default=None,
    help="Copy the files into this directory.",
)
@click.option(
    "--strip-version",
    is_flag=True,
    help="Drop the version from copied file names.",
)
@click.option(
    "--class-path", "print_class_path",
    is_flag=True,
    help="Print the files as a single class path string.",
)
def files_command(
    pipeline: str,
    repository: str,
    local_repository: str | None,
    output_format: str,
    classifier: str | None,
    todir: str | None,
    strip_version: bool,
    print_class_path: bool,
) -> None:
    """Resolve the files of the artifacts selected by PIPELINE (YAML).

    Exit code 0 on success, 1 if building, filtering, or file resolution
    fails, 2 if the pipeline or repository cannot be loaded.
    """
    if strip_version and not todir:
        fail("--strip-version requires --copy-to", 2, output_format)
    try:
        config = load_pipeline(pipeline)
    except ConfigurationError as exc:
        fail(str(exc), 2, output_format)

    repo = open_repository(repository, local_repository, output_format)
    try:
        result = run_pipeline(config, repo.resolve_metadata, repo.resolve_file)
        files = collect_files(result.graph, repo.resolve_file, classifier)
        copied = copy_files(files, todir, strip_version) if todir else []
    except ArtifactGraphError as exc:
        fail(str(exc), 1, output_format)

    if output_format == "json":
        from artifactgraph.cli.output import files_to_json
        click.echo(json.dumps(files_to_json(files, copied), indent=2))
    elif print_class_path:
        click.echo(class_path(files))
    else:
        from artifactgraph.cli.output import print_files
        print_files(files)
        if todir:
            click.echo(f"\n{len(copied)} file(s) copied to: {todir}")
    sys.exit(0)
