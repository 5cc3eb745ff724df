"""artifactgraph CLI -- Inspect and filter artifact dependency graphs.

Entry point for the ``artifactgraph`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    tree   -- Print the dependency tree of an artifact.
    filter -- Run a YAML filter pipeline over an artifact's graph.
    why    -- Show the dependency trail leading to an artifact.
    dot    -- Draw the graph in GraphViz DOT (and optionally PNG).
    files  -- Resolve, list, or copy the artifact files of a pipeline result.

Usage::

    artifactgraph tree org.example:app:1.0 -r repo.yaml
    artifactgraph tree org.example:app:1.0 -r repo.yaml --scope compile --format json
    artifactgraph filter pipeline.yaml -r repo.yaml
    artifactgraph why org.example:app:1.0 commons-logging:commons-logging -r repo.yaml
    artifactgraph -v dot org.example:app:1.0 -r repo.yaml --png graph.png
    artifactgraph files pipeline.yaml -r repo.yaml --copy-to lib --strip-version
"""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from artifactgraph import __version__
from artifactgraph.cli.dot_cmd import dot_command
from artifactgraph.cli.files_cmd import files_command
from artifactgraph.cli.filter_cmd import filter_command
from artifactgraph.cli.tree_cmd import tree_command
from artifactgraph.cli.why_cmd import why_command


def _configure_logging(verbose: int) -> None:
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--verbose", "-v",
    count=True,
    help="Log progress (-v) or debugging details (-vv) to stderr.",
)
def cli(verbose: int) -> None:
    """artifactgraph: Dependency graphs of Maven-style artifacts.

    Build the transitive dependency graph of an artifact with
    nearest-wins conflict resolution and path-scoped exclusions, then
    slice it with scope, packaging, and set-algebra filters.
    """
    _configure_logging(verbose)


# Register all subcommands
cli.add_command(tree_command)
cli.add_command(filter_command)
cli.add_command(why_command)
cli.add_command(dot_command)
cli.add_command(files_command)
