"""Options and helpers shared by the artifactgraph subcommands."""

from __future__ import annotations

import json
import sys
from collections.abc import Callable, Iterable
from typing import Any, NoReturn

import click

from artifactgraph.core.filters.algebra import filter_nodes
from artifactgraph.core.filters.predicates import ScopeVisitor
from artifactgraph.core.graph.artifact import ArtifactDescriptor
from artifactgraph.core.graph.builder import BrokenDependency, GraphBuilder
from artifactgraph.core.graph.exclusion import apply_exclusions
from artifactgraph.core.graph.model import DependencyGraph
from artifactgraph.exceptions import RepositoryError
from artifactgraph.repository import LocalRepository, StaticRepository

REPOSITORY_ENVVAR = "ARTIFACTGRAPH_REPOSITORY"


def repository_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add ``--repository`` and ``--local-repository`` to a command."""
    func = click.option(
        "--local-repository",
        type=click.Path(exists=True, file_okay=False),
        default=None,
        help="Maven 2 directory searched for files the description does not declare.",
    )(func)
    func = click.option(
        "--repository", "-r",
        type=click.Path(exists=True, dir_okay=False),
        envvar=REPOSITORY_ENVVAR,
        required=True,
        help=f"Repository description (YAML). Defaults to ${REPOSITORY_ENVVAR}.",
    )(func)
    return func


def format_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option(
        "--format", "output_format",
        type=click.Choice(["text", "json"]),
        default="text",
        help="Output format (default: text).",
    )(func)


def parse_coordinate(
    ctx: click.Context, param: click.Parameter, value: str
) -> ArtifactDescriptor:
    """Click callback turning ``group:name:version[:type[:classifier]]`` into a descriptor."""
    try:
        return ArtifactDescriptor.parse(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


def fail(message: str, code: int = 1, output_format: str = "text") -> NoReturn:
    """Report an error and exit with ``code``."""
    if output_format == "json":
        click.echo(json.dumps({"error": message}))
    else:
        click.echo(f"Error: {message}")
    sys.exit(code)


def open_repository(
    repository: str, local_repository: str | None, output_format: str = "text"
) -> StaticRepository:
    """Load the repository description, exiting with code 2 if it is unusable."""
    fallback = LocalRepository(local_repository) if local_repository else None
    try:
        return StaticRepository.from_file(repository, fallback)
    except RepositoryError as exc:
        fail(str(exc), 2, output_format)


def build_effective_graph(
    repository: StaticRepository,
    root: ArtifactDescriptor,
    tolerate_broken: bool = False,
    scopes: Iterable[str] = (),
) -> tuple[DependencyGraph, list[BrokenDependency]]:
    """Build the graph of ``root`` with exclusions applied and scopes narrowed.

    Raises:
        MetadataResolutionError: If graph building fails.
    """
    builder = GraphBuilder(
        repository.resolve_metadata,
        repository.resolve_file,
        tolerate_broken_metadata=tolerate_broken,
    )
    graph = apply_exclusions(builder.build(root))
    scopes = tuple(scopes)
    if scopes:
        graph = filter_nodes(graph, ScopeVisitor(scopes))
    return graph, builder.broken
