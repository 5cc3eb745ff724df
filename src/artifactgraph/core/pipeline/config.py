"""Pipeline documents: parsing YAML into filters, and running them.

A pipeline names the root artifact, optionally defines named graphs, and
ends with the filter whose output is the result::

    root: org.example:app:1.0
    tolerate_broken_metadata: false
    graphs:
      runtime:
        scope: [compile, runtime]
      test-only:
        subtract:
          - full
          - ref: runtime
    filter:
      and:
        - packaging: jar
        - group-id: {not: org.example}

Filter specs
------------
A filter definition is either a bare kind (``full``, ``dump``) or a mapping with
exactly one key, the kind. Its value is either a mapping of options, or a
shorthand for the kind's main option (``scope: runtime`` is
``scope: {scopes: [runtime]}``). The ``of`` option holds child filter specs;
for ``subtract``, ``and``, ``or`` and ``not`` the shorthand is ``of`` itself.

Named graphs are evaluated in order, so a graph may ``ref`` any graph
defined before it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from artifactgraph.core.graph.artifact import (
    ArtifactDescriptor,
    FileResolver,
    MetadataResolver,
)
from artifactgraph.core.graph.builder import BrokenDependency, GraphBuilder
from artifactgraph.core.graph.exclusion import apply_exclusions
from artifactgraph.core.graph.model import DependencyGraph
from artifactgraph.core.pipeline.context import FilterContext
from artifactgraph.core.pipeline.filters import (
    And,
    Artifacts,
    Dump,
    Exclude,
    FullGraph,
    GraphFilter,
    GraphRef,
    GroupId,
    ManifestEntry,
    Not,
    Or,
    Packaging,
    RemoveSpecific,
    RetentionSet,
    Scope,
    SubGraph,
    Subtract,
    Visualize,
)
from artifactgraph.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


@dataclass(frozen=True)
class _Kind:
    """How to build one filter kind from its options."""

    shorthand: str | None
    options: frozenset[str]
    build: Callable[[dict[str, Any], list[GraphFilter]], GraphFilter]
    required: frozenset[str] = frozenset()


def _visualize(opts: dict[str, Any], children: list[GraphFilter]) -> GraphFilter:
    subgraphs = []
    for entry in _as_list(opts.get("subgraphs")):
        if not isinstance(entry, dict) or "color" not in entry:
            raise ConfigurationError(f"visualize subgraph needs a color: {entry!r}")
        unknown = set(entry) - {"color", "of"}
        if unknown:
            raise ConfigurationError(f"Unknown subgraph option(s): {sorted(unknown)}")
        specs = _as_list(entry.get("of"))
        if len(specs) > 1:
            raise ConfigurationError("A visualize subgraph takes one filter")
        sub = parse_filter(specs[0]) if specs else FullGraph()
        subgraphs.append((str(entry["color"]), sub))
    return Visualize(opts["file"], subgraphs, children)


_KINDS: dict[str, _Kind] = {
    "full": _Kind(None, frozenset(), lambda o, c: FullGraph()),
    "ref": _Kind(
        "name", frozenset({"name"}), lambda o, c: GraphRef(str(o["name"])), frozenset({"name"})
    ),
    "scope": _Kind(
        "scopes",
        frozenset({"scopes"}),
        lambda o, c: Scope(_as_list(o["scopes"]), c),
        frozenset({"scopes"}),
    ),
    "packaging": _Kind(
        "packagings",
        frozenset({"packagings"}),
        lambda o, c: Packaging(_as_list(o["packagings"]), c),
        frozenset({"packagings"}),
    ),
    "group-id": _Kind(
        "value",
        frozenset({"value", "not"}),
        lambda o, c: GroupId(o.get("value"), o.get("not"), c),
    ),
    "artifacts": _Kind(
        "artifacts",
        frozenset({"artifacts"}),
        lambda o, c: Artifacts(_as_list(o["artifacts"]), c),
        frozenset({"artifacts"}),
    ),
    "manifest-entry": _Kind(
        "has", frozenset({"has"}), lambda o, c: ManifestEntry(str(o["has"]), c), frozenset({"has"})
    ),
    "exclude": _Kind(
        "artifacts",
        frozenset({"artifacts"}),
        lambda o, c: Exclude(_as_list(o["artifacts"]), c),
        frozenset({"artifacts"}),
    ),
    "remove-specific": _Kind(
        "artifacts",
        frozenset({"artifacts"}),
        lambda o, c: RemoveSpecific(_as_list(o["artifacts"]), c),
        frozenset({"artifacts"}),
    ),
    "retention-set": _Kind(
        "artifact",
        frozenset({"artifact"}),
        lambda o, c: RetentionSet(o["artifact"], c),
        frozenset({"artifact"}),
    ),
    "subgraph": _Kind(
        "artifact",
        frozenset({"artifact"}),
        lambda o, c: SubGraph(o["artifact"], c),
        frozenset({"artifact"}),
    ),
    "subtract": _Kind("of", frozenset(), lambda o, c: Subtract(c)),
    "and": _Kind("of", frozenset(), lambda o, c: And(c)),
    "or": _Kind("of", frozenset(), lambda o, c: Or(c)),
    "not": _Kind("of", frozenset(), lambda o, c: Not(c)),
    "dump": _Kind("of", frozenset(), lambda o, c: Dump(c)),
    "visualize": _Kind("file", frozenset({"file", "subgraphs"}), _visualize, frozenset({"file"})),
}

#: Filter kinds accepted in pipeline documents.
FILTER_KINDS = tuple(_KINDS)


def parse_filter(definition: Any) -> GraphFilter:
    """Build a filter tree from a filter definition.

    Raises:
        ConfigurationError: If the definition is malformed, names an unknown kind,
            misses a required option, or has an unknown option.
    """
    if isinstance(definition, str):
        kind_name, value = definition, None
    elif isinstance(definition, dict) and len(definition) == 1:
        ((kind_name, value),) = definition.items()
    else:
        raise ConfigurationError(
            f"A filter must be a kind or a mapping with one kind, got {definition!r}"
        )

    kind = _KINDS.get(kind_name)
    if kind is None:
        raise ConfigurationError(
            f"Unknown filter {kind_name!r}; expected one of {', '.join(FILTER_KINDS)}"
        )

    if isinstance(value, dict):
        options = dict(value)
    elif value is None:
        options = {}
    elif kind.shorthand is None:
        raise ConfigurationError(f"{kind_name} takes no options, got {value!r}")
    else:
        options = {kind.shorthand: value}

    children = [parse_filter(child) for child in _as_list(options.pop("of", None))]
    unknown = set(options) - kind.options
    if unknown:
        raise ConfigurationError(f"Unknown option(s) for {kind_name}: {sorted(unknown)}")
    missing = kind.required - set(options)
    if missing:
        raise ConfigurationError(f"{kind_name} requires option(s): {sorted(missing)}")
    try:
        return kind.build(options, children)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid {kind_name} filter: {exc}") from exc


def _parse_root(value: Any) -> ArtifactDescriptor:
    if isinstance(value, str):
        return ArtifactDescriptor.parse(value)
    if isinstance(value, dict):
        try:
            return ArtifactDescriptor(
                group=value["group"],
                name=value["name"],
                version=str(value["version"]),
                type=value.get("type", "jar"),
                classifier=value.get("classifier"),
            )
        except KeyError as exc:
            raise ConfigurationError(f"root is missing {exc}") from exc
    raise ConfigurationError(f"Invalid root artifact: {value!r}")


@dataclass
class PipelineConfig:
    """A parsed pipeline document.

    Attributes:
        root: Artifact whose dependency graph is filtered.
        tolerate_broken_metadata: Leave out dependencies whose metadata
            cannot be loaded instead of failing.
        graphs: Named graph definitions, in evaluation order.
        filter: The final filter. Defaults to the full graph.
    """

    root: ArtifactDescriptor
    tolerate_broken_metadata: bool = False
    graphs: dict[str, GraphFilter] = field(default_factory=dict)
    filter: GraphFilter = field(default_factory=FullGraph)


@dataclass
class PipelineResult:
    """Everything a pipeline run produced.

    Attributes:
        source: The full graph after dependency exclusions.
        graphs: Named graphs, in definition order.
        graph: Output of the final filter.
        broken: Dependencies left out because of broken metadata.
    """

    source: DependencyGraph
    graphs: dict[str, DependencyGraph]
    graph: DependencyGraph
    broken: list[BrokenDependency] = field(default_factory=list)


def parse_pipeline(document: Mapping[str, Any]) -> PipelineConfig:
    """Build a ``PipelineConfig`` from a parsed pipeline document.

    Raises:
        ConfigurationError: If the document is malformed.
    """
    if not isinstance(document, Mapping):
        raise ConfigurationError("A pipeline must be a mapping")
    unknown = set(document) - {"root", "tolerate_broken_metadata", "graphs", "filter"}
    if unknown:
        raise ConfigurationError(f"Unknown pipeline key(s): {sorted(unknown)}")
    if "root" not in document:
        raise ConfigurationError("A pipeline needs a root artifact")
    try:
        root = _parse_root(document["root"])
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc

    graphs_doc = document.get("graphs") or {}
    if not isinstance(graphs_doc, Mapping):
        raise ConfigurationError("graphs must map names to filters")
    graphs = {str(name): parse_filter(definition) for name, definition in graphs_doc.items()}

    final = document.get("filter")
    return PipelineConfig(
        root=root,
        tolerate_broken_metadata=bool(document.get("tolerate_broken_metadata", False)),
        graphs=graphs,
        filter=parse_filter(final) if final is not None else FullGraph(),
    )


def load_pipeline(path: Path | str) -> PipelineConfig:
    """Read and parse a pipeline YAML file.

    Raises:
        ConfigurationError: If the file cannot be read or parsed.
    """
    path = Path(path)
    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot read pipeline {path}: {exc}") from exc
    return parse_pipeline(document)


def run_pipeline(
    config: PipelineConfig,
    resolve_metadata: MetadataResolver,
    resolve_file: FileResolver | None = None,
) -> PipelineResult:
    """Build the root's graph, apply exclusions, and evaluate the filters.

    Raises:
        MetadataResolutionError: If graph building fails.
        ConfigurationError: If a filter is misconfigured.
        FilterError: If a filter fails on some node or edge.
        ArtifactNotInGraphError: If a filter names an artifact that is not
            in its input graph.
    """
    builder = GraphBuilder(
        resolve_metadata,
        resolve_file,
        tolerate_broken_metadata=config.tolerate_broken_metadata,
    )
    source = apply_exclusions(builder.build(config.root))
    logger.info("Dependency graph of %s: %s", config.root, source.summary())

    ctx = FilterContext(source)
    for name, graph_filter in config.graphs.items():
        graph = graph_filter.process(ctx)
        logger.debug("graph %s -> %s", name, graph.summary())
        ctx = ctx.with_graph(name, graph)

    result = config.filter.process(ctx)
    logger.info("Filtered graph: %s", result.summary())
    return PipelineResult(
        source=source,
        graphs=dict(ctx.graphs),
        graph=result,
        broken=list(builder.broken),
    )
