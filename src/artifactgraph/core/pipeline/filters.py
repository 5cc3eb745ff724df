"""Composable graph filters, the building blocks of a filter pipeline.

Each ``GraphFilter`` turns zero or more child filters into one output
graph. A filter that expects an input but has no child operates on the
context's input graph, so the full graph is the implicit default::

    Subtract([FullGraph(), Scope(["test"])]).process(FilterContext(graph))

Filters never modify the graphs they receive; every result is a new graph.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import ClassVar

from artifactgraph.core.filters.algebra import (
    filter_nodes,
    remove_specific,
    retention_set,
    rooted_at,
    subtract,
)
from artifactgraph.core.filters.predicates import (
    ArtifactSetVisitor,
    GroupIdVisitor,
    ManifestEntryVisitor,
    PackagingVisitor,
    ScopeVisitor,
)
from artifactgraph.core.filters.visitors import GraphVisitor, and_, node_filter, or_
from artifactgraph.core.graph.artifact import Identity, parse_identity
from artifactgraph.core.graph.model import DependencyGraph
from artifactgraph.core.pipeline.context import FilterContext
from artifactgraph.exceptions import ConfigurationError, VisualizationError
from artifactgraph.visualize.graphviz import write_png

logger = logging.getLogger(__name__)


def _identities(artifacts: Iterable[Identity | str]) -> tuple[Identity, ...]:
    return tuple(parse_identity(a) if isinstance(a, str) else a for a in artifacts)


class GraphFilter(ABC):
    """Base class of all pipeline filters.

    Attributes:
        kind: Name of the filter in pipeline documents.
        children: Child filters, evaluated in order.
    """

    kind: ClassVar[str] = ""

    def __init__(self, children: Iterable[GraphFilter] = ()) -> None:
        self.children: list[GraphFilter] = list(children)

    def add(self, child: GraphFilter) -> None:
        self.children.append(child)

    @abstractmethod
    def process(self, ctx: FilterContext) -> DependencyGraph:
        """Compute this filter's output graph."""

    def evaluate_child(self, ctx: FilterContext, index: int = 0) -> DependencyGraph:
        """Evaluate the ``index``-th child, or return the input graph if absent."""
        if index >= len(self.children):
            return ctx.input
        child = self.children[index]
        graph = child.process(ctx)
        logger.debug("%s -> %s", child.kind, graph.summary())
        return graph

    def evaluate_single_child(self, ctx: FilterContext) -> DependencyGraph:
        """``evaluate_child(ctx, 0)`` for filters that take at most one child.

        Raises:
            ConfigurationError: If more than one child is configured.
        """
        if len(self.children) > 1:
            raise ConfigurationError(f"Too many children in {self.kind}")
        return self.evaluate_child(ctx, 0)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.children!r})"


class FullGraph(GraphFilter):
    """The input graph itself."""

    kind = "full"

    def process(self, ctx: FilterContext) -> DependencyGraph:
        return ctx.input


class GraphRef(GraphFilter):
    """A graph defined earlier in the pipeline, by name."""

    kind = "ref"

    def __init__(self, name: str) -> None:
        super().__init__()
        self.name = name

    def process(self, ctx: FilterContext) -> DependencyGraph:
        return ctx.graph(self.name)


# ---------------------------------------------------------------------------
# Visitor-backed filters
# ---------------------------------------------------------------------------


class VisitorFilter(GraphFilter):
    """A filter that extracts a sub-graph of its child with a visitor."""

    @property
    def node_only(self) -> bool:
        """True when the visitor only ever rejects nodes, so ``not`` can negate it."""
        return True

    @property
    def edge_only(self) -> bool:
        """True when the visitor only ever rejects edges."""
        return False

    @abstractmethod
    def visitor(self, ctx: FilterContext) -> GraphVisitor:
        """Create the visitor applied to the child graph."""

    def process(self, ctx: FilterContext) -> DependencyGraph:
        return filter_nodes(self.evaluate_single_child(ctx), self.visitor(ctx))


class Scope(VisitorFilter):
    """Only follow dependencies of the given scopes."""

    kind = "scope"

    def __init__(self, scopes: Iterable[str], children: Iterable[GraphFilter] = ()) -> None:
        super().__init__(children)
        self.scopes = tuple(scopes)

    @property
    def node_only(self) -> bool:
        return False

    @property
    def edge_only(self) -> bool:
        return True

    def visitor(self, ctx: FilterContext) -> GraphVisitor:
        return ScopeVisitor(self.scopes)


class Packaging(VisitorFilter):
    kind = "packaging"

    def __init__(
        self, packagings: Iterable[str], children: Iterable[GraphFilter] = ()
    ) -> None:
        super().__init__(children)
        self.packagings = tuple(packagings)

    def visitor(self, ctx: FilterContext) -> GraphVisitor:
        return PackagingVisitor(self.packagings)


class GroupId(VisitorFilter):
    kind = "group-id"

    def __init__(
        self,
        value: str | None = None,
        not_value: str | None = None,
        children: Iterable[GraphFilter] = (),
    ) -> None:
        super().__init__(children)
        if value is None and not_value is None:
            raise ConfigurationError("group-id needs 'value' or 'not'")
        self.value = value
        self.not_value = not_value

    def visitor(self, ctx: FilterContext) -> GraphVisitor:
        return GroupIdVisitor(self.value, self.not_value)


class Artifacts(VisitorFilter):
    """Keep exactly the listed artifacts (and what connects them to the root)."""

    kind = "artifacts"

    def __init__(
        self, artifacts: Iterable[Identity | str], children: Iterable[GraphFilter] = ()
    ) -> None:
        super().__init__(children)
        self.artifacts = _identities(artifacts)

    def visitor(self, ctx: FilterContext) -> GraphVisitor:
        return ArtifactSetVisitor(self.artifacts)


class ManifestEntry(VisitorFilter):
    """Keep jars whose manifest has the main attribute ``has``."""

    kind = "manifest-entry"

    def __init__(self, has: str, children: Iterable[GraphFilter] = ()) -> None:
        super().__init__(children)
        self.has = has

    def visitor(self, ctx: FilterContext) -> GraphVisitor:
        return ManifestEntryVisitor(self.has)


class Exclude(VisitorFilter):
    """Remove the listed artifacts and everything only reachable through them."""

    kind = "exclude"

    def __init__(
        self, artifacts: Iterable[Identity | str], children: Iterable[GraphFilter] = ()
    ) -> None:
        super().__init__(children)
        self.artifacts = _identities(artifacts)

    def visitor(self, ctx: FilterContext) -> GraphVisitor:
        return ArtifactSetVisitor(self.artifacts, exclude=True)


class _Combinator(VisitorFilter):
    # Children are operands rather than inputs, so the combinator always
    # applies to the context's input graph.

    def __init__(self, children: Iterable[GraphFilter]) -> None:
        super().__init__(children)
        if not self.children:
            raise ConfigurationError(f"{self.kind} needs at least one filter")
        for child in self.children:
            if not isinstance(child, VisitorFilter):
                raise ConfigurationError(
                    f"{self.kind} only combines visitor filters, not {child.kind}"
                )

    @property
    def operands(self) -> list[VisitorFilter]:
        return [c for c in self.children if isinstance(c, VisitorFilter)]

    def process(self, ctx: FilterContext) -> DependencyGraph:
        return filter_nodes(ctx.input, self.visitor(ctx))


class And(_Combinator):
    kind = "and"

    @property
    def node_only(self) -> bool:
        return all(c.node_only for c in self.operands)

    @property
    def edge_only(self) -> bool:
        return all(c.edge_only for c in self.operands)

    def visitor(self, ctx: FilterContext) -> GraphVisitor:
        return and_(*(c.visitor(ctx) for c in self.operands))


class Or(_Combinator):
    """Keep what any operand keeps.

    Operands must all be node filters or all be edge filters. A filter that
    does not look at nodes accepts every node, so OR-ing it with a node
    filter would accept every node too.
    """

    kind = "or"

    def __init__(self, children: Iterable[GraphFilter]) -> None:
        super().__init__(children)
        if not (self.node_only or self.edge_only):
            kinds = ", ".join(c.kind for c in self.children)
            raise ConfigurationError(
                f"or cannot mix node filters and edge filters ({kinds})"
            )

    @property
    def node_only(self) -> bool:
        return all(c.node_only for c in self.operands)

    @property
    def edge_only(self) -> bool:
        return all(c.edge_only for c in self.operands)

    def visitor(self, ctx: FilterContext) -> GraphVisitor:
        return or_(*(c.visitor(ctx) for c in self.operands))


class Not(_Combinator):
    """Keep the nodes its single operand rejects.

    Only node filters can be negated. Negating an edge filter would reject
    the edges the operand follows, which reads as the opposite of what
    ``not`` suggests.
    """

    kind = "not"

    def __init__(self, children: Iterable[GraphFilter]) -> None:
        super().__init__(children)
        if len(self.children) != 1:
            raise ConfigurationError("not takes exactly one filter")
        if not self.operands[0].node_only:
            raise ConfigurationError(f"not cannot negate {self.children[0].kind}")

    def visitor(self, ctx: FilterContext) -> GraphVisitor:
        inner = self.operands[0].visitor(ctx)
        return node_filter(lambda n: not inner.visit_node(n))


# ---------------------------------------------------------------------------
# Algebra-backed filters
# ---------------------------------------------------------------------------


class RemoveSpecific(GraphFilter):
    """Remove every artifact that is only depended on through the listed ones."""

    kind = "remove-specific"

    def __init__(
        self, artifacts: Iterable[Identity | str], children: Iterable[GraphFilter] = ()
    ) -> None:
        super().__init__(children)
        self.artifacts = _identities(artifacts)

    def process(self, ctx: FilterContext) -> DependencyGraph:
        return remove_specific(self.evaluate_single_child(ctx), self.artifacts)


class RetentionSet(GraphFilter):
    """The artifacts that go away if ``artifact`` is removed, rooted at it."""

    kind = "retention-set"

    def __init__(self, artifact: Identity | str, children: Iterable[GraphFilter] = ()) -> None:
        super().__init__(children)
        if not isinstance(artifact, (str, tuple)):
            raise ConfigurationError("Only one artifact is allowed in retention-set")
        self.artifact = _identities([artifact])[0]

    def process(self, ctx: FilterContext) -> DependencyGraph:
        return retention_set(self.evaluate_single_child(ctx), self.artifact)


class SubGraph(GraphFilter):
    """Everything below ``artifact``, with ``artifact`` as the new root."""

    kind = "subgraph"

    def __init__(self, artifact: Identity | str, children: Iterable[GraphFilter] = ()) -> None:
        super().__init__(children)
        self.artifact = _identities([artifact])[0]

    def process(self, ctx: FilterContext) -> DependencyGraph:
        return rooted_at(self.evaluate_single_child(ctx), self.artifact)


class Subtract(GraphFilter):
    """Nodes of the first child that are absent from the second."""

    kind = "subtract"

    def process(self, ctx: FilterContext) -> DependencyGraph:
        if len(self.children) != 2:
            raise ConfigurationError("subtract needs two children")
        return subtract(self.evaluate_child(ctx, 0), self.evaluate_child(ctx, 1))


# ---------------------------------------------------------------------------
# Side-effecting filters
# ---------------------------------------------------------------------------


class Dump(GraphFilter):
    """Log the child graph and pass it through."""

    kind = "dump"

    def process(self, ctx: FilterContext) -> DependencyGraph:
        graph = self.evaluate_single_child(ctx)
        logger.info("%r", graph)
        return graph


class Visualize(GraphFilter):
    """Render the child graph to a PNG file and pass it through.

    Rendering failures are logged as warnings so that pipelines still run
    on machines without GraphViz.

    Args:
        file: PNG file to create.
        subgraphs: ``(color, filter)`` pairs; each filter's output is drawn
            in its color.
    """

    kind = "visualize"

    def __init__(
        self,
        file: Path | str,
        subgraphs: Sequence[tuple[str, GraphFilter]] = (),
        children: Iterable[GraphFilter] = (),
    ) -> None:
        super().__init__(children)
        self.file = Path(file)
        self.subgraphs = list(subgraphs)

    def process(self, ctx: FilterContext) -> DependencyGraph:
        graph = self.evaluate_single_child(ctx)
        colored = [(f.process(ctx), color) for color, f in self.subgraphs]
        try:
            write_png(graph, self.file, colored)
        except VisualizationError as exc:
            logger.warning("Failed to create %s", self.file)
            logger.debug("%s", exc)
        return graph
