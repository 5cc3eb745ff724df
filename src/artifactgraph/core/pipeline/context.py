"""Evaluation context passed to every pipeline filter."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from artifactgraph.core.graph.model import DependencyGraph
from artifactgraph.exceptions import ConfigurationError


@dataclass(frozen=True)
class FilterContext:
    """Input graph and named graphs visible to a filter evaluation.

    A filter with no child filter operates on ``input``. Named graphs are
    those defined earlier in the pipeline and referenced with ``ref``.

    Attributes:
        input: The graph an implicit child evaluates to.
        graphs: Named graphs, read-only.
    """

    input: DependencyGraph
    graphs: Mapping[str, DependencyGraph] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "graphs", MappingProxyType(dict(self.graphs)))

    def with_input(self, graph: DependencyGraph) -> FilterContext:
        return replace(self, input=graph)

    def with_graph(self, name: str, graph: DependencyGraph) -> FilterContext:
        """Return a context that additionally knows ``graph`` as ``name``."""
        return replace(self, graphs={**self.graphs, name: graph})

    def graph(self, name: str) -> DependencyGraph:
        """Look up a named graph.

        Raises:
            ConfigurationError: If no graph has that name.
        """
        try:
            return self.graphs[name]
        except KeyError:
            raise ConfigurationError(f"No graph exists with id={name}") from None
