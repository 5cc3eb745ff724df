"""Path-scoped dependency exclusion.

Every artifact contributes the exclusions declared on its own dependencies,
and they apply to everything below it on the current path. An artifact that
is also reachable through a path without the exclusion stays in the graph.
In the following situation X stays, because ``A -> C -> D -> X`` reaches it
even though B's dependency on D excludes X::

    A -+-> B[exclude=X] -+
       |                 |
       +-> C ------------+-> D ---> X

Marking artifacts as excluded globally gets this wrong, so the resolver walks
every path from the root with a stack of the exclusions in effect along that
path and only accumulates reachability globally.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from artifactgraph.core.graph.artifact import Exclusion
from artifactgraph.core.graph.model import DependencyGraph, Edge, Node

logger = logging.getLogger(__name__)

_NO_EXCLUSIONS: frozenset[Exclusion] = frozenset()


def contributed_exclusions(node: Node) -> frozenset[Exclusion]:
    """Union of the exclusions declared on ``node``'s dependencies.

    Read from the metadata, so declarations whose targets never made it into
    the graph (collapsed onto a nearer version, or broken) still count.
    """
    if node.metadata is None:
        return _NO_EXCLUSIONS
    exclusions: set[Exclusion] = set()
    for declaration in node.metadata.dependencies:
        exclusions.update(declaration.exclusions)
    return frozenset(exclusions)


def _is_excluded(node: Node, exclusions: frozenset[Exclusion]) -> bool:
    return any(exc.matches(node.group, node.name) for exc in exclusions)


class ExclusionResolver:
    """Narrows a graph to the nodes that survive dependency exclusions.

    Optional edges are never traversed: they do not contribute to the
    transitive closure used for building and packaging.
    """

    def resolve(self, graph: DependencyGraph) -> DependencyGraph:
        """Return the exclusion-consistent sub-graph of ``graph``.

        The result has the same root and consists of every node reachable
        from it along some path on which no ancestor excludes the node, plus
        all edges of ``graph`` between such nodes.
        """
        if graph.is_empty:
            return graph

        reachable: set[Node] = set()
        # (node, exclusions inherited from its ancestors) pairs already
        # expanded. Expanding one again cannot discover anything new.
        expanded: set[tuple[Node, frozenset[Exclusion]]] = set()
        on_path: set[Node] = set()
        contributed: dict[Node, frozenset[Exclusion]] = {}
        # One frame per node on the current path: the node, the cumulative
        # exclusions its children are checked against, and its pending edges.
        stack: list[tuple[Node, frozenset[Exclusion], Iterator[Edge]]] = []

        def enter(node: Node, inherited: frozenset[Exclusion]) -> None:
            # Excluded on this path? Another path may still reach it.
            if _is_excluded(node, inherited):
                return
            reachable.add(node)
            if node in on_path or (node, inherited) in expanded:
                return
            expanded.add((node, inherited))

            if node not in contributed:
                contributed[node] = contributed_exclusions(node)
            own = contributed[node]
            in_effect = inherited | own if own else inherited
            on_path.add(node)
            stack.append((node, in_effect, iter(graph.forward_edges(node))))

        enter(graph.root, _NO_EXCLUSIONS)
        while stack:
            node, in_effect, edges = stack[-1]
            edge = next(edges, None)
            if edge is None:
                stack.pop()
                on_path.discard(node)
            elif not edge.optional:
                enter(edge.dst, in_effect)

        result = DependencyGraph(graph.root, reachable, graph.edges())
        logger.debug(
            "Dependency exclusions reduced %d node(s) to %d", len(graph), len(result)
        )
        return result


def apply_exclusions(graph: DependencyGraph) -> DependencyGraph:
    """Shortcut for ``ExclusionResolver().resolve(graph)``."""
    return ExclusionResolver().resolve(graph)
