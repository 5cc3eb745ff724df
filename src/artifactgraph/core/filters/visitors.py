"""Graph visitors and the AND / OR / NOT combinators over them.

A visitor is anything with two methods, ``visit_node(node) -> bool`` and
``visit_edge(edge) -> bool``. Subgraph extraction asks the visitor about each
node and edge it meets; returning False drops the node (and cuts traversal
below it) or drops the edge (and cuts traversal through it).

Hosts plug custom filters in by implementing the two methods, by subclassing
``DefaultGraphVisitor`` and overriding one of them, or by wrapping plain
callables with ``node_filter`` / ``edge_filter``. Combinators let filter
chains be composed declaratively::

    and_(edge_filter(lambda e: e.scope == "compile"), not_(group_ids))
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable

from artifactgraph.core.graph.model import Edge, Node
from artifactgraph.exceptions import ConfigurationError


@runtime_checkable
class GraphVisitor(Protocol):
    """Two-method capability interface used by every graph filter."""

    def visit_node(self, node: Node) -> bool:
        """Return True to keep ``node`` and continue traversal below it."""
        ...

    def visit_edge(self, edge: Edge) -> bool:
        """Return True to keep ``edge`` and traverse to its destination."""
        ...


class DefaultGraphVisitor:
    """A visitor that accepts everything. Override one side to filter."""

    def visit_node(self, node: Node) -> bool:
        return True

    def visit_edge(self, edge: Edge) -> bool:
        return True


class PredicateVisitor(DefaultGraphVisitor):
    """Adapts plain callables to the visitor interface.

    Args:
        node: Predicate over nodes. Accepts every node when omitted.
        edge: Predicate over edges. Accepts every edge when omitted.
    """

    def __init__(
        self,
        node: Callable[[Node], bool] | None = None,
        edge: Callable[[Edge], bool] | None = None,
    ) -> None:
        self._node = node
        self._edge = edge

    def visit_node(self, node: Node) -> bool:
        return self._node is None or bool(self._node(node))

    def visit_edge(self, edge: Edge) -> bool:
        return self._edge is None or bool(self._edge(edge))


def node_filter(predicate: Callable[[Node], bool]) -> GraphVisitor:
    """Visitor that filters nodes with ``predicate`` and keeps every edge."""
    return PredicateVisitor(node=predicate)


def edge_filter(predicate: Callable[[Edge], bool]) -> GraphVisitor:
    """Visitor that filters edges with ``predicate`` and keeps every node."""
    return PredicateVisitor(edge=predicate)


# ---------------------------------------------------------------------------
# Combinators
# ---------------------------------------------------------------------------


def _require_children(kind: str, visitors: Sequence[GraphVisitor]) -> tuple[GraphVisitor, ...]:
    if not visitors:
        raise ConfigurationError(f"{kind} needs at least one visitor")
    return tuple(visitors)


class _AllOf:
    def __init__(self, visitors: Sequence[GraphVisitor]) -> None:
        self.visitors = _require_children("and", visitors)

    def visit_node(self, node: Node) -> bool:
        return all(v.visit_node(node) for v in self.visitors)

    def visit_edge(self, edge: Edge) -> bool:
        return all(v.visit_edge(edge) for v in self.visitors)


class _AnyOf:
    def __init__(self, visitors: Sequence[GraphVisitor]) -> None:
        self.visitors = _require_children("or", visitors)

    def visit_node(self, node: Node) -> bool:
        return any(v.visit_node(node) for v in self.visitors)

    def visit_edge(self, edge: Edge) -> bool:
        return any(v.visit_edge(edge) for v in self.visitors)


class _Not:
    def __init__(self, visitor: GraphVisitor) -> None:
        self.visitor = visitor

    def visit_node(self, node: Node) -> bool:
        return not self.visitor.visit_node(node)

    def visit_edge(self, edge: Edge) -> bool:
        return not self.visitor.visit_edge(edge)


def and_(*visitors: GraphVisitor) -> GraphVisitor:
    """AND the outputs of ``visitors``, short-circuiting left to right.

    Can be used to create intersections.

    Raises:
        ConfigurationError: If no visitor is given.
    """
    return _AllOf(visitors)


def or_(*visitors: GraphVisitor) -> GraphVisitor:
    """OR the outputs of ``visitors``, short-circuiting left to right.

    Can be used to create unions. An ``edge_filter`` visitor accepts every
    node, so OR-ing it with a node visitor accepts every node too. Pipeline
    ``or`` filters refuse that mix.

    Raises:
        ConfigurationError: If no visitor is given.
    """
    return _AnyOf(visitors)


def not_(visitor: GraphVisitor) -> GraphVisitor:
    """Negate both answers of ``visitor``."""
    return _Not(visitor)
