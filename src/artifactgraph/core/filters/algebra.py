"""Subgraph extraction and the set operations derived from it.

Every operation takes its source graph(s) as explicit arguments and returns a
new ``DependencyGraph`` snapshot sharing ``Node`` and ``Edge`` objects with
its inputs. Inputs are never modified.

Formal notes
------------
Let ``normalize(G = (r, V, E))`` remove nodes unreachable from ``r``::

    V' = { v | r ->* v in G }
    E' = { (u, v) in E | u in V' and v in V' }

Then ``exclude_transitively(G, N) = normalize(r, V - N, E)``: a node remains
only when it is reachable from the root without going through any artifact
in ``N``.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable

from artifactgraph.core.filters.visitors import (
    DefaultGraphVisitor,
    GraphVisitor,
    node_filter,
)
from artifactgraph.core.graph.artifact import Identity, parse_identity
from artifactgraph.core.graph.model import DependencyGraph, Edge, Node
from artifactgraph.exceptions import InvariantViolation

logger = logging.getLogger(__name__)

NodeRef = Node | Identity | str


def _as_node(graph: DependencyGraph, ref: NodeRef) -> Node:
    if isinstance(ref, Node):
        return graph.node(ref.identity)
    return graph.node(ref)


def _as_identities(refs: Iterable[Node | Identity | str]) -> frozenset[Identity]:
    result: set[Identity] = set()
    for ref in refs:
        if isinstance(ref, Node):
            result.add(ref.identity)
        elif isinstance(ref, str):
            result.add(parse_identity(ref))
        else:
            result.add(ref)
    return frozenset(result)


# ---------------------------------------------------------------------------
# Primitive extraction
# ---------------------------------------------------------------------------


def filter_nodes(
    graph: DependencyGraph,
    visitor: GraphVisitor,
    start: NodeRef | None = None,
) -> DependencyGraph:
    """Visit the graph from ``start`` and build a sub-graph of what was kept.

    Traversal is depth-first. A node is kept only if ``visitor.visit_node``
    accepts it; outgoing edges of a kept node are tested individually with
    ``visitor.visit_edge``, and every accepted edge is kept and its
    destination traversed. Rejecting an edge cuts traversal through that
    edge without removing its destination if another kept edge reaches it.
    Each node is offered to the visitor at most once.

    Args:
        graph: Source graph.
        visitor: Node/edge filter.
        start: Node to start from; defaults to the root. Becomes the root of
            the result.

    Returns:
        The sub-graph; empty if ``graph`` is empty or ``start`` is rejected.

    Raises:
        ArtifactNotInGraphError: If ``start`` is not in ``graph``.
    """
    if graph.is_empty:
        return graph
    origin = graph.root if start is None else _as_node(graph, start)

    kept: list[Node] = []
    edges: list[Edge] = []
    visited: set[Node] = {origin}
    stack: list[Node] = [origin]
    while stack:
        node = stack.pop()
        if not visitor.visit_node(node):
            continue
        kept.append(node)
        for edge in graph.forward_edges(node):
            if visitor.visit_edge(edge):
                edges.append(edge)
                if edge.dst not in visited:
                    visited.add(edge.dst)
                    stack.append(edge.dst)

    return DependencyGraph(origin, kept, edges)


def accept(graph: DependencyGraph, visitor: GraphVisitor) -> None:
    """Run ``visitor`` over the graph, discarding the resulting sub-graph."""
    filter_nodes(graph, visitor)


def rooted_at(graph: DependencyGraph, node: NodeRef) -> DependencyGraph:
    """The full sub-graph below ``node``, with ``node`` as its root."""
    return filter_nodes(graph, DefaultGraphVisitor(), start=node)


def induced_subgraph(
    graph: DependencyGraph,
    nodes: Collection[Node],
    root: NodeRef | None = None,
) -> DependencyGraph:
    """Keep exactly ``nodes`` and every edge of ``graph`` between them.

    The non-traversal variant, for membership computed by other means.

    Args:
        graph: Source graph; ``nodes`` must be a subset of its nodes.
        nodes: Nodes to keep.
        root: Root of the result; defaults to the root of ``graph``.

    Raises:
        InvariantViolation: If some node is not part of ``graph`` or is not
            reachable from the root within the induced sub-graph.
    """
    if not nodes:
        return DependencyGraph()
    strangers = [n for n in nodes if not graph.contains(n)]
    if strangers:
        raise InvariantViolation(
            f"Nodes {sorted(n.id for n in strangers)} are not part of {graph.summary()}"
        )
    origin = graph.root if root is None else _as_node(graph, root)
    members = {n.identity for n in nodes}
    edges = [
        e for e in graph.edges()
        if e.src.identity in members and e.dst.identity in members
    ]
    return DependencyGraph(origin, [graph.find(key) for key in members], edges)


# ---------------------------------------------------------------------------
# Set operations
# ---------------------------------------------------------------------------


def subtract(a: DependencyGraph, b: DependencyGraph) -> DependencyGraph:
    """Nodes of ``a`` not present in ``b``, still reachable from a's root."""
    return filter_nodes(a, node_filter(lambda n: not b.contains(n)))


def difference(
    a: DependencyGraph, b: DependencyGraph | Collection[Node]
) -> frozenset[Node]:
    """Set difference of node sets: nodes of ``a`` whose identity is not in ``b``.

    Unlike ``subtract`` this does not traverse, so the result is a plain node
    set rather than a rooted graph.
    """
    excluded = {n.identity for n in b}
    return frozenset(n for n in a.all_nodes() if n.identity not in excluded)


def intersection(a: DependencyGraph, b: DependencyGraph) -> DependencyGraph:
    """Nodes of ``a`` also present in ``b``, still reachable from a's root."""
    return filter_nodes(a, node_filter(b.contains))


def union(base: DependencyGraph, *graphs: DependencyGraph) -> DependencyGraph:
    """Union of sub-graphs of ``base`` sharing its root.

    Edges are taken from ``base``, so an edge dropped by one operand may
    reappear when both of its endpoints are present.
    """
    nodes: dict[Identity, Node] = {}
    for g in graphs:
        if g.is_empty:
            continue
        if g.root != base.root:
            raise InvariantViolation(
                f"Cannot unite a graph rooted at {g.root} into one rooted at {base.root}"
            )
        for n in g.all_nodes():
            nodes.setdefault(n.identity, n)
    return induced_subgraph(base, list(nodes.values()))


def exclude_transitively(
    graph: DependencyGraph, artifacts: Iterable[Node | Identity | str]
) -> DependencyGraph:
    """Remove ``artifacts`` and everything only reachable through them."""
    excluded = _as_identities(artifacts)
    return filter_nodes(graph, node_filter(lambda n: n.identity not in excluded))


def retention_set(base: DependencyGraph, target: NodeRef) -> DependencyGraph:
    """Artifacts that become unreachable once ``target`` is removed.

    Step 1 subtracts ``target`` transitively from ``base``. Step 2 walks the
    sub-graph below ``target`` and keeps what step 1 lost, i.e. the
    artifacts specific to ``target``. The result is rooted at ``target``.

    Raises:
        ArtifactNotInGraphError: If ``target`` is not in ``base``.
    """
    origin = _as_node(base, target)
    subtraction = exclude_transitively(base, [origin])
    result = filter_nodes(
        base, node_filter(lambda n: not subtraction.contains(n)), start=origin
    )
    logger.debug("Retention set of %s: %d node(s)", origin, len(result))
    return result


def remove_specific(
    graph: DependencyGraph, artifacts: Iterable[Node | Identity | str]
) -> DependencyGraph:
    """Remove every artifact that is specific to one of ``artifacts``.

    An artifact is specific to X when it is only depended on through X; such
    artifacts (and X itself) vanish from ``exclude_transitively(graph, [X])``.
    The result keeps the nodes that survive every such exclusion.
    """
    identities = _as_identities(artifacts)
    if not identities:
        return graph
    keep = {n.identity for n in graph.all_nodes()}
    for identity in identities:
        keep &= {n.identity for n in exclude_transitively(graph, [identity]).all_nodes()}
    return filter_nodes(graph, node_filter(lambda n: n.identity in keep))
