"""Graph visitors, combinators, and the subgraph algebra.

All public names are re-exported here, so callers can write
``from artifactgraph.core.filters import filter_nodes, ScopeVisitor``.
"""

from artifactgraph.core.filters.algebra import (
    accept,
    difference,
    exclude_transitively,
    filter_nodes,
    induced_subgraph,
    intersection,
    remove_specific,
    retention_set,
    rooted_at,
    subtract,
    union,
)
from artifactgraph.core.filters.predicates import (
    ArtifactSetVisitor,
    GroupIdVisitor,
    ManifestEntryVisitor,
    PackagingVisitor,
    ScopeVisitor,
    read_manifest,
)
from artifactgraph.core.filters.visitors import (
    DefaultGraphVisitor,
    GraphVisitor,
    PredicateVisitor,
    and_,
    edge_filter,
    node_filter,
    not_,
    or_,
)

__all__ = [
    "accept",
    "difference",
    "exclude_transitively",
    "filter_nodes",
    "induced_subgraph",
    "intersection",
    "remove_specific",
    "retention_set",
    "rooted_at",
    "subtract",
    "union",
    "ArtifactSetVisitor",
    "GroupIdVisitor",
    "ManifestEntryVisitor",
    "PackagingVisitor",
    "ScopeVisitor",
    "read_manifest",
    "DefaultGraphVisitor",
    "GraphVisitor",
    "PredicateVisitor",
    "and_",
    "edge_filter",
    "node_filter",
    "not_",
    "or_",
]
