"""Dependency graph model, breadth-first construction, and exclusion handling.

This package implements the node/edge data model, the BFS graph builder with
nearest-wins version conflict resolution, and the path-scoped exclusion
resolver. All public names are re-exported here, so callers can write
``from artifactgraph.core.graph import DependencyGraph``.

Data flow
---------
``GraphBuilder`` produces a full graph from a root artifact.
``ExclusionResolver`` narrows it to the exclusion-consistent subgraph, which
is the baseline every further filter starts from.
"""

from artifactgraph.core.graph.artifact import (
    DEFAULT_SCOPE,
    SYSTEM_SCOPE,
    ArtifactDescriptor,
    ArtifactMetadata,
    DependencyDeclaration,
    Exclusion,
    FileResolver,
    Identity,
    MetadataResolver,
    format_id,
    parse_identity,
)
from artifactgraph.core.graph.builder import (
    BrokenDependency,
    GraphBuilder,
    build_graph,
)
from artifactgraph.core.graph.exclusion import (
    ExclusionResolver,
    apply_exclusions,
    contributed_exclusions,
)
from artifactgraph.core.graph.files import (
    LazyArtifactFile,
    resolve_artifact_files,
)
from artifactgraph.core.graph.model import (
    DependencyGraph,
    Edge,
    Node,
    format_trail,
    get_trail,
)

__all__ = [
    "DEFAULT_SCOPE",
    "SYSTEM_SCOPE",
    "ArtifactDescriptor",
    "ArtifactMetadata",
    "DependencyDeclaration",
    "Exclusion",
    "FileResolver",
    "Identity",
    "MetadataResolver",
    "format_id",
    "parse_identity",
    "BrokenDependency",
    "GraphBuilder",
    "build_graph",
    "ExclusionResolver",
    "apply_exclusions",
    "contributed_exclusions",
    "LazyArtifactFile",
    "resolve_artifact_files",
    "DependencyGraph",
    "Edge",
    "Node",
    "format_trail",
    "get_trail",
]
