"""Shared test helpers for building artifacts, repositories, and graphs.

Coordinates in tests are short (``g:a:1``) so assertions stay readable.
``labels`` renders nodes as ``group:name`` for set comparisons.
"""

from __future__ import annotations

import zipfile
from collections.abc import Iterable
from pathlib import Path

from artifactgraph.core.graph import (
    ArtifactDescriptor,
    ArtifactMetadata,
    DependencyDeclaration,
    DependencyGraph,
    Edge,
    Exclusion,
    GraphBuilder,
    Node,
)
from artifactgraph.exceptions import MetadataResolutionError


def dep(
    coordinate: str,
    scope: str | None = None,
    optional: bool = False,
    exclusions: Iterable[str] = (),
    system_path: str | None = None,
) -> DependencyDeclaration:
    """Create a dependency declaration from a coordinate string."""
    target = ArtifactDescriptor.parse(coordinate)
    return DependencyDeclaration(
        group=target.group,
        name=target.name,
        version=target.version,
        type=target.type,
        classifier=target.classifier,
        scope=scope,
        optional=optional,
        exclusions=frozenset(Exclusion.parse(e) for e in exclusions),
        system_path=system_path,
    )


class FakeRepository:
    """In-memory metadata source that records every request it serves."""

    def __init__(self) -> None:
        self.metadata: dict[tuple[str, str, str], ArtifactMetadata] = {}
        self.requested: list[str] = []

    def add(
        self,
        coordinate: str,
        *dependencies: DependencyDeclaration | str,
        packaging: str | None = None,
    ) -> ArtifactDescriptor:
        artifact = ArtifactDescriptor.parse(coordinate)
        declarations = tuple(d if isinstance(d, DependencyDeclaration) else dep(d) for d in dependencies)
        self.metadata[(artifact.group, artifact.name, artifact.version)] = ArtifactMetadata(
            packaging=packaging or artifact.type,
            dependencies=declarations,
        )
        return artifact

    def resolve_metadata(self, artifact: ArtifactDescriptor) -> ArtifactMetadata:
        self.requested.append(artifact.coordinate)
        try:
            return self.metadata[(artifact.group, artifact.name, artifact.version)]
        except KeyError:
            raise MetadataResolutionError(f"No metadata for {artifact.coordinate}") from None

    def build(self, root: str, **kwargs) -> DependencyGraph:
        builder = GraphBuilder(self.resolve_metadata, **kwargs)
        return builder.build(ArtifactDescriptor.parse(root))


def make_graph(root: str, edges: Iterable[tuple[str, ...]]) -> DependencyGraph:
    """Build a graph directly from ``group:name`` labels.

    Each edge is ``(src, dst)`` or ``(src, dst, scope)``. Every node gets
    version ``1``.
    """
    nodes: dict[str, Node] = {}

    def node(label: str) -> Node:
        if label not in nodes:
            nodes[label] = Node(ArtifactDescriptor.parse(f"{label}:1"))
        return nodes[label]

    root_node = node(root)
    built = [Edge(node(e[0]), node(e[1]), *e[2:]) for e in edges]
    return DependencyGraph(root_node, nodes.values(), built)


def labels(nodes: Iterable[Node]) -> set[str]:
    """``group:name`` of each node."""
    return {f"{n.group}:{n.name}" for n in nodes}


def edge_labels(graph: DependencyGraph) -> set[tuple[str, str]]:
    return {(f"{e.src.group}:{e.src.name}", f"{e.dst.group}:{e.dst.name}") for e in graph.edges()}


def write_jar(path: Path, manifest: str | None = None) -> Path:
    """Write a zip file, with ``META-INF/MANIFEST.MF`` when given."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as jar:
        if manifest is not None:
            jar.writestr("META-INF/MANIFEST.MF", manifest)
        jar.writestr("placeholder.txt", "x")
    return path
