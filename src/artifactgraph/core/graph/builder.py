"""Breadth-first construction of the full dependency graph of an artifact.

Graph building has to be done breadth-first so that version conflict
resolution happens correctly: given ``A -> B(1.0) -> C(2.0)`` and
``A -> C(2.2)``, ``C(2.2)`` must win because it sits on the shorter
dependency chain. Nodes are looked up by identity before they are created,
so the first encounter of an identity (the nearest one, in BFS order) fixes
its version and every deeper encounter folds onto it.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass

from artifactgraph.core.graph.artifact import (
    ArtifactDescriptor,
    ArtifactMetadata,
    FileResolver,
    Identity,
    MetadataResolver,
)
from artifactgraph.core.graph.files import LazyArtifactFile
from artifactgraph.core.graph.model import (
    DependencyGraph,
    Edge,
    Node,
    _trail_edges,
    format_trail,
)
from artifactgraph.exceptions import MetadataResolutionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BrokenDependency:
    """A dependency left out of the graph because its metadata failed to load.

    Attributes:
        artifact: The requested artifact.
        trail: Coordinates from the root to the failing artifact, inclusive.
        reason: Message of the underlying failure.
    """

    artifact: ArtifactDescriptor
    trail: tuple[str, ...]
    reason: str


class GraphBuilder:
    """Builds ``DependencyGraph`` objects from a root artifact.

    Args:
        resolve_metadata: Host capability returning an artifact's metadata.
        resolve_file: Host capability locating an artifact's backing file.
            When omitted, only system-scoped artifacts with a system path
            have files.
        tolerate_broken_metadata: If True, dependencies whose metadata fails
            to load are logged, recorded in ``broken``, and left out together
            with their subtree. If False, the first failure aborts the build.
        repositories: Repositories searched for backing files, in addition to
            those named by each artifact's metadata.
    """

    def __init__(
        self,
        resolve_metadata: MetadataResolver,
        resolve_file: FileResolver | None = None,
        *,
        tolerate_broken_metadata: bool = False,
        repositories: Iterable[str] = (),
    ) -> None:
        self._resolve_metadata = resolve_metadata
        self._resolve_file = resolve_file
        self.tolerate_broken_metadata = tolerate_broken_metadata
        self._repositories = tuple(repositories)
        self.broken: list[BrokenDependency] = []

    def build(self, root: ArtifactDescriptor) -> DependencyGraph:
        """Create the full dependency graph with ``root`` at the top.

        Raises:
            MetadataResolutionError: If the root's metadata cannot be loaded,
                or a dependency's metadata cannot be loaded and broken
                metadata is not tolerated. The error carries the trail.
        """
        self.broken = []
        nodes: dict[Identity, Node] = {}
        edges: list[Edge] = []
        backward: dict[Node, list[Edge]] = {}
        queue: deque[Node] = deque()

        try:
            root_metadata = self._load_metadata(root)
        except MetadataResolutionError as exc:
            raise MetadataResolutionError(
                f"Failed to load metadata of root artifact {root}.",
                artifact=str(root),
                trail=[str(root)],
            ) from exc
        root_node = self._create_node(root, root_metadata)
        nodes[root_node.identity] = root_node
        queue.append(root_node)

        while queue:
            current = queue.popleft()
            if current.metadata is None:
                continue
            for declaration in current.metadata.dependencies:
                candidate = declaration.to_descriptor()
                dst = nodes.get(candidate.identity)
                if dst is None:
                    try:
                        metadata = self._load_metadata(candidate)
                    except MetadataResolutionError as exc:
                        trail = format_trail(
                            root_node, _trail_edges(current, root_node, backward)
                        ) + [str(candidate)]
                        self._handle_broken(candidate, trail, exc)
                        continue
                    dst = self._create_node(candidate, metadata)
                    nodes[dst.identity] = dst
                    if metadata is not None:
                        queue.append(dst)
                edge = Edge(
                    current,
                    dst,
                    declaration.scope,
                    declaration.optional,
                    declaration.exclusions,
                )
                edges.append(edge)
                backward.setdefault(dst, []).append(edge)

        graph = DependencyGraph(root_node, nodes.values(), edges)
        logger.debug(
            "Built graph for %s: %d node(s), %d broken", root, len(graph), len(self.broken)
        )
        return graph

    # -- Internals ----------------------------------------------------------

    def _load_metadata(self, artifact: ArtifactDescriptor) -> ArtifactMetadata | None:
        # System-scoped artifacts have no metadata; attempting to load it fails.
        if artifact.is_system:
            return None
        return self._resolve_metadata(artifact)

    def _create_node(
        self, artifact: ArtifactDescriptor, metadata: ArtifactMetadata | None
    ) -> Node:
        if self._resolve_file is None or artifact.is_system:
            return Node(artifact, metadata)
        repositories = self._repositories
        if metadata is not None:
            repositories = repositories + tuple(
                r for r in metadata.repositories if r not in repositories
            )
        resolve_file = self._resolve_file
        return Node(
            artifact,
            metadata,
            LazyArtifactFile(lambda: resolve_file(artifact, repositories)),
        )

    def _handle_broken(
        self,
        artifact: ArtifactDescriptor,
        trail: list[str],
        exc: MetadataResolutionError,
    ) -> None:
        message = f"Failed to parse dependencies of {artifact}."
        if not self.tolerate_broken_metadata:
            raise MetadataResolutionError(
                message, artifact=str(artifact), trail=trail
            ) from exc
        logger.warning("%s trail=%s", message, " -> ".join(trail))
        self.broken.append(BrokenDependency(artifact, tuple(trail), str(exc)))


def build_graph(
    root: ArtifactDescriptor,
    resolve_metadata: MetadataResolver,
    tolerate_broken_metadata: bool = False,
    resolve_file: FileResolver | None = None,
) -> DependencyGraph:
    """Build the full dependency graph of ``root``; see ``GraphBuilder``."""
    builder = GraphBuilder(
        resolve_metadata,
        resolve_file,
        tolerate_broken_metadata=tolerate_broken_metadata,
    )
    return builder.build(root)
