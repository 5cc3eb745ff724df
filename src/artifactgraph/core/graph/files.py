"""Lazy backing-file handles for graph nodes.

Resolving the file of every transitive dependency up front is wasteful when
most downstream filters discard most nodes, so a node only stores a resolver
thunk. The thunk runs at most once per node and its result is memoised.

File resolution does not feed back into graph topology, which makes it the
one operation that may run concurrently once a graph's shape is final; see
``resolve_artifact_files``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING

from artifactgraph.exceptions import FileResolutionError

if TYPE_CHECKING:
    from artifactgraph.core.graph.model import DependencyGraph, Node

logger = logging.getLogger(__name__)


class LazyArtifactFile:
    """A backing-file handle resolved on first access.

    Uses an acquire-once-compute-store pattern guarded by a per-handle lock,
    so concurrent first accesses invoke the resolver exactly once. A resolver
    that raises leaves the handle unresolved and the error propagates to the
    caller.

    Args:
        resolver: Zero-argument callable returning the file path, or None
            for artifacts that legitimately have no file (system scope
            without a declared path).
    """

    def __init__(self, resolver: Callable[[], Path | None]) -> None:
        self._resolver = resolver
        self._lock = threading.Lock()
        self._resolved = False
        self._path: Path | None = None

    @property
    def resolved(self) -> bool:
        """True once the resolver has completed successfully."""
        return self._resolved

    def get(self) -> Path | None:
        """Return the backing file, resolving it on first call.

        Raises:
            FileResolutionError: If the resolver cannot obtain the file.
        """
        if self._resolved:
            return self._path
        with self._lock:
            if not self._resolved:
                self._path = self._resolver()
                self._resolved = True
        return self._path


def _artifact_file(node: Node) -> Path | None:
    return node.artifact_file


def resolve_artifact_files(
    graph: DependencyGraph,
    max_workers: int = 4,
    resolver: Callable[[Node], Path | None] | None = None,
) -> dict[Node, Path | None]:
    """Resolve the backing files of every node in ``graph`` concurrently.

    Args:
        graph: A graph whose shape is final (typically after filtering).
        max_workers: Thread pool size.
        resolver: Maps a node to its file. Defaults to the node's own lazy
            ``artifact_file``.

    Returns:
        Mapping of node to its backing file, in ``graph.all_nodes()`` order.

    Raises:
        FileResolutionError: The first failure encountered, in node order,
            with the trail from the root to the failing node.
    """
    from artifactgraph.core.graph.model import format_trail

    nodes = graph.all_nodes()
    if not nodes:
        return {}
    resolve = resolver or _artifact_file
    files: dict[Node, Path | None] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [(node, pool.submit(resolve, node)) for node in nodes]
        for node, future in futures:
            try:
                files[node] = future.result()
            except FileResolutionError as exc:
                trail = " -> ".join(format_trail(graph.root, graph.trail(node)))
                raise FileResolutionError(
                    f"Failed to resolve artifact {node}: {exc} (trail: {trail})"
                ) from exc
    logger.debug("Resolved %d artifact file(s)", len(files))
    return files
