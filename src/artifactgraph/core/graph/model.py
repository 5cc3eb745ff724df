"""Dependency graph data model: nodes, edges, and immutable graph snapshots.

A ``DependencyGraph`` consists of interconnected ``Node`` and ``Edge``
objects rooted at one module. For example, given four modules with

::

    A -> B, C
    B -> D
    C -> D

the graph built from ``A`` has four nodes and four edges.

Edges are indexed on the graph rather than on the nodes, so that several
graphs can share the very same ``Node`` objects: a node carries no reference
to any graph, and every traversal takes the graph that gives it context.
Graphs are never mutated after construction; filters derive new snapshots.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from artifactgraph.core.graph.artifact import (
    DEFAULT_SCOPE,
    ArtifactDescriptor,
    ArtifactMetadata,
    Exclusion,
    Identity,
    format_id,
    parse_identity,
)
from artifactgraph.core.graph.files import LazyArtifactFile
from artifactgraph.exceptions import (
    ArtifactNotInGraphError,
    FileResolutionError,
    InvariantViolation,
)


def _default_file_resolver(artifact: ArtifactDescriptor):
    def resolve() -> Path | None:
        if artifact.system_path:
            return Path(artifact.system_path)
        if artifact.is_system:
            return None
        raise FileResolutionError(f"No file resolver configured for {artifact}")

    return resolve


# ---------------------------------------------------------------------------
# Node: one resolved module
# ---------------------------------------------------------------------------


class Node:
    """A resolved module in one or more dependency graphs.

    Attributes are copied from the artifact that won conflict resolution.
    Equality and hashing use ``(group, name, classifier)`` only, so two
    requests for the same module at different versions collapse onto one
    node.

    Args:
        artifact: The descriptor that won conflict resolution.
        metadata: Parsed metadata, or None for artifacts without any
            (system scope).
        file: Lazy backing-file handle. Defaults to a handle that yields the
            system path for system-scoped artifacts and fails otherwise.
    """

    def __init__(
        self,
        artifact: ArtifactDescriptor,
        metadata: ArtifactMetadata | None = None,
        file: LazyArtifactFile | None = None,
    ) -> None:
        self.artifact = artifact
        self.group = artifact.group
        self.name = artifact.name
        self.version = artifact.version
        self.type = artifact.type
        self.classifier = artifact.classifier
        self.metadata = metadata
        self._file = file or LazyArtifactFile(_default_file_resolver(artifact))

    @property
    def identity(self) -> Identity:
        return self.group, self.name, self.classifier

    @property
    def id(self) -> str:
        """``group:name:classifier``, the identity rendered as a string."""
        return format_id(self.group, self.name, self.classifier)

    @property
    def packaging(self) -> str:
        """Packaging from the metadata, falling back to the artifact type."""
        if self.metadata is not None:
            return self.metadata.packaging
        return self.type

    @property
    def artifact_file(self) -> Path | None:
        """The backing file (jar, war ...), resolved on first access.

        Returns:
            The file path. None only for system-scoped artifacts that
            declare no system path.

        Raises:
            FileResolutionError: If the file cannot be obtained.
        """
        return self._file.get()

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Node):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)

    def __str__(self) -> str:
        return f"{self.group}:{self.name}:{self.version}"

    def __repr__(self) -> str:
        return f"Node({self})"


# ---------------------------------------------------------------------------
# Edge: one "depends on" relation
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class Edge:
    """A directed dependency from ``src`` to ``dst``.

    Identity is the ``(src, dst)`` pair; a graph holds at most one edge per
    pair.

    Attributes:
        src: The module that depends on another.
        dst: The module depended upon.
        scope: Dependency scope (``compile``, ``runtime`` ...). Never None.
        optional: True if the dependency is optional.
        exclusions: Artifacts excluded from the closure below this edge.
    """

    src: Node
    dst: Node
    scope: str = DEFAULT_SCOPE
    optional: bool = False
    exclusions: frozenset[Exclusion] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.scope is None:
            object.__setattr__(self, "scope", DEFAULT_SCOPE)

    @property
    def key(self) -> tuple[Node, Node]:
        return self.src, self.dst

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Edge):
            return NotImplemented
        return self.src == other.src and self.dst == other.dst

    def __hash__(self) -> int:
        return hash((self.src, self.dst))

    def __str__(self) -> str:
        label = self.scope + ("/optional" if self.optional else "")
        return f"{self.src}--({label})-->{self.dst}"


# ---------------------------------------------------------------------------
# Trails
# ---------------------------------------------------------------------------


def _trail_edges(
    node: Node, root: Node | None, backward: Mapping[Node, Sequence[Edge]]
) -> list[Edge]:
    """Follow the first backward edge from ``node`` until ``root`` is reached."""
    trail: list[Edge] = []
    seen = {node}
    current = node
    while current != root:
        incoming = backward.get(current)
        if not incoming:
            raise InvariantViolation(
                f"Lost trail at {current} from {node}: "
                f"{' -> '.join(str(e) for e in reversed(trail)) or 'no edges'}"
            )
        edge = incoming[0]
        trail.append(edge)
        current = edge.src
        if current in seen and current != root:
            raise InvariantViolation(f"Trail from {node} runs in a cycle at {current}")
        seen.add(current)
    trail.reverse()
    return trail


def get_trail(node: Node, graph: DependencyGraph) -> list[Edge]:
    """Build the dependency trail from the root of ``graph`` down to ``node``.

    Useful as diagnostic information.

    Returns:
        Edges in root -> node order. Empty when ``node`` is the root.

    Raises:
        InvariantViolation: If ``node`` is not in the graph or is disconnected
            from the root.
    """
    if not graph.contains(node):
        raise InvariantViolation(f"{node} is not a part of {graph.summary()}")
    return _trail_edges(node, graph.root, graph._backward)


def format_trail(root: Node | None, trail: Sequence[Edge]) -> list[str]:
    """Render a trail as node coordinates, root first."""
    if not trail:
        return [str(root)] if root is not None else []
    return [str(trail[0].src)] + [str(edge.dst) for edge in trail]


# ---------------------------------------------------------------------------
# DependencyGraph: an immutable snapshot
# ---------------------------------------------------------------------------


class DependencyGraph:
    """An immutable graph of dependencies among artifacts.

    Constructing a graph validates the reachability invariant: edges with an
    endpoint outside ``nodes`` are dropped, duplicate ``(src, dst)`` edges are
    kept once, and every node must be reachable from ``root`` over the
    retained forward edges.

    Args:
        root: Root node, or None for the empty graph.
        nodes: Nodes of the graph. An empty collection yields the empty graph.
        edges: Candidate edges.

    Raises:
        InvariantViolation: If ``root`` is not among ``nodes`` or some node is
            unreachable from it.
    """

    def __init__(
        self,
        root: Node | None = None,
        nodes: Iterable[Node] = (),
        edges: Iterable[Edge] = (),
    ) -> None:
        members: dict[Identity, Node] = {}
        for node in nodes:
            members.setdefault(node.identity, node)

        self._root: Node | None = root if members else None
        self._nodes: dict[Identity, Node] = {}
        self._forward: dict[Node, tuple[Edge, ...]] = {}
        self._backward: dict[Node, tuple[Edge, ...]] = {}
        if self._root is None:
            if members:
                raise InvariantViolation("A non-empty graph needs a root")
            return
        if self._root.identity not in members:
            raise InvariantViolation(
                f"root {self._root} is not a part of nodes: "
                f"{sorted(format_id(*key) for key in members)}"
            )

        forward: dict[Node, list[Edge]] = {}
        backward: dict[Node, list[Edge]] = {}
        seen: set[tuple[Node, Node]] = set()
        for edge in edges:
            if edge.src.identity not in members or edge.dst.identity not in members:
                continue
            if edge.key in seen:
                continue
            seen.add(edge.key)
            forward.setdefault(edge.src, []).append(edge)
            backward.setdefault(edge.dst, []).append(edge)

        # BFS from the root; each node's discovering edge goes first in its
        # backward list so that trails always lead back to the root.
        discovered: dict[Node, Edge | None] = {self._root: None}
        queue: deque[Node] = deque([self._root])
        while queue:
            current = queue.popleft()
            for edge in forward.get(current, ()):
                if edge.dst not in discovered:
                    discovered[edge.dst] = edge
                    queue.append(edge.dst)

        unreachable = [n for n in members.values() if n not in discovered]
        if unreachable:
            raise InvariantViolation(
                f"Nodes unreachable from root {self._root}: "
                f"{sorted(n.id for n in unreachable)}"
            )

        for node, edge in discovered.items():
            if edge is not None:
                incoming = backward[node]
                incoming.remove(edge)
                incoming.insert(0, edge)

        self._nodes = {key: members[key] for key in sorted(members, key=lambda k: format_id(*k))}
        self._forward = {n: tuple(es) for n, es in forward.items()}
        self._backward = {n: tuple(es) for n, es in backward.items()}

    # -- Basic queries ------------------------------------------------------

    @property
    def root(self) -> Node | None:
        """The root node. Non-None unless the graph is empty."""
        return self._root

    @property
    def is_empty(self) -> bool:
        return self._root is None

    def all_nodes(self) -> list[Node]:
        """Return all nodes, ordered by id."""
        return list(self._nodes.values())

    def edges(self) -> list[Edge]:
        """Return all edges, grouped by source in node order."""
        return [e for n in self._nodes.values() for e in self._forward.get(n, ())]

    def contains(self, node: Node) -> bool:
        """Check whether the graph contains a node with the same identity."""
        return node.identity in self._nodes

    def find(self, identity: Identity | str) -> Node | None:
        """Look up a node by identity triple or ``group:name[:classifier]``."""
        if isinstance(identity, str):
            identity = parse_identity(identity)
        return self._nodes.get(identity)

    def node(self, identity: Identity | str) -> Node:
        """Like ``find`` but raises when absent.

        Raises:
            ArtifactNotInGraphError: If no node has the given identity.
        """
        found = self.find(identity)
        if found is None:
            label = identity if isinstance(identity, str) else format_id(*identity)
            raise ArtifactNotInGraphError(f"No artifact {label} in {self.summary()}")
        return found

    def to_node(self, artifact: ArtifactDescriptor) -> Node | None:
        """Return the node an artifact collapsed onto, or None."""
        return self._nodes.get(artifact.identity)

    # -- Traversal ----------------------------------------------------------

    def forward_edges(self, node: Node) -> tuple[Edge, ...]:
        """Edges to the modules ``node`` depends on."""
        return self._forward.get(node, ())

    def backward_edges(self, node: Node) -> tuple[Edge, ...]:
        """Edges from the modules that depend on ``node``."""
        return self._backward.get(node, ())

    def forward_nodes(self, node: Node) -> list[Node]:
        return [e.dst for e in self.forward_edges(node)]

    def backward_nodes(self, node: Node) -> list[Node]:
        return [e.src for e in self.backward_edges(node)]

    def trail(self, node: Node) -> list[Edge]:
        """Shortcut for ``get_trail(node, self)``."""
        return get_trail(node, self)

    # -- Dunder & serialization ---------------------------------------------

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes.values())

    def __contains__(self, node: object) -> bool:
        return isinstance(node, Node) and self.contains(node)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DependencyGraph):
            return NotImplemented
        return (
            self._root == other._root
            and self._nodes.keys() == other._nodes.keys()
            and {e.key for e in self.edges()} == {e.key for e in other.edges()}
        )

    __hash__ = None  # type: ignore[assignment]

    def summary(self) -> str:
        if self.is_empty:
            return "DependencyGraph[empty]"
        return f"DependencyGraph[root={self._root}, nodes={len(self)}, edges={len(self.edges())}]"

    def __repr__(self) -> str:
        lines = [f"DependencyGraph[root={self._root},", "  nodes=["]
        lines.extend(f"    {n}" for n in self._nodes.values())
        lines.append("  ]")
        lines.append("  edges=[")
        lines.extend(f"    {e}" for e in self.edges())
        lines.append("  ]")
        lines.append("]")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Deterministic, JSON-serializable representation."""
        return {
            "root": self._root.id if self._root is not None else None,
            "nodes": [
                {
                    "id": n.id,
                    "group": n.group,
                    "name": n.name,
                    "version": n.version,
                    "type": n.type,
                    "classifier": n.classifier,
                    "packaging": n.packaging,
                }
                for n in self._nodes.values()
            ],
            "edges": [
                {
                    "from": e.src.id,
                    "to": e.dst.id,
                    "scope": e.scope,
                    "optional": e.optional,
                    "exclusions": sorted(str(x) for x in e.exclusions),
                }
                for e in self.edges()
            ],
        }
