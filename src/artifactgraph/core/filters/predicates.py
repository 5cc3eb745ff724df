"""Ready-made visitors for the common filtering criteria.

- ``ScopeVisitor``: only traverse edges of the given scopes.
- ``PackagingVisitor``: only keep modules of the given packagings.
- ``GroupIdVisitor``: keep modules by group id (positive or negative match).
- ``ArtifactSetVisitor``: keep (or drop) an explicit set of artifacts.
- ``ManifestEntryVisitor``: keep jars whose manifest has a main attribute.

Node filters such as these cut traversal: a rejected node takes the part of
the graph only reachable through it along.
"""

from __future__ import annotations

import logging
import zipfile
from collections.abc import Iterable
from pathlib import Path

from artifactgraph.core.filters.visitors import DefaultGraphVisitor
from artifactgraph.core.graph.artifact import Identity, parse_identity
from artifactgraph.core.graph.model import Edge, Node
from artifactgraph.exceptions import FilterError

logger = logging.getLogger(__name__)

MANIFEST_PATH = "META-INF/MANIFEST.MF"


class ScopeVisitor(DefaultGraphVisitor):
    """Only traverse dependencies of the given scopes (``compile``, ``runtime`` ...)."""

    def __init__(self, scopes: Iterable[str]) -> None:
        self.scopes = frozenset(scopes)

    def visit_edge(self, edge: Edge) -> bool:
        return edge.scope in self.scopes


class PackagingVisitor(DefaultGraphVisitor):
    """Only keep modules whose packaging is one of ``packagings``."""

    def __init__(self, packagings: Iterable[str]) -> None:
        self.packagings = frozenset(packagings)

    def visit_node(self, node: Node) -> bool:
        return node.packaging in self.packagings


class GroupIdVisitor(DefaultGraphVisitor):
    """Keep modules in group ``value``, or outside group ``not_value``.

    Either criterion suffices; with neither set nothing matches.
    """

    def __init__(self, value: str | None = None, not_value: str | None = None) -> None:
        self.value = value
        self.not_value = not_value

    def visit_node(self, node: Node) -> bool:
        if self.value is not None and node.group == self.value:
            return True
        if self.not_value is not None and node.group != self.not_value:
            return True
        return False


class ArtifactSetVisitor(DefaultGraphVisitor):
    """Keep the listed artifacts, or with ``exclude=True`` everything else.

    Args:
        artifacts: Identities as triples or ``group:name[:classifier]``.
        exclude: Invert the match.
    """

    def __init__(self, artifacts: Iterable[Identity | str], exclude: bool = False) -> None:
        self.identities = frozenset(
            parse_identity(a) if isinstance(a, str) else a for a in artifacts
        )
        self.exclude = exclude

    def visit_node(self, node: Node) -> bool:
        return (node.identity in self.identities) != self.exclude


def read_manifest(path: Path) -> dict[str, str] | None:
    """Read the main attributes of a jar manifest.

    Attribute names are case-insensitive and returned lower-cased.
    Continuation lines (starting with a single space) are joined.

    Returns:
        The main attributes, or None when the archive has no manifest.

    Raises:
        OSError: If the file cannot be read.
        zipfile.BadZipFile: If the file is not a zip archive.
    """
    with zipfile.ZipFile(path) as jar:
        try:
            raw = jar.read(MANIFEST_PATH)
        except KeyError:
            return None

    attributes: dict[str, str] = {}
    last: str | None = None
    for line in raw.decode("utf-8", errors="replace").splitlines():
        if not line:
            break  # end of the main section
        if line.startswith(" ") and last is not None:
            attributes[last] += line[1:]
            continue
        name, sep, value = line.partition(":")
        if not sep:
            continue
        last = name.strip().lower()
        attributes[last] = value.strip()
    return attributes


class ManifestEntryVisitor(DefaultGraphVisitor):
    """Keep modules whose jar manifest declares the main attribute ``entry``.

    Resolves each visited node's backing file. Nodes without a file or
    manifest are dropped.

    Raises:
        FileResolutionError: From the node's backing-file resolution.
        FilterError: If the file cannot be read as a jar.
    """

    def __init__(self, entry: str) -> None:
        self.entry = entry.lower()

    def visit_node(self, node: Node) -> bool:
        path = node.artifact_file
        if path is None:
            return False
        try:
            attributes = read_manifest(path)
        except (OSError, zipfile.BadZipFile) as exc:
            raise FilterError(f"Failed to filter {node}: {exc}") from exc
        if attributes is None:
            logger.debug("%s has no manifest", node)
            return False
        return self.entry in attributes
