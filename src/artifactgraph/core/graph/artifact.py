"""Artifact descriptors, exclusions, dependency declarations, and metadata.

This module provides the value types the graph engine consumes from its host:
an ``ArtifactDescriptor`` identifying one resolvable unit, the
``DependencyDeclaration`` entries listed in an artifact's metadata, and the
``ArtifactMetadata`` record returned by a metadata resolver.

Identity
--------
Nodes are deduplicated by ``(group, name, classifier)``. ``version`` and
``type`` are informational: two requests for the same module at different
versions denote the same node once nearest-wins conflict resolution has run.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

#: Scope assigned to an edge whose declaration carries none.
DEFAULT_SCOPE = "compile"

#: Scope of artifacts that have no metadata of their own.
SYSTEM_SCOPE = "system"

Identity = tuple[str, str, Optional[str]]


def format_id(group: str, name: str, classifier: str | None) -> str:
    """Render an identity triple as ``group:name:classifier``."""
    return f"{group}:{name}:{classifier or ''}"


def parse_identity(text: str) -> Identity:
    """Parse ``group:name[:classifier]`` into an identity triple.

    Args:
        text: Identity string, e.g. ``"org.example:core"`` or
            ``"org.example:core:tests"``.

    Returns:
        A ``(group, name, classifier)`` tuple. The classifier is None when
        omitted or empty.

    Raises:
        ValueError: If the string does not have two or three parts.
    """
    parts = text.strip().split(":")
    if len(parts) not in (2, 3) or not parts[0] or not parts[1]:
        raise ValueError(f"Invalid artifact identity: {text!r}")
    classifier = parts[2] if len(parts) == 3 and parts[2] else None
    return parts[0], parts[1], classifier


# ---------------------------------------------------------------------------
# Exclusion
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Exclusion:
    """An exclusion declared on a dependency: ``group:name``.

    Either field may be ``"*"`` to match anything, following Maven 3.

    Attributes:
        group: Group to exclude, or ``"*"``.
        name: Artifact name to exclude, or ``"*"``.
    """

    group: str
    name: str

    @classmethod
    def parse(cls, text: str) -> Exclusion:
        """Parse ``group:name``.

        Raises:
            ValueError: If the string is not of the form ``group:name``.
        """
        parts = text.strip().split(":")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise ValueError(f"Invalid exclusion: {text!r}")
        return cls(parts[0], parts[1])

    def matches(self, group: str, name: str) -> bool:
        """Return True if this exclusion covers ``group:name``."""
        return self.group in ("*", group) and self.name in ("*", name)

    def __str__(self) -> str:
        return f"{self.group}:{self.name}"


# ---------------------------------------------------------------------------
# ArtifactDescriptor
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ArtifactDescriptor:
    """Identity of one resolvable unit.

    Attributes:
        group: Group id (e.g. ``"org.example"``).
        name: Artifact id.
        version: Requested version. Informational for identity purposes.
        type: Artifact type (``"jar"``, ``"war"``, ``"pom"`` ...).
        classifier: Optional classifier (``"sources"``, ``"tests"`` ...).
        scope: Scope under which the artifact was requested, if any.
        optional: Whether the artifact was requested as optional.
        system_path: Backing file of a system-scoped artifact, if declared.
    """

    group: str
    name: str
    version: str
    type: str = "jar"
    classifier: str | None = None
    scope: str | None = None
    optional: bool = False
    system_path: str | None = None

    @classmethod
    def parse(cls, text: str, **kwargs) -> ArtifactDescriptor:
        """Parse a coordinate ``group:name:version[:type[:classifier]]``.

        Extra keyword arguments (``scope``, ``optional`` ...) are passed to
        the constructor.

        Raises:
            ValueError: If the coordinate has fewer than three or more than
                five parts, or an empty group, name, or version.
        """
        parts = text.strip().split(":")
        if not 3 <= len(parts) <= 5 or not all(parts[:3]):
            raise ValueError(f"Invalid artifact coordinate: {text!r}")
        group, name, version = parts[:3]
        type_ = parts[3] if len(parts) > 3 and parts[3] else "jar"
        classifier = parts[4] if len(parts) > 4 and parts[4] else None
        return cls(group, name, version, type_, classifier, **kwargs)

    @property
    def identity(self) -> Identity:
        """The ``(group, name, classifier)`` deduplication key."""
        return self.group, self.name, self.classifier

    @property
    def id(self) -> str:
        return format_id(self.group, self.name, self.classifier)

    @property
    def coordinate(self) -> str:
        """``group:name:version[:type[:classifier]]``, type shown only if needed."""
        text = f"{self.group}:{self.name}:{self.version}"
        if self.classifier:
            return f"{text}:{self.type}:{self.classifier}"
        if self.type != "jar":
            return f"{text}:{self.type}"
        return text

    @property
    def is_system(self) -> bool:
        return self.scope == SYSTEM_SCOPE

    def __str__(self) -> str:
        return self.coordinate


# ---------------------------------------------------------------------------
# DependencyDeclaration & ArtifactMetadata
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DependencyDeclaration:
    """One ``<dependency>`` entry of an artifact's metadata.

    Attributes:
        group: Group id of the dependency.
        name: Artifact id of the dependency.
        version: Declared version.
        type: Declared type.
        classifier: Declared classifier.
        scope: Declared scope; None means the default (``compile``).
        optional: Whether the dependency is optional.
        exclusions: Artifacts excluded from this dependency's closure.
        system_path: Backing file for a system-scoped dependency.
    """

    group: str
    name: str
    version: str
    type: str = "jar"
    classifier: str | None = None
    scope: str | None = None
    optional: bool = False
    exclusions: frozenset[Exclusion] = field(default_factory=frozenset)
    system_path: str | None = None

    def to_descriptor(self) -> ArtifactDescriptor:
        """Create the candidate descriptor requested by this declaration."""
        return ArtifactDescriptor(
            group=self.group,
            name=self.name,
            version=self.version,
            type=self.type,
            classifier=self.classifier,
            scope=self.scope or DEFAULT_SCOPE,
            optional=self.optional,
            system_path=self.system_path,
        )


@dataclass(frozen=True)
class ArtifactMetadata:
    """Parsed dependency-declaration metadata of an artifact (POM equivalent).

    Attributes:
        packaging: Packaging of the module (``"jar"``, ``"war"`` ...).
        dependencies: Declared dependencies, in declaration order.
        repositories: Additional repositories the metadata names, searched
            when resolving this artifact's backing file.
    """

    packaging: str = "jar"
    dependencies: tuple[DependencyDeclaration, ...] = ()
    repositories: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Host capabilities
# ---------------------------------------------------------------------------

#: Returns the metadata of an artifact, or None when it has none.
#: Raises ``MetadataResolutionError`` when it cannot be loaded.
MetadataResolver = Callable[[ArtifactDescriptor], Optional[ArtifactMetadata]]

#: Locates the backing file of an artifact, searching the given repositories.
#: Raises ``FileResolutionError`` when the file cannot be obtained.
FileResolver = Callable[[ArtifactDescriptor, Iterable[str]], Path]
