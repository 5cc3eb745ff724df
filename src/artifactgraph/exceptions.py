"""artifactgraph exception hierarchy.

All public exceptions inherit from ArtifactGraphError, giving callers a single
base class to catch when they want to handle any artifactgraph-specific
failure without swallowing unrelated errors.
"""

from __future__ import annotations

from collections.abc import Sequence


class ArtifactGraphError(Exception):
    """Base exception for all artifactgraph errors."""


class MetadataResolutionError(ArtifactGraphError):
    """Raised when the dependency metadata of an artifact cannot be loaded.

    Carries the dependency trail (root -> ... -> failing artifact) so the
    offending declaration can be located in the dependency tree.

    Attributes:
        artifact: Coordinate of the artifact whose metadata failed to load.
        trail: Coordinates from the root down to ``artifact``, inclusive.
    """

    def __init__(
        self,
        message: str,
        *,
        artifact: str = "",
        trail: Sequence[str] = (),
    ) -> None:
        self.artifact = artifact
        self.trail = tuple(trail)
        if self.trail:
            message = f"{message} trail={' -> '.join(self.trail)}"
        super().__init__(message)


class FileResolutionError(ArtifactGraphError):
    """Raised when the backing file of an artifact cannot be obtained.

    Surfaced at the point of first access to ``Node.artifact_file``.
    """


class InvariantViolation(ArtifactGraphError):
    """Raised when a graph invariant does not hold.

    Covers graphs containing nodes unreachable from the root and trail
    computations that lose their way before reaching the root. These
    indicate a bug in graph construction or filtering.
    """


class ConfigurationError(ArtifactGraphError):
    """Raised for invalid filter configuration.

    Covers filters given the wrong number of child filters, unknown filter
    kinds, and malformed pipeline documents.
    """


class ArtifactNotInGraphError(ArtifactGraphError, KeyError):
    """Raised when an artifact referenced by a filter is not in the graph."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class FilterError(ArtifactGraphError):
    """Raised when applying a filter to a node or edge fails.

    Aborts that filter's processing only; input graphs are never modified.
    """


class RepositoryError(ArtifactGraphError):
    """Raised when a repository description cannot be read or parsed."""


class VisualizationError(ArtifactGraphError):
    """Raised when a dependency diagram cannot be rendered."""
