"""A metadata repository described by a YAML document.

The description lists every known artifact with its packaging and declared
dependencies, and optionally its backing file::

    local_repository: m2            # optional, relative to this document
    artifacts:
      - coordinate: org.example:app:1.0:war
        packaging: war
        file: build/app-1.0.war     # optional, relative to this document
        dependencies:
          - org.example:util:1.0
          - coordinate: org.example:client:1.0
            scope: runtime
            optional: false
            exclusions: [commons-logging:commons-logging]
          - coordinate: com.sun:tools:1.6
            scope: system
            system_path: /opt/jdk/lib/tools.jar

Metadata is keyed by ``(group, name, version)``: classified artifacts share
the metadata of their module, as POMs do.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Optional

import yaml

from artifactgraph.core.graph.artifact import (
    ArtifactDescriptor,
    ArtifactMetadata,
    DependencyDeclaration,
    Exclusion,
)
from artifactgraph.exceptions import (
    FileResolutionError,
    MetadataResolutionError,
    RepositoryError,
)
from artifactgraph.repository.local import LocalRepository

logger = logging.getLogger(__name__)

ModuleKey = tuple[str, str, str]
FileKey = tuple[str, str, str, Optional[str]]

_DEPENDENCY_KEYS = frozenset({"coordinate", "scope", "optional", "exclusions", "system_path"})
_ARTIFACT_KEYS = frozenset({"coordinate", "packaging", "file", "repositories", "dependencies"})


def _parse_dependency(entry: Any) -> DependencyDeclaration:
    if isinstance(entry, str):
        entry = {"coordinate": entry}
    if not isinstance(entry, Mapping) or "coordinate" not in entry:
        raise RepositoryError(f"A dependency needs a coordinate: {entry!r}")
    unknown = set(entry) - _DEPENDENCY_KEYS
    if unknown:
        raise RepositoryError(f"Unknown dependency key(s): {sorted(unknown)}")
    try:
        target = ArtifactDescriptor.parse(str(entry["coordinate"]))
        exclusions = frozenset(Exclusion.parse(str(e)) for e in entry.get("exclusions") or ())
    except ValueError as exc:
        raise RepositoryError(str(exc)) from exc
    return DependencyDeclaration(
        group=target.group,
        name=target.name,
        version=target.version,
        type=target.type,
        classifier=target.classifier,
        scope=entry.get("scope"),
        optional=bool(entry.get("optional", False)),
        exclusions=exclusions,
        system_path=entry.get("system_path"),
    )


class StaticRepository:
    """Metadata and files for a fixed set of artifacts.

    Args:
        metadata: Metadata per ``(group, name, version)``.
        files: Backing files per ``(group, name, version, classifier)``.
        fallback: Repository consulted for files not listed in ``files``.
    """

    def __init__(
        self,
        metadata: Mapping[ModuleKey, ArtifactMetadata],
        files: Mapping[FileKey, Path] | None = None,
        fallback: LocalRepository | None = None,
    ) -> None:
        self._metadata = dict(metadata)
        self._files = dict(files or {})
        self.fallback = fallback

    @classmethod
    def from_mapping(
        cls,
        document: Mapping[str, Any],
        base_dir: Path | str = ".",
        fallback: LocalRepository | None = None,
    ) -> StaticRepository:
        """Build a repository from a parsed description.

        Relative ``file`` and ``local_repository`` paths are resolved against
        ``base_dir``. An explicit ``fallback`` wins over ``local_repository``.

        Raises:
            RepositoryError: If the description is malformed or declares an
                artifact twice.
        """
        if not isinstance(document, Mapping):
            raise RepositoryError("A repository description must be a mapping")
        base = Path(base_dir)
        metadata: dict[ModuleKey, ArtifactMetadata] = {}
        files: dict[FileKey, Path] = {}

        for entry in document.get("artifacts") or ():
            if not isinstance(entry, Mapping) or "coordinate" not in entry:
                raise RepositoryError(f"An artifact needs a coordinate: {entry!r}")
            unknown = set(entry) - _ARTIFACT_KEYS
            if unknown:
                raise RepositoryError(f"Unknown artifact key(s): {sorted(unknown)}")
            try:
                artifact = ArtifactDescriptor.parse(str(entry["coordinate"]))
            except ValueError as exc:
                raise RepositoryError(str(exc)) from exc

            key = (artifact.group, artifact.name, artifact.version)
            if key in metadata:
                raise RepositoryError(f"Artifact {':'.join(key)} is declared twice")
            metadata[key] = ArtifactMetadata(
                packaging=str(entry.get("packaging", artifact.type)),
                dependencies=tuple(
                    _parse_dependency(d) for d in entry.get("dependencies") or ()
                ),
                repositories=tuple(str(r) for r in entry.get("repositories") or ()),
            )
            if entry.get("file"):
                files[key + (artifact.classifier,)] = base / str(entry["file"])

        if fallback is None and document.get("local_repository"):
            fallback = LocalRepository(base / str(document["local_repository"]))
        return cls(metadata, files, fallback)

    @classmethod
    def from_file(
        cls, path: Path | str, fallback: LocalRepository | None = None
    ) -> StaticRepository:
        """Load a repository description from a YAML file.

        Raises:
            RepositoryError: If the file cannot be read or parsed.
        """
        path = Path(path)
        try:
            document = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise RepositoryError(f"Cannot read repository {path}: {exc}") from exc
        repository = cls.from_mapping(document or {}, path.parent, fallback)
        logger.debug("Loaded %d artifact(s) from %s", len(repository), path)
        return repository

    # -- Host capabilities -------------------------------------------------

    def resolve_metadata(self, artifact: ArtifactDescriptor) -> ArtifactMetadata:
        """Return the declared metadata of ``artifact``.

        Raises:
            MetadataResolutionError: If the artifact is not declared.
        """
        try:
            return self._metadata[(artifact.group, artifact.name, artifact.version)]
        except KeyError:
            raise MetadataResolutionError(
                f"No metadata for {artifact.coordinate}", artifact=artifact.coordinate
            ) from None

    def resolve_file(
        self, artifact: ArtifactDescriptor, repositories: Iterable[str] = ()
    ) -> Path:
        """Return the backing file of ``artifact``.

        Raises:
            FileResolutionError: If the file is neither declared (and present)
                nor found in the fallback repository.
        """
        declared = self._files.get(
            (artifact.group, artifact.name, artifact.version, artifact.classifier)
        )
        if declared is not None:
            if not declared.is_file():
                raise FileResolutionError(
                    f"Failed to resolve {artifact.coordinate}: {declared} does not exist"
                )
            return declared
        if self.fallback is not None:
            return self.fallback.resolve_file(artifact, repositories)
        raise FileResolutionError(f"No file declared for {artifact.coordinate}")

    def __contains__(self, artifact: object) -> bool:
        if not isinstance(artifact, ArtifactDescriptor):
            return False
        return (artifact.group, artifact.name, artifact.version) in self._metadata

    def __len__(self) -> int:
        return len(self._metadata)
