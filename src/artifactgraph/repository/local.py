"""Backing files from a local repository in the Maven 2 layout.

An artifact ``org.example:core:1.0`` with classifier ``tests`` lives at::

    <base>/org/example/core/1.0/core-1.0-tests.jar

The file extension follows from the artifact type (``test-jar`` and
``maven-plugin`` are jars, for instance).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from artifactgraph.core.graph.artifact import ArtifactDescriptor
from artifactgraph.exceptions import FileResolutionError

logger = logging.getLogger(__name__)

TYPE_EXTENSIONS: dict[str, str] = {
    "jar": "jar",
    "bundle": "jar",
    "ejb": "jar",
    "ejb-client": "jar",
    "java-source": "jar",
    "javadoc": "jar",
    "maven-plugin": "jar",
    "test-jar": "jar",
    "war": "war",
    "ear": "ear",
    "rar": "rar",
    "pom": "pom",
}


def extension_of(artifact_type: str) -> str:
    """File extension for an artifact type; unknown types are their own extension."""
    return TYPE_EXTENSIONS.get(artifact_type, artifact_type)


def layout_path(artifact: ArtifactDescriptor) -> Path:
    """Path of ``artifact`` relative to a Maven 2 repository root."""
    file_name = f"{artifact.name}-{artifact.version}"
    if artifact.classifier:
        file_name += f"-{artifact.classifier}"
    file_name += f".{extension_of(artifact.type)}"
    return Path(*artifact.group.split("."), artifact.name, artifact.version, file_name)


class LocalRepository:
    """A directory holding artifacts in the Maven 2 layout.

    Args:
        base_dir: Repository root, e.g. ``~/.m2/repository``.
    """

    def __init__(self, base_dir: Path | str) -> None:
        self.base_dir = Path(base_dir).expanduser()

    def path_of(self, artifact: ArtifactDescriptor) -> Path:
        return self.base_dir / layout_path(artifact)

    def resolve_file(
        self, artifact: ArtifactDescriptor, repositories: Iterable[str] = ()
    ) -> Path:
        """Locate the backing file of ``artifact``.

        The base directory is searched first, then every repository named by
        the artifact's metadata that is a local directory (``file:`` URLs or
        plain paths). Remote repositories are skipped.

        Raises:
            FileResolutionError: If no searched location has the file.
        """
        searched = [self.base_dir]
        for repo in repositories:
            if repo.startswith("file://"):
                searched.append(Path(repo[len("file://"):]))
            elif "://" not in repo:
                searched.append(Path(repo))

        relative = layout_path(artifact)
        for base in searched:
            candidate = base / relative
            if candidate.is_file():
                return candidate
        logger.debug("%s not found in %s", relative, [str(p) for p in searched])
        raise FileResolutionError(
            f"Failed to resolve {artifact.coordinate}: {relative} not found in {self.base_dir}"
        )

    def __repr__(self) -> str:
        return f"LocalRepository({str(self.base_dir)!r})"
