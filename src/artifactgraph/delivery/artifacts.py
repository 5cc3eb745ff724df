"""Turn a filtered graph into the artifact files it stands for.

A reduced graph is usually consumed as a list of files: copied into a
distribution directory, or joined into a class path. Files are resolved
concurrently through ``resolve_artifact_files``; a failure names the trail
from the root to the artifact that could not be resolved.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from artifactgraph.core.graph.artifact import ArtifactDescriptor, FileResolver
from artifactgraph.core.graph.files import resolve_artifact_files
from artifactgraph.core.graph.model import DependencyGraph, Node
from artifactgraph.exceptions import ConfigurationError, FileResolutionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactFile:
    """A graph node and the file backing it.

    Attributes:
        node: The resolved module.
        path: Its backing file.
    """

    node: Node
    path: Path


def _classifier_resolver(
    resolve_file: FileResolver, classifier: str
) -> Callable[[Node], Path | None]:
    def resolve(node: Node) -> Path | None:
        if node.artifact.is_system:
            return node.artifact_file
        variant = ArtifactDescriptor(node.group, node.name, node.version, node.type, classifier)
        repositories = node.metadata.repositories if node.metadata else ()
        return resolve_file(variant, repositories)

    return resolve


def collect_files(
    graph: DependencyGraph,
    resolve_file: FileResolver | None = None,
    classifier: str | None = None,
    max_workers: int = 4,
) -> list[ArtifactFile]:
    """Resolve the backing file of every node of ``graph``.

    Args:
        graph: The (filtered) graph to deliver.
        resolve_file: Host capability used for ``classifier`` variants.
        classifier: Resolve this classifier of each artifact (``sources``,
            ``javadoc`` ...) instead of the file the graph refers to.
        max_workers: Thread pool size.

    Returns:
        One entry per node with a file, in ``graph.all_nodes()`` order.
        System-scoped artifacts without a declared path are skipped.

    Raises:
        ConfigurationError: If ``classifier`` is given without ``resolve_file``.
        FileResolutionError: If a file cannot be obtained.
    """
    resolver = None
    if classifier is not None:
        if resolve_file is None:
            raise ConfigurationError(
                f"Resolving {classifier!r} files requires a file resolver"
            )
        resolver = _classifier_resolver(resolve_file, classifier)

    files = resolve_artifact_files(graph, max_workers, resolver)
    return [ArtifactFile(node, path) for node, path in files.items() if path is not None]


def strip_version(file_name: str, version: str) -> str:
    """Drop ``-<version>`` from ``name-<version>[-classifier].ext``.

    Names that do not contain the version are returned unchanged.
    """
    index = file_name.rfind(version)
    if index <= 0:
        return file_name
    return file_name[: index - 1] + file_name[index + len(version):]


def copy_files(
    files: Sequence[ArtifactFile], todir: Path | str, strip_versions: bool = False
) -> list[Path]:
    """Copy ``files`` into ``todir``, creating it if needed.

    A destination that is not older than its source is left alone.

    Returns:
        The destination paths, in the order of ``files``.

    Raises:
        FileResolutionError: If a file cannot be copied.
    """
    target_dir = Path(todir)
    target_dir.mkdir(parents=True, exist_ok=True)
    copied: list[Path] = []
    for item in files:
        name = item.path.name
        if strip_versions:
            name = strip_version(name, item.node.version)
        target = target_dir / name
        if target.exists() and item.path.exists() and (
            target.stat().st_mtime >= item.path.stat().st_mtime
        ):
            logger.debug("%s is up to date", target)
        else:
            try:
                shutil.copy2(item.path, target)
            except OSError as exc:
                raise FileResolutionError(
                    f"Cannot copy {item.path} to {target}: {exc}"
                ) from exc
            logger.debug("Copied %s to %s", item.path, target)
        copied.append(target)
    if not copied:
        logger.info("Nothing to copy")
    else:
        logger.info("Delivered %d file(s) to %s", len(copied), target_dir)
    return copied


def class_path(files: Sequence[ArtifactFile]) -> str:
    """Join the files into a platform class path string."""
    return os.pathsep.join(str(item.path) for item in files)
