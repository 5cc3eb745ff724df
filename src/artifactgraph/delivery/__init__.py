"""Delivery of a filtered graph's artifact files (copies and class paths)."""

from artifactgraph.delivery.artifacts import (
    ArtifactFile,
    class_path,
    collect_files,
    copy_files,
    strip_version,
)

__all__ = ["ArtifactFile", "class_path", "collect_files", "copy_files", "strip_version"]
