"""Declarative filter pipelines over dependency graphs.

Filters are composed into a tree and evaluated against an explicit
``FilterContext``; ``load_pipeline`` builds such trees from YAML.
"""

from artifactgraph.core.pipeline.config import (
    FILTER_KINDS,
    PipelineConfig,
    PipelineResult,
    load_pipeline,
    parse_filter,
    parse_pipeline,
    run_pipeline,
)
from artifactgraph.core.pipeline.context import FilterContext
from artifactgraph.core.pipeline.filters import (
    And,
    Artifacts,
    Dump,
    Exclude,
    FullGraph,
    GraphFilter,
    GraphRef,
    GroupId,
    ManifestEntry,
    Not,
    Or,
    Packaging,
    RemoveSpecific,
    RetentionSet,
    Scope,
    SubGraph,
    Subtract,
    VisitorFilter,
    Visualize,
)

__all__ = [
    "FILTER_KINDS",
    "PipelineConfig",
    "PipelineResult",
    "load_pipeline",
    "parse_filter",
    "parse_pipeline",
    "run_pipeline",
    "FilterContext",
    "And",
    "Artifacts",
    "Dump",
    "Exclude",
    "FullGraph",
    "GraphFilter",
    "GraphRef",
    "GroupId",
    "ManifestEntry",
    "Not",
    "Or",
    "Packaging",
    "RemoveSpecific",
    "RetentionSet",
    "Scope",
    "SubGraph",
    "Subtract",
    "VisitorFilter",
    "Visualize",
]
