"""GraphViz output for dependency graphs."""

from artifactgraph.visualize.graphviz import (
    GraphVizWriter,
    render_png,
    to_dot,
    write_png,
)

__all__ = ["GraphVizWriter", "render_png", "to_dot", "write_png"]
