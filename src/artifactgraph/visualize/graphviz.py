"""GraphViz (DOT) rendering of dependency graphs.

``GraphVizWriter`` is itself a graph visitor: running it over a graph with
``accept`` writes one DOT statement per node and per edge it is offered.

Rendering conventions:

- Nodes are labelled ``group:name``.
- Edges carry their scope as a label unless it is ``compile`` (the common
  case), and are dotted when optional.
- Edges within one group get a heavier weight so related modules cluster.
- Nodes and edges of a colored sub-graph are drawn in that color.

PNG output pipes the DOT text through the ``dot`` executable. A machine
without GraphViz installed gets a ``VisualizationError``.
"""

from __future__ import annotations

import io
import logging
import shutil
import subprocess
from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

from artifactgraph.core.filters.algebra import accept
from artifactgraph.core.graph.artifact import DEFAULT_SCOPE
from artifactgraph.core.graph.model import DependencyGraph, Edge, Node
from artifactgraph.exceptions import VisualizationError

logger = logging.getLogger(__name__)

DOT_EXECUTABLE = "dot"


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


class GraphVizWriter:
    """Writes a DOT ``digraph`` to ``out`` as nodes and edges are visited.

    Call ``close()`` once the graph has been visited to terminate the
    document. The writer never rejects anything, so the visited graph is
    rendered in full.
    """

    def __init__(self, out: TextIO) -> None:
        self._out = out
        self._colors: dict[Node | Edge, str] = {}
        self._ids: dict[Node, str] = {}
        self._closed = False
        out.write("digraph G {\n")

    def add_colored_subgraph(self, graph: DependencyGraph, color: str) -> None:
        """Paint every node and edge of ``graph`` in ``color``."""
        painter = _Painter(self._colors, color)
        accept(graph, painter)

    def close(self) -> None:
        if not self._closed:
            self._out.write("}\n")
            self._closed = True

    def visit_node(self, node: Node) -> bool:
        attrs = {
            "label": f"{node.group}:{node.name}",
            "color": self._colors.get(node),
        }
        self._out.write(f"{self._id(node)} {self._attributes(attrs)};\n")
        return True

    def visit_edge(self, edge: Edge) -> bool:
        attrs: dict[str, str | None] = {}
        if edge.scope != DEFAULT_SCOPE:
            attrs["label"] = edge.scope
        if edge.optional:
            attrs["style"] = "dotted"
        attrs["color"] = self._colors.get(edge)
        if edge.src.group == edge.dst.group:
            attrs["weight"] = "10"
        self._out.write(
            f"{self._id(edge.src)} -> {self._id(edge.dst)} {self._attributes(attrs)};\n"
        )
        return True

    def _id(self, node: Node) -> str:
        if node not in self._ids:
            self._ids[node] = f"n{len(self._ids)}"
        return self._ids[node]

    @staticmethod
    def _attributes(attrs: dict[str, str | None]) -> str:
        body = ",".join(f"{k}={_quote(v)}" for k, v in attrs.items() if v is not None)
        return f"[{body}]"


class _Painter:
    def __init__(self, colors: dict[Node | Edge, str], color: str) -> None:
        self._colors = colors
        self._color = color

    def visit_node(self, node: Node) -> bool:
        self._colors[node] = self._color
        return True

    def visit_edge(self, edge: Edge) -> bool:
        self._colors[edge] = self._color
        return True


def to_dot(
    graph: DependencyGraph,
    subgraphs: Iterable[tuple[DependencyGraph, str]] = (),
) -> str:
    """Render ``graph`` as DOT source.

    Args:
        graph: The graph to draw.
        subgraphs: ``(graph, color)`` pairs drawn in a different color.

    Returns:
        The DOT document text.
    """
    buffer = io.StringIO()
    writer = GraphVizWriter(buffer)
    for subgraph, color in subgraphs:
        writer.add_colored_subgraph(subgraph, color)
    accept(graph, writer)
    writer.close()
    return buffer.getvalue()


def render_png(dot_source: str, output: Path) -> Path:
    """Render DOT source into a PNG file with the ``dot`` executable.

    Raises:
        VisualizationError: If GraphViz is not installed or fails.
    """
    executable = shutil.which(DOT_EXECUTABLE)
    if executable is None:
        raise VisualizationError(
            f"Failed to create {output}: '{DOT_EXECUTABLE}' executable not found"
        )
    try:
        with open(output, "wb") as fh:
            proc = subprocess.run(
                [executable, "-Tpng"],
                input=dot_source.encode("utf-8"),
                stdout=fh,
                stderr=subprocess.PIPE,
                check=False,
            )
    except OSError as exc:
        raise VisualizationError(f"Failed to create {output}: {exc}") from exc
    if proc.returncode != 0:
        stderr = proc.stderr.decode("utf-8", errors="replace").strip()
        raise VisualizationError(
            f"Failed to create {output}: dot exited with {proc.returncode}: {stderr}"
        )
    logger.debug("Wrote %s", output)
    return output


def write_png(
    graph: DependencyGraph,
    output: Path,
    subgraphs: Iterable[tuple[DependencyGraph, str]] = (),
) -> Path:
    """Shortcut for ``render_png(to_dot(graph, subgraphs), output)``."""
    return render_png(to_dot(graph, subgraphs), output)
