"""Rich output formatting helpers for the artifactgraph CLI.

Dependency trees are drawn from the root down. A module reached again
through a second path is printed once more but not expanded, marked with
``(*)``, the way ``mvn dependency:tree -Dverbose`` does.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from artifactgraph.core.graph.artifact import DEFAULT_SCOPE
from artifactgraph.core.graph.builder import BrokenDependency
from artifactgraph.core.graph.model import DependencyGraph, Edge, Node
from artifactgraph.delivery import ArtifactFile

_SCOPE_STYLES: dict[str, str] = {
    "compile": "",
    "runtime": "cyan",
    "provided": "yellow",
    "test": "dim",
    "system": "magenta",
}

console = Console()


def scope_style(scope: str) -> str:
    """Return the Rich style string for a dependency scope."""
    return _SCOPE_STYLES.get(scope, "white")


def _edge_label(edge: Edge) -> Text:
    label = Text(str(edge.dst))
    if edge.scope != DEFAULT_SCOPE:
        label.append(f" ({edge.scope})", style=scope_style(edge.scope))
    if edge.optional:
        label.append(" [optional]", style="dim")
    return label


def build_tree(graph: DependencyGraph) -> Tree:
    """Create a Rich tree of ``graph`` rooted at its root."""
    tree = Tree(Text(str(graph.root), style="bold green"))
    expanded: set[Node] = {graph.root}

    def add(branch: Tree, node: Node) -> None:
        for edge in graph.forward_edges(node):
            label = _edge_label(edge)
            if edge.dst in expanded:
                label.append(" (*)", style="dim")
                branch.add(label)
                continue
            expanded.add(edge.dst)
            add(branch.add(label), edge.dst)

    add(tree, graph.root)
    return tree


def print_tree(graph: DependencyGraph) -> None:
    """Print the dependency tree of ``graph``."""
    if graph.is_empty:
        console.print("[dim]The graph is empty.[/dim]")
        return
    console.print(build_tree(graph))
    edges = len(graph.edges())
    console.print(f"[bold]{len(graph)}[/bold] artifacts | {edges} dependencies")


def print_broken(broken: Sequence[BrokenDependency]) -> None:
    """Print dependencies that were left out because of broken metadata."""
    if not broken:
        return
    table = Table(title="Broken Metadata", show_header=True, header_style="bold")
    table.add_column("Artifact", style="bold red")
    table.add_column("Trail", style="dim")
    for item in broken:
        table.add_row(str(item.artifact), " -> ".join(item.trail))
    console.print(table)


def print_graph_summaries(graphs: Mapping[str, DependencyGraph]) -> None:
    """Print one row per named graph of a pipeline."""
    if not graphs:
        return
    table = Table(title="Named Graphs", show_header=True, header_style="bold")
    table.add_column("Graph", style="bold")
    table.add_column("Root")
    table.add_column("Artifacts", justify="right")
    table.add_column("Dependencies", justify="right")
    for name, graph in graphs.items():
        root = str(graph.root) if graph.root is not None else "-"
        table.add_row(name, root, str(len(graph)), str(len(graph.edges())))
    console.print(table)


def print_trail(lines: Sequence[str], edges: Sequence[Edge]) -> None:
    """Print a dependency trail, one hop per line."""
    console.print(Text(lines[0], style="bold green"))
    for depth, edge in enumerate(edges, start=1):
        console.print(Text("  " * depth + "-> ").append_text(_edge_label(edge)))


def graph_to_json(
    graph: DependencyGraph, broken: Sequence[BrokenDependency] = ()
) -> dict[str, Any]:
    """Convert a graph and its broken dependencies to a JSON-serializable dict."""
    data = graph.to_dict()
    data["broken"] = [
        {"artifact": str(b.artifact), "trail": list(b.trail), "reason": b.reason}
        for b in broken
    ]
    return data


def print_files(files: Sequence[ArtifactFile]) -> None:
    """Print one row per delivered artifact file."""
    if not files:
        console.print("[dim]No artifact files.[/dim]")
        return
    table = Table(title="Artifact Files", show_header=True, header_style="bold")
    table.add_column("Artifact", style="bold")
    table.add_column("File")
    for item in files:
        table.add_row(str(item.node), str(item.path))
    console.print(table)


def files_to_json(
    files: Sequence[ArtifactFile], copied: Sequence[Path] = ()
) -> dict[str, Any]:
    """Convert delivered files (and their copies, if any) to a JSON-serializable dict."""
    data: dict[str, Any] = {
        "files": [{"artifact": str(item.node), "file": str(item.path)} for item in files]
    }
    if copied:
        data["copied"] = [str(path) for path in copied]
    return data
