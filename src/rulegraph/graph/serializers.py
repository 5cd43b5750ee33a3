"""
Dependency graph serializers: DOT, Mermaid, and JSON output formats.

Pure functions that convert a DependencyGraph to string output. Edges are
emitted in the graph's recorded order and parallel edges are kept.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Callable

from rulegraph.core.errors import RenderError

if TYPE_CHECKING:
    from rulegraph.graph.models import DependencyGraph


def serialize_dot(graph: DependencyGraph) -> str:
    """
    Serialize the graph as a Graphviz DOT digraph.

    Every node is a quoted ID, so metric names with colons (common in
    recording rule names) need no mangling.
    """
    lines: list[str] = [
        "digraph {",
        '  rankdir="LR";',
    ]

    for metric, rule in graph.iter_edges():
        lines.append(f"  {_dot_quote(metric)} -> {_dot_quote(rule)};")

    lines.append("}")

    return "\n".join(lines)


def serialize_mermaid(graph: DependencyGraph) -> str:
    """Serialize the graph as a Mermaid flowchart (left to right)."""
    lines: list[str] = ["graph LR"]
    node_ids: dict[str, str] = {}

    def node_id(name: str) -> str:
        if name not in node_ids:
            node_ids[name] = f"n{len(node_ids)}"
            lines.append(f'    {node_ids[name]}["{_mermaid_label(name)}"]')
        return node_ids[name]

    edge_lines: list[str] = []
    for metric, rule in graph.iter_edges():
        src = node_id(metric)
        tgt = node_id(rule)
        edge_lines.append(f"    {src} --> {tgt}")

    if edge_lines:
        lines.append("")
        lines.extend(edge_lines)

    return "\n".join(lines)


def serialize_json(graph: DependencyGraph) -> str:
    """Serialize edges, evaluation times, and skipped rules as JSON."""
    try:
        return json.dumps(graph.to_dict(), indent=2)
    except (TypeError, ValueError) as exc:
        raise RenderError(f"Cannot encode dependency graph as JSON: {exc}") from exc


SERIALIZERS: dict[str, Callable[["DependencyGraph"], str]] = {
    "dot": serialize_dot,
    "mermaid": serialize_mermaid,
    "json": serialize_json,
}


def _dot_quote(name: str) -> str:
    """Quote a name as a DOT string ID."""
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _mermaid_label(name: str) -> str:
    """Escape a name for use inside a quoted Mermaid label."""
    return name.replace('"', "#quot;")
