"""Scenario tree visualization.

Turns a graph plus its render attributes into DOT (Graphviz) or Mermaid
markup containing only what the visibility engine marks visible. Pure
formatting: no derivation happens here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from campaigntree.graph.models import EdgeType
from campaigntree.observability.logging import get_logger
from campaigntree.visibility.types import ColorClass

if TYPE_CHECKING:
    from campaigntree.graph.graph import ScenarioGraph
    from campaigntree.visibility.types import RenderAttributes

log = get_logger(__name__)

# Fill colors per color class
_FILL_COLORS: dict[ColorClass, str] = {
    ColorClass.NEUTRAL: "#000000",
    ColorClass.DONE: "#3F51B5",  # indigo
    ColorClass.OUTLINE: "#FFFFFF",
    ColorClass.SELECTED: "#FF4081",  # pink
    ColorClass.BLOCKED_GREY: "#C9C9C9",
    ColorClass.BLOCKED_RED: "#F44336",
}
_EDGE_COLORS: dict[EdgeType, str] = {
    EdgeType.REQUIRED_BY: "#69F0AE",  # green
    EdgeType.BLOCKS: "#F44336",  # red
    EdgeType.LINKS_TO: "#000000",
    EdgeType.UNLOCKS: "#000000",
}
_DARK_FILLS = {ColorClass.NEUTRAL, ColorClass.DONE, ColorClass.BLOCKED_RED}


@dataclass
class TreeNode:
    """A visible scenario in the visualization."""

    id: str
    label: str
    color_class: ColorClass


@dataclass
class TreeEdge:
    """A visible dependency edge in the visualization."""

    source: str
    target: str
    type: EdgeType


@dataclass
class TreeView:
    nodes: list[TreeNode]
    edges: list[TreeEdge]


def build_tree_view(graph: ScenarioGraph, attrs: RenderAttributes) -> TreeView:
    """Collect visible nodes and edges with their display classes.

    Args:
        graph: Graph the attributes were rendered from.
        attrs: Output of the visibility engine for *graph*.
    """
    nodes = [
        TreeNode(id=node_id, label=node_attrs.label, color_class=node_attrs.color_class)
        for node_id, node_attrs in attrs.nodes.items()
        if node_attrs.visible
    ]
    edges = [
        TreeEdge(source=edge.source, target=edge.target, type=edge.type)
        for edge in graph.edges
        if attrs.edges[edge.id].visible
    ]
    log.debug("tree_view_built", nodes=len(nodes), edges=len(edges))
    return TreeView(nodes=nodes, edges=edges)


def render_dot(view: TreeView) -> str:
    """Render a TreeView as DOT (Graphviz) markup."""
    lines = [
        "digraph campaign {",
        "  rankdir=TB;",
        '  node [fontname="Helvetica" fontsize=10 shape=circle style="filled"];',
        "  edge [arrowhead=normal];",
        "",
    ]

    for node in view.nodes:
        fill = _FILL_COLORS[node.color_class]
        font = "#FFFFFF" if node.color_class in _DARK_FILLS else "#000000"
        extra = ' color="#000000" penwidth="1"' if node.color_class is ColorClass.OUTLINE else ""
        lines.append(
            f'  "{_dot_escape(node.id)}" [label="{_dot_escape(node.label)}" '
            f'fillcolor="{fill}" fontcolor="{font}"{extra}];'
        )

    lines.append("")

    for edge in view.edges:
        attrs = [f'color="{_EDGE_COLORS[edge.type]}"']
        if edge.type is EdgeType.LINKS_TO:
            attrs.append('style="dashed"')
        lines.append(
            f'  "{_dot_escape(edge.source)}" -> "{_dot_escape(edge.target)}" [{" ".join(attrs)}];'
        )

    lines.append("}")
    return "\n".join(lines)


def render_mermaid(view: TreeView) -> str:
    """Render a TreeView as Mermaid markup."""
    lines = ["graph TD"]

    for node in view.nodes:
        safe_id = _mermaid_id(node.id)
        label = _mermaid_escape(node.label)
        lines.append(f'  {safe_id}(("{label}")):::{_mermaid_class(node.color_class)}')

    lines.append("")

    for edge in view.edges:
        arrow = "-.->" if edge.type is EdgeType.LINKS_TO else "-->"
        lines.append(f"  {_mermaid_id(edge.source)} {arrow} {_mermaid_id(edge.target)}")

    lines.append("")
    for color_class, fill in _FILL_COLORS.items():
        stroke = "#000000" if color_class is ColorClass.OUTLINE else fill
        lines.append(f"  classDef {_mermaid_class(color_class)} fill:{fill},stroke:{stroke}")

    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _dot_escape(text: str) -> str:
    """Escape special characters for quoted DOT ids and labels."""
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def _mermaid_id(node_id: str) -> str:
    """Mermaid ids can't start with a digit."""
    return "s" + node_id.replace(" ", "_").replace("-", "_")


def _mermaid_class(color_class: ColorClass) -> str:
    return color_class.value.replace("-", "_")


def _mermaid_escape(text: str) -> str:
    """Escape special characters for Mermaid labels."""
    return text.replace('"', "&quot;").replace("\n", " ")
