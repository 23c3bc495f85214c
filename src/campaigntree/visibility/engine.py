"""Derived visibility for a scenario graph.

``render`` recomputes, from node statuses alone, which nodes and edges are
shown and how nodes are colored. It never mutates the graph, and every rule
reads the status snapshot taken on entry rather than any intermediate
result, so calling it twice on the same state gives identical maps.

Evaluation order:
1. Node visibility and base colors from each node's own status.
2. General edge rules, later rules overriding earlier ones.
3. Dependency recoloring from the visible edges (grey, then red).
4. The special-case table, in order.
5. Selection highlight on selected visible nodes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from campaigntree.observability.logging import get_logger
from campaigntree.visibility import rules
from campaigntree.visibility.special_cases import SPECIAL_CASES
from campaigntree.visibility.types import (
    ColorClass,
    EdgeAttributes,
    NodeAttributes,
    RenderAttributes,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from campaigntree.graph.graph import ScenarioGraph
    from campaigntree.visibility.special_cases import SpecialCase

log = get_logger(__name__)


def render(
    graph: ScenarioGraph,
    selected: Iterable[str] = (),
    *,
    special_cases: Sequence[SpecialCase] = SPECIAL_CASES,
) -> RenderAttributes:
    """Compute render attributes for every node and edge of *graph*.

    Args:
        graph: Graph whose current statuses drive derivation.
        selected: Ids of nodes selected in the UI. Unknown or invisible
            ids are ignored.
        special_cases: Override table, evaluated after the general rules.

    Returns:
        Attribute maps covering every node and every edge.
    """
    snapshot = graph.statuses()

    node_visible = {node.id: rules.node_visible(node, snapshot) for node in graph}
    colors = {node.id: rules.base_color(node, snapshot) for node in graph}

    edge_visible = dict.fromkeys((edge.id for edge in graph.edges), False)
    for rule in rules.EDGE_RULES:
        for edge, visible in rule(graph, snapshot):
            edge_visible[edge.id] = visible

    recolors = [
        (edge.target, rules.blocked_color(edge, snapshot, edge_visible)) for edge in graph.edges
    ]
    for color in (ColorClass.BLOCKED_GREY, ColorClass.BLOCKED_RED):
        for target, recolor in recolors:
            if recolor is color:
                colors[target] = color

    applied: list[str] = []
    for case in special_cases:
        if not case.guard(snapshot):
            continue
        for selector in case.edges:
            edge = graph.find_edge(selector.source, selector.type, selector.target)
            if edge is None:
                continue
            edge_visible[edge.id] = True
            colors[edge.target] = case.color
        applied.append(case.name)

    for node_id in selected:
        if node_visible.get(node_id):
            colors[node_id] = ColorClass.SELECTED

    nodes = {
        node.id: NodeAttributes(
            visible=node_visible[node.id],
            selectable=node_visible[node.id],
            color_class=colors[node.id],
            label=rules.node_label(node, snapshot),
        )
        for node in graph
    }
    edges = {edge_id: EdgeAttributes(visible=visible) for edge_id, visible in edge_visible.items()}

    log.debug(
        "graph_rendered",
        visible_nodes=sum(node_visible.values()),
        visible_edges=sum(edge_visible.values()),
        special_cases=applied,
    )
    return RenderAttributes(nodes=nodes, edges=edges)
