"""General visibility and color rules.

Every rule is a pure function of the graph topology and a status snapshot
taken before evaluation starts. Edge rules yield ``(edge, visible)``
assignments; the engine applies them in ``EDGE_RULES`` order, so a later
rule overrides an earlier one for the same edge. Edges no rule touches stay
hidden.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from campaigntree.graph.models import EdgeType, NodeStatus
from campaigntree.visibility.types import ColorClass

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping

    from campaigntree.graph.graph import ScenarioGraph
    from campaigntree.graph.models import ScenarioEdge, ScenarioNode

    Snapshot = Mapping[str, NodeStatus]
    EdgeRule = Callable[[ScenarioGraph, Snapshot], Iterator[tuple[ScenarioEdge, bool]]]

# Targets whose dependency edges are drawn only by special cases
REQUIRED_BY_EXCEPTIONS = frozenset({"31", "26"})
BLOCKS_EXCEPTIONS = frozenset({"27", "31", "33"})

_UNFINISHED = frozenset({NodeStatus.INCOMPLETE, NodeStatus.ATTEMPTED, NodeStatus.HIDDEN})


def node_visible(node: ScenarioNode, snapshot: Snapshot) -> bool:
    """A node is shown unless it is hidden. Side quests are always shown."""
    return snapshot[node.id] is not NodeStatus.HIDDEN or node.data.side


def node_label(node: ScenarioNode, snapshot: Snapshot) -> str:
    """Hidden side quests show their number only."""
    if node.data.side and snapshot[node.id] is NodeStatus.HIDDEN:
        return f"#{node.id}"
    return node.data.name


def _with_status(snapshot: Snapshot, *statuses: NodeStatus) -> Iterator[str]:
    for node_id, status in snapshot.items():
        if status in statuses:
            yield node_id


def hide_edges_from_unfinished(
    graph: ScenarioGraph, snapshot: Snapshot
) -> Iterator[tuple[ScenarioEdge, bool]]:
    for node_id in _with_status(snapshot, *_UNFINISHED):
        for edge in graph.outgoing(node_id):
            yield edge, False


def show_unlocks_from_complete(
    graph: ScenarioGraph, snapshot: Snapshot
) -> Iterator[tuple[ScenarioEdge, bool]]:
    for node_id in _with_status(snapshot, NodeStatus.COMPLETE):
        for edge in graph.outgoing(node_id, EdgeType.UNLOCKS):
            yield edge, True


def show_required_by_from_visible(
    graph: ScenarioGraph, snapshot: Snapshot
) -> Iterator[tuple[ScenarioEdge, bool]]:
    for node in graph:
        if not node_visible(node, snapshot):
            continue
        for edge in graph.outgoing(node.id, EdgeType.REQUIRED_BY):
            if edge.target not in REQUIRED_BY_EXCEPTIONS:
                yield edge, True


def hide_required_by_from_complete(
    graph: ScenarioGraph, snapshot: Snapshot
) -> Iterator[tuple[ScenarioEdge, bool]]:
    for node_id in _with_status(snapshot, NodeStatus.COMPLETE):
        for edge in graph.outgoing(node_id, EdgeType.REQUIRED_BY):
            yield edge, False


def show_blocks_from_complete(
    graph: ScenarioGraph, snapshot: Snapshot
) -> Iterator[tuple[ScenarioEdge, bool]]:
    for node_id in _with_status(snapshot, NodeStatus.COMPLETE):
        for edge in graph.outgoing(node_id, EdgeType.BLOCKS):
            if edge.target not in BLOCKS_EXCEPTIONS:
                yield edge, True


def hide_blocks_into_complete(
    graph: ScenarioGraph, snapshot: Snapshot
) -> Iterator[tuple[ScenarioEdge, bool]]:
    for node_id in _with_status(snapshot, NodeStatus.COMPLETE):
        for edge in graph.incoming(node_id, EdgeType.BLOCKS):
            yield edge, False


def hide_edges_into_hidden(
    graph: ScenarioGraph, snapshot: Snapshot
) -> Iterator[tuple[ScenarioEdge, bool]]:
    for node_id in _with_status(snapshot, NodeStatus.HIDDEN):
        for edge in graph.incoming(node_id):
            yield edge, False


EDGE_RULES: tuple[EdgeRule, ...] = (
    hide_edges_from_unfinished,
    show_unlocks_from_complete,
    show_required_by_from_visible,
    hide_required_by_from_complete,
    show_blocks_from_complete,
    hide_blocks_into_complete,
    hide_edges_into_hidden,
)


def base_color(node: ScenarioNode, snapshot: Snapshot) -> ColorClass:
    """Color from the node's own status, before dependency recoloring."""
    status = snapshot[node.id]
    if status is NodeStatus.COMPLETE:
        return ColorClass.DONE
    if status is NodeStatus.ATTEMPTED:
        return ColorClass.OUTLINE
    return ColorClass.NEUTRAL


def blocked_color(
    edge: ScenarioEdge, snapshot: Snapshot, edge_visible: Mapping[str, bool]
) -> ColorClass | None:
    """Recolor for the target of *edge*, if the edge marks it as blocked.

    A visible ``blocks`` edge from a complete scenario makes its target red.
    A visible ``requiredby`` edge from an unfinished scenario makes its
    (unfinished) target grey.
    """
    if not edge_visible[edge.id]:
        return None
    source_complete = snapshot[edge.source] is NodeStatus.COMPLETE
    target_complete = snapshot[edge.target] is NodeStatus.COMPLETE
    if edge.type is EdgeType.BLOCKS:
        if source_complete and edge.target not in BLOCKS_EXCEPTIONS:
            return ColorClass.BLOCKED_RED
    elif edge.type is EdgeType.REQUIRED_BY:
        if (
            not source_complete
            and not target_complete
            and edge.target not in REQUIRED_BY_EXCEPTIONS
        ):
            return ColorClass.BLOCKED_GREY
    return None
