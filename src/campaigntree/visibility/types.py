"""Render attribute types produced by the visibility engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


class ColorClass(StrEnum):
    """Color class of a rendered node. Renderers map these to styles."""

    NEUTRAL = "neutral"
    DONE = "done"
    OUTLINE = "outline"
    SELECTED = "selected"
    BLOCKED_GREY = "blocked-grey"
    BLOCKED_RED = "blocked-red"


@dataclass(frozen=True)
class NodeAttributes:
    """Derived display state of one node.

    Attributes:
        visible: Whether the node is drawn.
        selectable: Whether the user may select it (same as ``visible``).
        color_class: Fill color class.
        label: Text shown on the node.
    """

    visible: bool
    selectable: bool
    color_class: ColorClass
    label: str


@dataclass(frozen=True)
class EdgeAttributes:
    visible: bool


@dataclass(frozen=True)
class RenderAttributes:
    """Complete attribute map for one graph state.

    Attributes:
        nodes: Node id -> attributes, for every node.
        edges: Edge id -> attributes, for every edge.
    """

    nodes: Mapping[str, NodeAttributes]
    edges: Mapping[str, EdgeAttributes]

    def visible_node_ids(self) -> list[str]:
        return [nid for nid, attrs in self.nodes.items() if attrs.visible]

    def visible_edge_ids(self) -> list[str]:
        return [eid for eid, attrs in self.edges.items() if attrs.visible]
