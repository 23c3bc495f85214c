"""Campaign-specific visibility overrides.

Some dependencies in the campaign dataset can't be expressed by the general
rules: whether one scenario blocks another may hinge on the status of an
unrelated third scenario. Each entry here pairs a guard over named scenario
statuses with the edges it forces visible and the color it gives their
targets.

The table is literal campaign data. Entries are evaluated in order after
the general rules, each against the same status snapshot, and never read
each other's output.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import NamedTuple

from campaigntree.graph.models import EdgeType, NodeStatus
from campaigntree.visibility.types import ColorClass

Snapshot = Mapping[str, NodeStatus]

_OPEN = (NodeStatus.ATTEMPTED, NodeStatus.INCOMPLETE)


class EdgeSelector(NamedTuple):
    source: str
    type: EdgeType
    target: str


@dataclass(frozen=True)
class SpecialCase:
    """One guarded override.

    Attributes:
        name: Short identifier, used in logs.
        guard: Predicate over the status snapshot. Scenarios missing from
            the graph have no status and are never complete.
        edges: Edges forced visible when the guard holds. Selectors that
            match no edge in the graph are skipped.
        color: Color given to each selected edge's target.
    """

    name: str
    guard: Callable[[Snapshot], bool]
    edges: tuple[EdgeSelector, ...]
    color: ColorClass


def _complete(snapshot: Snapshot, node_id: str) -> bool:
    return snapshot.get(node_id) is NodeStatus.COMPLETE


def _open(snapshot: Snapshot, node_id: str) -> bool:
    return snapshot.get(node_id) in _OPEN


SPECIAL_CASES: tuple[SpecialCase, ...] = (
    SpecialCase(
        name="35-blocks-27",
        guard=lambda s: not _complete(s, "21") and _complete(s, "35") and _open(s, "27"),
        edges=(EdgeSelector("35", EdgeType.BLOCKS, "27"),),
        color=ColorClass.BLOCKED_RED,
    ),
    SpecialCase(
        name="35-blocks-31",
        guard=lambda s: not _complete(s, "21") and _complete(s, "35") and _open(s, "31"),
        edges=(EdgeSelector("35", EdgeType.BLOCKS, "31"),),
        color=ColorClass.BLOCKED_RED,
    ),
    SpecialCase(
        name="34-blocks-33",
        guard=lambda s: (
            (not _complete(s, "24") or _complete(s, "42"))
            and _complete(s, "34")
            and _open(s, "33")
        ),
        edges=(EdgeSelector("34", EdgeType.BLOCKS, "33"),),
        color=ColorClass.BLOCKED_RED,
    ),
    SpecialCase(
        name="42-blocks-33",
        guard=lambda s: not _complete(s, "25") and _complete(s, "42") and _open(s, "33"),
        edges=(EdgeSelector("42", EdgeType.BLOCKS, "33"),),
        color=ColorClass.BLOCKED_RED,
    ),
    SpecialCase(
        name="21-requiredby-31",
        guard=lambda s: _complete(s, "35") and not _complete(s, "21") and _open(s, "31"),
        edges=(EdgeSelector("21", EdgeType.REQUIRED_BY, "31"),),
        color=ColorClass.BLOCKED_GREY,
    ),
    SpecialCase(
        name="23-43-requiredby-26",
        guard=lambda s: not _complete(s, "23") and not _complete(s, "43") and _open(s, "26"),
        edges=(
            EdgeSelector("23", EdgeType.REQUIRED_BY, "26"),
            EdgeSelector("43", EdgeType.REQUIRED_BY, "26"),
        ),
        color=ColorClass.BLOCKED_GREY,
    ),
)
