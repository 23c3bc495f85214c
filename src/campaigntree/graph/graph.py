"""In-memory scenario graph.

The graph holds the campaign topology (nodes and typed, directed edges) and
the mutable per-node progress state (status, notes, position). Topology is
fixed once loaded: edges are immutable, and the adjacency index built at
construction is shared between a graph and its clones.

The graph enforces referential integrity at construction:
- Node ids are unique (NodeExistsError otherwise)
- Edges reference only existing nodes (EdgeEndpointError otherwise)
- Lookups of unknown ids raise NodeNotFoundError
"""

from __future__ import annotations

import json
from collections import defaultdict
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Literal

from pydantic import ValidationError

from campaigntree.graph.errors import (
    BaselineLoadError,
    EdgeEndpointError,
    NodeExistsError,
    NodeNotFoundError,
)
from campaigntree.graph.models import (
    EdgeType,
    NodeStatus,
    ScenarioData,
    ScenarioEdge,
    ScenarioNode,
)
from campaigntree.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping
    from pathlib import Path

log = get_logger(__name__)

Direction = Literal["out", "in"]
_IndexKey = tuple[str, Direction, EdgeType | None]


class ScenarioGraph:
    """Scenario nodes, edges, and per-node progress state.

    Attributes:
        _nodes: Node id -> node, in dataset order.
        _edges: Immutable edge list, in dataset order.
        _index: Adjacency index keyed by (node id, direction, edge type).
            A ``None`` type key holds all edges in that direction.
    """

    def __init__(
        self,
        nodes: Iterable[ScenarioNode],
        edges: Iterable[ScenarioEdge] = (),
        *,
        _index: dict[_IndexKey, tuple[ScenarioEdge, ...]] | None = None,
    ) -> None:
        self._nodes: dict[str, ScenarioNode] = {}
        for node in nodes:
            if node.id in self._nodes:
                raise NodeExistsError(node.id)
            self._nodes[node.id] = node
        self._edges: tuple[ScenarioEdge, ...] = tuple(edges)
        self._index = _index if _index is not None else self._build_index()

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_data(cls, data: ScenarioData | Mapping[str, Any]) -> ScenarioGraph:
        """Build a graph from a dataset model or its raw dict form.

        Raises:
            pydantic.ValidationError: If a raw dict doesn't match the dataset shape.
            NodeExistsError: If a node id is declared twice.
            EdgeEndpointError: If an edge references an unknown node.
        """
        if not isinstance(data, ScenarioData):
            data = ScenarioData.model_validate(data)
        return cls(data.nodes, data.edges or ())

    def _build_index(self) -> dict[_IndexKey, tuple[ScenarioEdge, ...]]:
        index: dict[_IndexKey, list[ScenarioEdge]] = defaultdict(list)
        for edge in self._edges:
            source_ok = edge.source in self._nodes
            target_ok = edge.target in self._nodes
            if not (source_ok and target_ok):
                if not source_ok and not target_ok:
                    missing = "both"
                elif not source_ok:
                    missing = "source"
                else:
                    missing = "target"
                raise EdgeEndpointError(
                    edge_type=edge.type.value,
                    source=edge.source,
                    target=edge.target,
                    missing=missing,
                )
            index[(edge.source, "out", None)].append(edge)
            index[(edge.source, "out", edge.type)].append(edge)
            index[(edge.target, "in", None)].append(edge)
            index[(edge.target, "in", edge.type)].append(edge)
        return {key: tuple(edges) for key, edges in index.items()}

    def clone(self) -> ScenarioGraph:
        """Deep copy of node state. Edges and the adjacency index are shared.

        Edges are frozen, so sharing them can't leak mutations between the
        baseline and a live graph.
        """
        nodes = [node.model_copy(deep=True) for node in self._nodes.values()]
        return ScenarioGraph(nodes, self._edges, _index=self._index)

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def by_id(self, node_id: str) -> ScenarioNode:
        """Get a node by id.

        Raises:
            NodeNotFoundError: If the id is absent.
        """
        try:
            return self._nodes[node_id]
        except KeyError:
            raise NodeNotFoundError(
                node_id, available=list(self._nodes), context="by_id"
            ) from None

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    @property
    def nodes(self) -> list[ScenarioNode]:
        return list(self._nodes.values())

    @property
    def edges(self) -> tuple[ScenarioEdge, ...]:
        return self._edges

    def node_ids(self) -> list[str]:
        return list(self._nodes)

    def __iter__(self) -> Iterator[ScenarioNode]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)

    def outgoing(
        self, node_id: str, edge_type: EdgeType | None = None
    ) -> tuple[ScenarioEdge, ...]:
        """Edges leaving *node_id*, optionally filtered by type."""
        self._require(node_id, "outgoing")
        return self._index.get((node_id, "out", edge_type), ())

    def incoming(
        self, node_id: str, edge_type: EdgeType | None = None
    ) -> tuple[ScenarioEdge, ...]:
        """Edges entering *node_id*, optionally filtered by type."""
        self._require(node_id, "incoming")
        return self._index.get((node_id, "in", edge_type), ())

    def find_edge(self, source: str, edge_type: EdgeType, target: str) -> ScenarioEdge | None:
        """Return the edge matching (source, type, target), or None."""
        for edge in self._index.get((source, "out", edge_type), ()):
            if edge.target == target:
                return edge
        return None

    def statuses(self) -> Mapping[str, NodeStatus]:
        """Read-only snapshot of every node's current status."""
        return MappingProxyType({nid: node.data.status for nid, node in self._nodes.items()})

    def _require(self, node_id: str, context: str) -> None:
        if node_id not in self._nodes:
            raise NodeNotFoundError(node_id, available=list(self._nodes), context=context)

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def set_status(self, node_id: str, status: NodeStatus | str) -> None:
        """Set a node's status.

        Raises:
            NodeNotFoundError: If the id is absent.
            ValueError: If *status* isn't a known status.
        """
        node = self.by_id(node_id)
        node.data.status = NodeStatus(status)
        log.debug("status_set", node_id=node_id, status=node.data.status.value)

    def set_position(self, node_id: str, x: int | float, y: int | float) -> None:
        node = self.by_id(node_id)
        node.position.x = x
        node.position.y = y
        log.debug("position_set", node_id=node_id, x=x, y=y)

    def set_notes(self, node_id: str, notes: str) -> None:
        node = self.by_id(node_id)
        node.data.notes = notes
        log.debug("notes_set", node_id=node_id, length=len(notes))

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_data(self) -> ScenarioData:
        """Export the full dataset shape (a deep copy of node state)."""
        return ScenarioData(
            nodes=[node.model_copy(deep=True) for node in self._nodes.values()],
            edges=list(self._edges),
        )

    def to_dict(self) -> dict[str, Any]:
        return self.to_data().model_dump(by_alias=True, mode="json")

    def __repr__(self) -> str:
        return f"ScenarioGraph(nodes={len(self._nodes)}, edges={len(self._edges)})"


def load_baseline(path: Path) -> ScenarioGraph:
    """Load the baseline dataset from a JSON file.

    Args:
        path: Path to the baseline ``scenarios.json``.

    Returns:
        Graph built from the file. Callers must treat it as read-only and
        clone it for live use.

    Raises:
        BaselineLoadError: If the file is missing, not JSON, or not a dataset.
        GraphIntegrityError: If the dataset violates graph invariants.
    """
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as e:
        raise BaselineLoadError(path, str(e)) from e
    except json.JSONDecodeError as e:
        raise BaselineLoadError(path, f"invalid JSON: {e}") from e

    try:
        data = ScenarioData.model_validate(raw)
    except ValidationError as e:
        raise BaselineLoadError(path, str(e)) from e

    graph = ScenarioGraph.from_data(data)
    log.info("baseline_loaded", path=str(path), nodes=len(graph), edges=len(graph.edges))
    return graph
