"""Graph package - scenario topology and per-node progress state.

The baseline dataset is loaded once and treated as read-only; live graphs
are clones of it that receive status, notes, and position edits.
"""

from campaigntree.graph.errors import (
    BaselineLoadError,
    CodecError,
    DecodeError,
    EdgeEndpointError,
    GraphIntegrityError,
    NodeExistsError,
    NodeNotFoundError,
    UnsupportedVersionError,
)
from campaigntree.graph.graph import ScenarioGraph, load_baseline
from campaigntree.graph.models import (
    EdgeData,
    EdgeType,
    NodeData,
    NodeStatus,
    Position,
    ScenarioData,
    ScenarioEdge,
    ScenarioNode,
    Treasure,
)

__all__ = [
    "BaselineLoadError",
    "CodecError",
    "DecodeError",
    "EdgeData",
    "EdgeEndpointError",
    "EdgeType",
    "GraphIntegrityError",
    "NodeData",
    "NodeExistsError",
    "NodeNotFoundError",
    "NodeStatus",
    "Position",
    "ScenarioData",
    "ScenarioEdge",
    "ScenarioGraph",
    "ScenarioNode",
    "Treasure",
    "UnsupportedVersionError",
    "load_baseline",
]
