"""Builders for small scenario graphs used across the unit tests."""

from __future__ import annotations

from typing import Any

from campaigntree.graph.graph import ScenarioGraph


def node(
    node_id: str,
    status: str = "hidden",
    *,
    side: bool = False,
    name: str | None = None,
    notes: str = "",
    x: int = 0,
    y: int = 0,
) -> dict[str, Any]:
    """Dataset record for one scenario."""
    data: dict[str, Any] = {
        "id": node_id,
        "name": name if name is not None else f"Scenario {node_id}",
        "status": status,
        "notes": notes,
        "pages": [],
        "treasure": {},
    }
    if side:
        data["side"] = True
    return {"data": data, "position": {"x": x, "y": y}}


def edge(source: str, edge_type: str, target: str) -> dict[str, Any]:
    """Dataset record for one edge."""
    return {"data": {"source": source, "target": target, "type": edge_type}}


def make_graph(
    nodes: list[dict[str, Any]],
    edges: list[dict[str, Any]] | None = None,
) -> ScenarioGraph:
    return ScenarioGraph.from_data({"nodes": nodes, "edges": edges or []})


def statuses_graph(
    statuses: dict[str, str],
    edges: list[tuple[str, str, str]] | None = None,
    *,
    side: set[str] | None = None,
) -> ScenarioGraph:
    """Graph with one node per entry of *statuses* and (source, type, target) edges."""
    side = side or set()
    return make_graph(
        [node(nid, status, side=nid in side) for nid, status in statuses.items()],
        [edge(s, t, d) for s, t, d in edges or []],
    )
