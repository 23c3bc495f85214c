"""Scenario dataset models.

These models mirror the JSON shape of the baseline dataset: every node is a
``{"data": {...}, "position": {...}}`` record and every edge a
``{"data": {"source", "target", "type"}}`` record. The same shape is what
renderers consume, so ``model_dump(by_alias=True)`` round-trips a dataset.

Node status and edge type are closed enumerations. Any other string fails
validation at load time.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class NodeStatus(StrEnum):
    """Completion status of a scenario."""

    HIDDEN = "hidden"
    INCOMPLETE = "incomplete"
    ATTEMPTED = "attempted"
    COMPLETE = "complete"
    LOCKED = "locked"


class EdgeType(StrEnum):
    """Relationship between two scenarios."""

    REQUIRED_BY = "requiredby"
    BLOCKS = "blocks"
    LINKS_TO = "linksto"
    UNLOCKS = "unlocks"


class Treasure(BaseModel):
    """A treasure found in a scenario. ``looted`` is a boolean-as-string."""

    looted: Literal["true", "false"] = "false"
    description: str = ""


class NodeData(BaseModel):
    """Per-scenario data. ``status``, ``notes`` are mutable during a session."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    name: str = ""
    status: NodeStatus = NodeStatus.HIDDEN
    side: bool = False
    notes: str = ""
    pages: list[int] = Field(default_factory=list)
    active_page: int | None = Field(default=None, alias="activePage")
    image_url: str | None = Field(default=None, alias="imageUrl")
    treasure: dict[str, Treasure] = Field(default_factory=dict)


class Position(BaseModel):
    """Renderer coordinates. Never read by visibility derivation."""

    x: int | float = 0
    y: int | float = 0


class ScenarioNode(BaseModel):
    """A scenario node as stored in the dataset."""

    data: NodeData
    position: Position = Field(default_factory=Position)

    @property
    def id(self) -> str:
        return self.data.id


class EdgeData(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str = Field(min_length=1)
    target: str = Field(min_length=1)
    type: EdgeType


class ScenarioEdge(BaseModel):
    """A directed, typed edge. Immutable once loaded."""

    model_config = ConfigDict(frozen=True)

    data: EdgeData

    @property
    def source(self) -> str:
        return self.data.source

    @property
    def target(self) -> str:
        return self.data.target

    @property
    def type(self) -> EdgeType:
        return self.data.type

    @property
    def id(self) -> str:
        """Stable identifier used to key render attributes."""
        return f"{self.data.source}-{self.data.type.value}-{self.data.target}"


class ScenarioData(BaseModel):
    """Full dataset: the baseline file, or a live graph exported for rendering."""

    nodes: list[ScenarioNode] = Field(default_factory=list)
    edges: list[ScenarioEdge] | None = None
