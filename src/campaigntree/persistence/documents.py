"""Saved progress document schemas.

Two encodings exist. The current one (V2) is a flat list of per-node deltas
tagged with ``"version": "2"``. The legacy one (V1) has no version key and
nests each delta in the dataset's ``data``/``position`` shape, with
positions stored as numeric strings. V1 is read-only: it is decoded but
never produced.
"""

from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import BaseModel, Field, StrictFloat, StrictInt, field_validator

from campaigntree.graph.models import NodeStatus

CURRENT_VERSION = "2"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_legacy_int(value: Any) -> int | None:
    """Parse the leading integer of a legacy numeric string.

    Mirrors how legacy saves were read back: ``"12.7"`` is 12, ``"62"`` is
    62, and a string without a leading integer has no value.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            return int(match.group(1))
    return None


# ---------------------------------------------------------------------------
# V1 (legacy)
# ---------------------------------------------------------------------------


class EncodedNodeDataV1(BaseModel):
    id: str = Field(min_length=1)
    status: NodeStatus | None = None
    notes: str | None = None
    locked: str | None = None


class EncodedPositionV1(BaseModel):
    x: int | None = None
    y: int | None = None

    @field_validator("x", "y", mode="before")
    @classmethod
    def _parse_numeric_string(cls, value: Any) -> int | None:
        if value is None:
            return None
        parsed = parse_legacy_int(value)
        if parsed is None:
            raise ValueError(f"not a numeric coordinate: {value!r}")
        return parsed


class EncodedNodeV1(BaseModel):
    data: EncodedNodeDataV1
    position: EncodedPositionV1 = Field(default_factory=EncodedPositionV1)


class EncodedDocumentV1(BaseModel):
    nodes: list[EncodedNodeV1] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# V2 (current)
# ---------------------------------------------------------------------------


class EncodedNodeV2(BaseModel):
    """Delta for one node. Only fields that differ from the baseline are set."""

    id: str = Field(min_length=1)
    status: NodeStatus | None = None
    notes: str | None = None
    x: StrictInt | StrictFloat | None = None
    y: StrictInt | StrictFloat | None = None


class EncodedDocumentV2(BaseModel):
    nodes: list[EncodedNodeV2] = Field(default_factory=list)
    version: Literal["2"] = CURRENT_VERSION
