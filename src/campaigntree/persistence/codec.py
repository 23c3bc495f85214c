"""Delta encoding of scenario progress against the baseline dataset.

``encode`` keeps only what differs from the baseline (status, notes,
position) so a save stays small and survives dataset updates that don't
touch the saved fields. ``decode`` clones the baseline and overlays the
saved deltas onto it. The baseline is authoritative for topology: records
for ids it doesn't contain are skipped.

Decoding is all-or-nothing. The whole document is validated before the
overlay starts, and the overlay targets a fresh clone, so a failure never
leaves a half-applied graph behind.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ValidationError

from campaigntree.graph.errors import DecodeError, UnsupportedVersionError
from campaigntree.graph.models import NodeStatus
from campaigntree.observability.logging import get_logger
from campaigntree.persistence.documents import (
    CURRENT_VERSION,
    EncodedDocumentV1,
    EncodedDocumentV2,
    EncodedNodeV1,
    EncodedNodeV2,
    parse_legacy_int,
)

if TYPE_CHECKING:
    from campaigntree.graph.graph import ScenarioGraph
    from campaigntree.graph.models import ScenarioNode

log = get_logger(__name__)

# Legacy saves predate the "locked" status; scenarios past this number that
# were saved hidden (or flagged locked) are locked, not hidden.
LEGACY_LOCK_THRESHOLD = 51

_DocT = TypeVar("_DocT", bound=BaseModel)


def encode(graph: ScenarioGraph, baseline: ScenarioGraph) -> dict[str, Any]:
    """Encode the differences between *graph* and *baseline*.

    Args:
        graph: Live graph derived from *baseline*.
        baseline: The immutable baseline dataset.

    Returns:
        A V2 document as a JSON-ready dict. Nodes equal to the baseline in
        status, notes and position are omitted.

    Raises:
        NodeNotFoundError: If *graph* holds a node the baseline doesn't.
    """
    records: list[EncodedNodeV2] = []
    for node in graph:
        default = baseline.by_id(node.id)
        changes: dict[str, Any] = {}
        if node.data.status != default.data.status:
            changes["status"] = node.data.status
        if node.data.notes != default.data.notes:
            changes["notes"] = node.data.notes
        if node.position.x != default.position.x or node.position.y != default.position.y:
            changes["x"] = node.position.x
            changes["y"] = node.position.y
        if changes:
            records.append(EncodedNodeV2(id=node.id, **changes))

    document = EncodedDocumentV2(nodes=records, version=CURRENT_VERSION)
    log.debug("progress_encoded", changed=len(records), total=len(graph))
    return document.model_dump(mode="json", exclude_unset=True)


def decode(document: Mapping[str, Any], baseline: ScenarioGraph) -> ScenarioGraph:
    """Rebuild a live graph by overlaying a saved document onto the baseline.

    A document without a ``version`` key is legacy V1; ``"2"`` is V2.

    Raises:
        DecodeError: If the document doesn't match its version's schema.
        UnsupportedVersionError: If the version marker is unknown.
    """
    if not isinstance(document, Mapping):
        raise DecodeError(f"expected a JSON object, got {type(document).__name__}")

    if "version" not in document:
        legacy = _validate(EncodedDocumentV1, document)
        return _overlay_v1(legacy, baseline)

    version = document["version"]
    if version == CURRENT_VERSION:
        current = _validate(EncodedDocumentV2, document)
        return _overlay_v2(current, baseline)

    raise UnsupportedVersionError(version)


def dumps(graph: ScenarioGraph, baseline: ScenarioGraph) -> str:
    """Encode to the compact JSON string written to storage."""
    return json.dumps(encode(graph, baseline), separators=(",", ":"), ensure_ascii=False)


def loads(text: str, baseline: ScenarioGraph) -> ScenarioGraph:
    """Decode a JSON string read from storage.

    Raises:
        DecodeError: If *text* isn't valid JSON or fails validation.
        UnsupportedVersionError: If the version marker is unknown.
    """
    try:
        document = json.loads(text)
    except (json.JSONDecodeError, TypeError, RecursionError) as e:
        raise DecodeError(f"invalid JSON: {e}") from e
    return decode(document, baseline)


def _validate(model: type[_DocT], document: Mapping[str, Any]) -> _DocT:
    try:
        return model.model_validate(dict(document))
    except ValidationError as e:
        raise DecodeError(str(e)) from e


def _overlay_v1(document: EncodedDocumentV1, baseline: ScenarioGraph) -> ScenarioGraph:
    records: dict[str, EncodedNodeV1] = {rec.data.id: rec for rec in document.nodes}
    graph = baseline.clone()
    for node in graph:
        record = records.get(node.id)
        if record is not None:
            _apply_v1(node, record)
    _log_skipped(records, graph, version="1")
    return graph


def _apply_v1(node: ScenarioNode, record: EncodedNodeV1) -> None:
    data = record.data
    if data.status is not None:
        number = parse_legacy_int(data.id)
        is_late = number is not None and number > LEGACY_LOCK_THRESHOLD
        if is_late and (data.status is NodeStatus.HIDDEN or data.locked == "true"):
            node.data.status = NodeStatus.LOCKED
        else:
            node.data.status = data.status
    if data.notes is not None:
        node.data.notes = data.notes
    if record.position.x is not None:
        node.position.x = record.position.x
    if record.position.y is not None:
        node.position.y = record.position.y


def _overlay_v2(document: EncodedDocumentV2, baseline: ScenarioGraph) -> ScenarioGraph:
    records: dict[str, EncodedNodeV2] = {rec.id: rec for rec in document.nodes}
    graph = baseline.clone()
    for node in graph:
        record = records.get(node.id)
        if record is None:
            continue
        if record.status is not None:
            node.data.status = record.status
        if record.notes is not None:
            node.data.notes = record.notes
        if record.x is not None:
            node.position.x = record.x
        if record.y is not None:
            node.position.y = record.y
    _log_skipped(records, graph, version=CURRENT_VERSION)
    return graph


def _log_skipped(records: Mapping[str, object], graph: ScenarioGraph, *, version: str) -> None:
    skipped = sorted(rid for rid in records if not graph.has_node(rid))
    if skipped:
        log.debug("unknown_records_skipped", version=version, ids=skipped)
    log.debug("progress_decoded", version=version, records=len(records))
