"""Error types for the scenario graph and its persisted progress.

Integrity errors are raised when an operation references a node or edge
that the graph does not contain, similar to foreign key violations in a
database. Codec errors are raised when a persisted progress document cannot
be turned back into a graph.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from difflib import get_close_matches
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class GraphIntegrityError(Exception):
    """Base class for scenario graph integrity violations."""


@dataclass
class NodeNotFoundError(GraphIntegrityError):
    """Raised when referencing a scenario node that doesn't exist.

    Lookups performed internally (edge endpoints, encode against the
    baseline) treat this as a malformed dataset. The decoder does not raise
    it for unknown ids in a saved document; those records are skipped.

    Attributes:
        node_id: The ID that was referenced but doesn't exist.
        available: Valid IDs, used to suggest likely typos.
        context: Description of where the reference occurred.
    """

    node_id: str
    available: list[str] = field(default_factory=list)
    context: str = ""

    def __post_init__(self) -> None:
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"Scenario '{self.node_id}' not found"
        if self.context:
            msg += f" ({self.context})"
        suggestions = self.suggestions()
        if suggestions:
            msg += f"; did you mean {', '.join(repr(s) for s in suggestions)}?"
        return msg

    def suggestions(self) -> list[str]:
        """Find similar IDs that might be typos."""
        return get_close_matches(self.node_id, self.available, n=3, cutoff=0.6)


@dataclass
class NodeExistsError(GraphIntegrityError):
    """Raised when a dataset declares the same scenario id twice.

    Attributes:
        node_id: The duplicated ID.
    """

    node_id: str

    def __post_init__(self) -> None:
        super().__init__(f"Scenario '{self.node_id}' is declared more than once")


@dataclass
class EdgeEndpointError(GraphIntegrityError):
    """Raised when an edge references non-existent endpoints.

    Attributes:
        edge_type: Type of the offending edge.
        source: Source node ID.
        target: Target node ID.
        missing: Which endpoint is missing ("source", "target", or "both").
    """

    edge_type: str
    source: str
    target: str
    missing: str

    def __post_init__(self) -> None:
        if self.missing == "both":
            msg = (
                f"Edge '{self.edge_type}' endpoints not found: "
                f"'{self.source}' and '{self.target}'"
            )
        elif self.missing == "source":
            msg = f"Edge '{self.edge_type}' source not found: '{self.source}'"
        else:
            msg = f"Edge '{self.edge_type}' target not found: '{self.target}'"
        super().__init__(msg)


class BaselineLoadError(Exception):
    """Raised when the baseline dataset file can't be read or parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load baseline dataset at {path}: {reason}")


class CodecError(Exception):
    """Base class for persisted progress document failures.

    Callers that open a session catch this and fall back to an
    un-overlaid clone of the baseline.
    """


class DecodeError(CodecError):
    """Raised when a persisted document is malformed or fails validation."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Cannot decode saved progress: {reason}")


class UnsupportedVersionError(CodecError):
    """Raised when a persisted document carries an unknown version marker."""

    def __init__(self, version: object) -> None:
        self.version = version
        super().__init__(f"Unsupported saved progress version: {version!r}")
