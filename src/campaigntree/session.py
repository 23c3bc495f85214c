"""Tracking session: one live graph over a frozen baseline.

The session wires the pieces together. It opens saved progress (falling
back to an untouched baseline clone when the save is unusable), applies
user edits to the live graph, persists the encoded delta after every edit,
and re-derives render attributes.

A session owns its live graph and is not safe for concurrent mutation;
hosts that accept concurrent edits must serialize them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from campaigntree.graph.errors import CodecError
from campaigntree.observability.logging import get_logger
from campaigntree.persistence import codec
from campaigntree.persistence.store import DEFAULT_STORAGE_KEY
from campaigntree.visibility.engine import render

if TYPE_CHECKING:
    from campaigntree.graph.graph import ScenarioGraph
    from campaigntree.graph.models import NodeStatus
    from campaigntree.persistence.store import ProgressStore
    from campaigntree.visibility.types import RenderAttributes

log = get_logger(__name__)

DEFAULT_IMAGE_TEMPLATE = "assets/scenarios/{page}.jpg"


class Session:
    """Progress tracking over one campaign.

    Attributes:
        baseline: The frozen baseline graph. Never mutated.
        graph: The live graph receiving edits.
        selected: Ids of currently selected nodes.
    """

    def __init__(
        self,
        baseline: ScenarioGraph,
        store: ProgressStore,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        image_template: str = DEFAULT_IMAGE_TEMPLATE,
    ) -> None:
        self.baseline = baseline
        self.store = store
        self.key = key
        self.image_template = image_template
        self.graph: ScenarioGraph = baseline.clone()
        self.selected: set[str] = set()

    @classmethod
    def open(
        cls,
        baseline: ScenarioGraph,
        store: ProgressStore,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        image_template: str = DEFAULT_IMAGE_TEMPLATE,
    ) -> Session:
        """Open a session, restoring saved progress when it is usable.

        A malformed save or one with an unknown version is discarded in
        favor of default progress; opening never fails because of it.
        """
        session = cls(baseline, store, key=key, image_template=image_template)
        saved = store.get(key)
        if saved is None:
            log.info("session_opened", restored=False)
            return session
        try:
            session.graph = codec.loads(saved, baseline)
        except CodecError as e:
            log.warning("saved_progress_discarded", key=key, error=str(e))
            return session
        log.info("session_opened", restored=True)
        return session

    # -------------------------------------------------------------------------
    # Edits
    # -------------------------------------------------------------------------

    def set_status(self, node_id: str, status: NodeStatus | str) -> RenderAttributes:
        self.graph.set_status(node_id, status)
        self.save()
        return self.render()

    def set_position(self, node_id: str, x: int | float, y: int | float) -> RenderAttributes:
        self.graph.set_position(node_id, x, y)
        self.save()
        return self.render()

    def set_notes(self, node_id: str, notes: str) -> RenderAttributes:
        self.graph.set_notes(node_id, notes)
        self.save()
        return self.render()

    def reset(self) -> RenderAttributes:
        """Discard all progress and persist the empty delta."""
        self.graph = self.baseline.clone()
        self.selected.clear()
        self.save()
        log.info("progress_reset")
        return self.render()

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def select(self, node_id: str) -> bool:
        """Select a node. Returns False if it isn't selectable (not visible)."""
        self.graph.by_id(node_id)
        if not self.render().nodes[node_id].selectable:
            return False
        self.selected = {node_id}
        return True

    def clear_selection(self) -> None:
        self.selected.clear()

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def save(self) -> None:
        self.store.set(self.key, codec.dumps(self.graph, self.baseline))

    def export(self) -> str:
        """The encoded progress document, as written to storage."""
        return codec.dumps(self.graph, self.baseline)

    def import_(self, text: str) -> RenderAttributes:
        """Replace progress with an encoded document and persist it.

        Raises:
            DecodeError: If the document is malformed.
            UnsupportedVersionError: If its version marker is unknown.
        """
        self.graph = codec.loads(text, self.baseline)
        self.selected.clear()
        self.save()
        log.info("progress_imported")
        return self.render()

    # -------------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------------

    def render(self) -> RenderAttributes:
        return render(self.graph, self.selected)

    def image_url(self, active_page: int) -> str:
        """Path of the scan for a scenario book page."""
        return self.image_template.format(page=active_page)
