"""Tests for the progress tracking session."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from campaigntree.graph import (
    DecodeError,
    NodeNotFoundError,
    NodeStatus,
    ScenarioGraph,
    UnsupportedVersionError,
)
from campaigntree.persistence import (
    DEFAULT_STORAGE_KEY,
    JsonFileProgressStore,
    MemoryProgressStore,
)
from campaigntree.session import DEFAULT_IMAGE_TEMPLATE, Session
from campaigntree.visibility import ColorClass

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def store() -> MemoryProgressStore:
    return MemoryProgressStore()


@pytest.fixture
def session(baseline: ScenarioGraph, store: MemoryProgressStore) -> Session:
    return Session.open(baseline, store)


class TestOpen:
    def test_without_save_starts_from_baseline(self, session: Session) -> None:
        assert session.graph is not session.baseline
        assert session.graph.to_dict() == session.baseline.to_dict()
        assert session.selected == set()

    def test_restores_saved_progress(self, baseline: ScenarioGraph) -> None:
        saved = json.dumps({"version": "2", "nodes": [{"id": "1", "status": "complete"}]})
        store = MemoryProgressStore({DEFAULT_STORAGE_KEY: saved})

        session = Session.open(baseline, store)

        assert session.graph.by_id("1").data.status is NodeStatus.COMPLETE

    def test_restores_legacy_save(self, baseline: ScenarioGraph) -> None:
        saved = json.dumps({"nodes": [{"data": {"id": "62", "status": "hidden"}}]})
        store = MemoryProgressStore({DEFAULT_STORAGE_KEY: saved})

        session = Session.open(baseline, store)

        assert session.graph.by_id("62").data.status is NodeStatus.LOCKED

    @pytest.mark.parametrize(
        "saved",
        [
            "{not json",
            json.dumps({"version": "99", "nodes": []}),
            json.dumps([1, 2]),
            "[" * 200_000,
        ],
        ids=["invalid-json", "unknown-version", "not-an-object", "deeply-nested"],
    )
    def test_unusable_save_falls_back_to_baseline(
        self, baseline: ScenarioGraph, saved: str
    ) -> None:
        store = MemoryProgressStore({DEFAULT_STORAGE_KEY: saved})

        session = Session.open(baseline, store)

        assert session.graph.to_dict() == baseline.to_dict()
        # The unusable save isn't overwritten until the next edit
        assert store.get(DEFAULT_STORAGE_KEY) == saved

    def test_undecodable_progress_file_falls_back_to_baseline(
        self, baseline: ScenarioGraph, tmp_path: Path
    ) -> None:
        path = tmp_path / "progress.json"
        path.write_bytes(b'{"gloomhavenScenarioTree": "\xff\xfe"}')

        session = Session.open(baseline, JsonFileProgressStore(path))

        assert session.graph.to_dict() == baseline.to_dict()

    def test_custom_key(self, baseline: ScenarioGraph) -> None:
        saved = json.dumps({"version": "2", "nodes": [{"id": "2", "notes": "hi"}]})
        store = MemoryProgressStore({"other": saved})

        session = Session.open(baseline, store, key="other")

        assert session.graph.by_id("2").data.notes == "hi"


class TestEdits:
    def test_set_status_saves_and_renders(
        self, session: Session, store: MemoryProgressStore
    ) -> None:
        attrs = session.set_status("1", NodeStatus.COMPLETE)

        assert attrs.nodes["1"].color_class is ColorClass.DONE
        # 2 is still hidden, so the unlock edge into it stays hidden
        assert attrs.edges["1-unlocks-2"].visible is False
        assert json.loads(store.get(DEFAULT_STORAGE_KEY) or "") == {
            "nodes": [{"id": "1", "status": "complete"}],
            "version": "2",
        }

    def test_set_position_saves(self, session: Session, store: MemoryProgressStore) -> None:
        session.set_position("3", 130, 160)

        saved = json.loads(store.get(DEFAULT_STORAGE_KEY) or "")
        assert saved["nodes"] == [{"id": "3", "x": 130, "y": 160}]

    def test_set_notes_saves(self, session: Session, store: MemoryProgressStore) -> None:
        session.set_notes("52", "Found during town event")

        saved = json.loads(store.get(DEFAULT_STORAGE_KEY) or "")
        assert saved["nodes"] == [{"id": "52", "notes": "Found during town event"}]

    def test_edits_never_touch_baseline(self, session: Session) -> None:
        before = session.baseline.to_dict()

        session.set_status("2", "complete")
        session.set_notes("2", "x")

        assert session.baseline.to_dict() == before

    def test_unknown_node(self, session: Session, store: MemoryProgressStore) -> None:
        with pytest.raises(NodeNotFoundError):
            session.set_status("404", "complete")

        assert store.get(DEFAULT_STORAGE_KEY) is None

    def test_progress_survives_reopen(
        self, baseline: ScenarioGraph, session: Session, store: MemoryProgressStore
    ) -> None:
        session.set_status("1", "complete")
        session.set_status("3", "attempted")

        reopened = Session.open(baseline, store)

        assert reopened.graph.to_dict() == session.graph.to_dict()

    def test_reset(self, session: Session, store: MemoryProgressStore) -> None:
        session.set_status("1", "complete")
        session.select("1")

        session.reset()

        assert session.graph.to_dict() == session.baseline.to_dict()
        assert session.selected == set()
        assert json.loads(store.get(DEFAULT_STORAGE_KEY) or "") == {"nodes": [], "version": "2"}


class TestSelection:
    def test_select_visible_node(self, session: Session) -> None:
        assert session.select("1") is True

        assert session.selected == {"1"}
        assert session.render().nodes["1"].color_class is ColorClass.SELECTED

    def test_select_replaces_previous(self, session: Session) -> None:
        session.select("1")
        session.select("52")

        assert session.selected == {"52"}

    def test_hidden_node_is_not_selectable(self, session: Session) -> None:
        assert session.select("4") is False
        assert session.selected == set()

    def test_unknown_node(self, session: Session) -> None:
        with pytest.raises(NodeNotFoundError):
            session.select("404")

    def test_clear_selection(self, session: Session) -> None:
        session.select("1")
        session.clear_selection()

        assert session.render().nodes["1"].color_class is ColorClass.NEUTRAL


class TestImportExport:
    def test_export_matches_saved_blob(self, session: Session, store: MemoryProgressStore) -> None:
        session.set_status("2", "attempted")

        assert session.export() == store.get(DEFAULT_STORAGE_KEY)

    def test_import_replaces_progress(
        self, session: Session, store: MemoryProgressStore
    ) -> None:
        session.set_status("2", "attempted")
        text = json.dumps({"version": "2", "nodes": [{"id": "3", "status": "complete"}]})

        session.import_(text)

        assert session.graph.by_id("2").data.status is NodeStatus.HIDDEN
        assert session.graph.by_id("3").data.status is NodeStatus.COMPLETE
        assert json.loads(store.get(DEFAULT_STORAGE_KEY) or "")["nodes"] == [
            {"id": "3", "status": "complete"}
        ]

    def test_import_errors_propagate_and_keep_progress(self, session: Session) -> None:
        session.set_status("2", "attempted")

        with pytest.raises(DecodeError):
            session.import_("{")
        with pytest.raises(UnsupportedVersionError):
            session.import_(json.dumps({"version": 3, "nodes": []}))

        assert session.graph.by_id("2").data.status is NodeStatus.ATTEMPTED


class TestImageUrl:
    def test_default_template(self, session: Session) -> None:
        assert session.image_template == DEFAULT_IMAGE_TEMPLATE
        assert session.image_url(8) == "assets/scenarios/8.jpg"

    def test_custom_template(self, baseline: ScenarioGraph) -> None:
        session = Session(baseline, MemoryProgressStore(), image_template="scans/p{page}.png")

        assert session.image_url(12) == "scans/p12.png"
