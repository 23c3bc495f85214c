"""Tests for campaign configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
import yaml

from campaigntree.config import (
    CONFIG_FILENAME,
    DEFAULT_BASELINE,
    CampaignConfig,
    CampaignConfigError,
    StorageConfig,
    create_default_config,
    load_campaign_config,
    write_campaign_config,
)
from campaigntree.persistence import DEFAULT_STORAGE_KEY
from campaigntree.session import DEFAULT_IMAGE_TEMPLATE

if TYPE_CHECKING:
    from pathlib import Path


class TestStorageConfig:
    def test_defaults(self) -> None:
        config = StorageConfig.from_dict({})

        assert config.path == "progress.json"
        assert config.key == DEFAULT_STORAGE_KEY

    def test_key_from_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CT_STORAGE_KEY", raising=False)

        assert StorageConfig(key="party-b").get_key() == "party-b"

    def test_env_overrides_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CT_STORAGE_KEY", "from-env")

        assert StorageConfig(key="party-b").get_key() == "from-env"


class TestCampaignConfig:
    def test_from_dict_minimal(self) -> None:
        config = CampaignConfig.from_dict({"name": "Party A"})

        assert config.name == "Party A"
        assert config.version == 1
        assert config.baseline == DEFAULT_BASELINE
        assert config.storage == StorageConfig()
        assert config.image_template == DEFAULT_IMAGE_TEMPLATE

    def test_from_dict_full(self) -> None:
        config = CampaignConfig.from_dict(
            {
                "name": "Party A",
                "baseline": "data/tree.json",
                "storage": {"path": "saves/p.json", "key": "party-a"},
                "images": {"template": "scans/{page}.png"},
            }
        )

        assert config.baseline == "data/tree.json"
        assert config.storage.path == "saves/p.json"
        assert config.storage.key == "party-a"
        assert config.image_template == "scans/{page}.png"

    def test_null_sections_fall_back(self) -> None:
        config = CampaignConfig.from_dict({"name": "x", "storage": None, "images": None})

        assert config.storage == StorageConfig()
        assert config.image_template == DEFAULT_IMAGE_TEMPLATE

    def test_relative_paths_resolve_against_campaign(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("CT_BASELINE", raising=False)
        config = CampaignConfig(name="x")

        assert config.baseline_path(tmp_path) == tmp_path / "scenarios.json"
        assert config.storage_path(tmp_path) == tmp_path / "progress.json"

    def test_absolute_paths_are_kept(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("CT_BASELINE", raising=False)
        absolute = tmp_path / "elsewhere" / "tree.json"
        config = CampaignConfig(name="x", baseline=str(absolute))

        assert config.baseline_path(tmp_path / "campaign") == absolute

    def test_env_overrides_baseline(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CT_BASELINE", "shared/tree.json")
        config = CampaignConfig(name="x", baseline="mine.json")

        assert config.baseline_path(tmp_path) == tmp_path / "shared" / "tree.json"


class TestLoadAndWrite:
    def test_write_then_load(self, tmp_path: Path) -> None:
        config = CampaignConfig(
            name="Party A",
            storage=StorageConfig(path="saves/p.json", key="party-a"),
            image_template="scans/{page}.png",
        )

        path = write_campaign_config(config, tmp_path)

        assert path == tmp_path / CONFIG_FILENAME
        assert load_campaign_config(tmp_path) == config

    def test_written_file_is_plain_yaml(self, tmp_path: Path) -> None:
        write_campaign_config(create_default_config("Party A"), tmp_path)

        data = yaml.safe_load((tmp_path / CONFIG_FILENAME).read_text())

        assert data["name"] == "Party A"
        assert data["storage"]["key"] == DEFAULT_STORAGE_KEY
        assert data["images"]["template"] == DEFAULT_IMAGE_TEMPLATE

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(CampaignConfigError, match="File not found"):
            load_campaign_config(tmp_path)

    def test_empty_file(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")

        with pytest.raises(CampaignConfigError, match="Empty file"):
            load_campaign_config(tmp_path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("name: [unclosed\n")

        with pytest.raises(CampaignConfigError) as exc_info:
            load_campaign_config(tmp_path)

        assert exc_info.value.path == tmp_path / CONFIG_FILENAME


class TestCreateDefaultConfig:
    def test_defaults(self) -> None:
        config = create_default_config("Party A")

        assert config.name == "Party A"
        assert config.baseline == DEFAULT_BASELINE

    def test_custom_baseline(self) -> None:
        assert create_default_config("x", baseline="tree.json").baseline == "tree.json"
