"""Campaign configuration loading."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML

from campaigntree.persistence.store import DEFAULT_STORAGE_KEY
from campaigntree.session import DEFAULT_IMAGE_TEMPLATE

CONFIG_FILENAME = "campaign.yaml"

DEFAULT_BASELINE = "scenarios.json"
DEFAULT_STORAGE_PATH = "progress.json"


@dataclass
class StorageConfig:
    """Where saved progress lives.

    Resolution order for the key:
    1. Environment variable CT_STORAGE_KEY
    2. Campaign config (storage.key)
    3. DEFAULT_STORAGE_KEY
    """

    path: str = DEFAULT_STORAGE_PATH
    key: str = DEFAULT_STORAGE_KEY

    def get_key(self) -> str:
        return os.getenv("CT_STORAGE_KEY") or self.key

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StorageConfig:
        return cls(
            path=data.get("path", DEFAULT_STORAGE_PATH),
            key=data.get("key", DEFAULT_STORAGE_KEY),
        )


@dataclass
class CampaignConfig:
    """Configuration for a tracked campaign.

    Attributes:
        name: Campaign name.
        version: Config file format version.
        baseline: Path to the baseline dataset, relative to the campaign dir.
        storage: Saved progress location.
        image_template: Format string for scenario page images ({page}).
    """

    name: str
    version: int = 1
    baseline: str = DEFAULT_BASELINE
    storage: StorageConfig = field(default_factory=StorageConfig)
    image_template: str = DEFAULT_IMAGE_TEMPLATE

    def baseline_path(self, campaign_path: Path) -> Path:
        """Resolve the baseline path. CT_BASELINE overrides the config."""
        override = os.getenv("CT_BASELINE")
        path = Path(override) if override else Path(self.baseline)
        return path if path.is_absolute() else campaign_path / path

    def storage_path(self, campaign_path: Path) -> Path:
        path = Path(self.storage.path)
        return path if path.is_absolute() else campaign_path / path

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CampaignConfig:
        """Create config from dictionary.

        Args:
            data: Dictionary containing config fields.

        Returns:
            CampaignConfig instance.
        """
        images_data = data.get("images", {}) or {}
        return cls(
            name=data.get("name", "unnamed"),
            version=data.get("version", 1),
            baseline=data.get("baseline", DEFAULT_BASELINE),
            storage=StorageConfig.from_dict(dict(data.get("storage", {}) or {})),
            image_template=images_data.get("template", DEFAULT_IMAGE_TEMPLATE),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "baseline": self.baseline,
            "storage": {"path": self.storage.path, "key": self.storage.key},
            "images": {"template": self.image_template},
        }


class CampaignConfigError(Exception):
    """Raised when campaign configuration cannot be loaded."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load campaign config at {path}: {reason}")


def load_campaign_config(campaign_path: Path) -> CampaignConfig:
    """Load campaign configuration from campaign.yaml.

    Args:
        campaign_path: Path to the campaign directory.

    Raises:
        CampaignConfigError: If config cannot be loaded.
    """
    config_path = campaign_path / CONFIG_FILENAME

    if not config_path.exists():
        raise CampaignConfigError(config_path, "File not found")

    yaml = YAML()
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.load(f)

        if data is None:
            raise CampaignConfigError(config_path, "Empty file")

        return CampaignConfig.from_dict(dict(data))
    except Exception as e:
        if isinstance(e, CampaignConfigError):
            raise
        raise CampaignConfigError(config_path, str(e)) from e


def write_campaign_config(config: CampaignConfig, campaign_path: Path) -> Path:
    """Write *config* to campaign.yaml in *campaign_path*."""
    config_path = campaign_path / CONFIG_FILENAME
    yaml_writer = YAML()
    yaml_writer.default_flow_style = False
    with config_path.open("w", encoding="utf-8") as f:
        yaml_writer.dump(config.to_dict(), f)
    return config_path


def create_default_config(name: str, baseline: str | None = None) -> CampaignConfig:
    """Create a default campaign configuration.

    Args:
        name: Campaign name.
        baseline: Optional baseline dataset path.
    """
    return CampaignConfig(name=name, baseline=baseline or DEFAULT_BASELINE)
