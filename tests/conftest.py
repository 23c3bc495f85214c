"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from campaigntree.graph.graph import ScenarioGraph, load_baseline


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def baseline_path() -> Path:
    """Path to the fixture baseline dataset."""
    return Path(__file__).parent / "fixtures" / "scenarios.json"


@pytest.fixture
def baseline(baseline_path: Path) -> ScenarioGraph:
    """Freshly loaded baseline graph (eight scenarios, six edges)."""
    return load_baseline(baseline_path)
