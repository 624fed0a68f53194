from __future__ import annotations

from pathlib import Path

import pytest

from a11ylint.checks import CheckRegistry, load_registry
from tests._fixtures.source_builder import SourceBuilder


@pytest.fixture
def source_builder(tmp_path: Path) -> SourceBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return SourceBuilder(tmp_path)


@pytest.fixture(scope="session")
def registry() -> CheckRegistry:
    return load_registry()
