"""Shared fixtures for kubechains tests."""

import pytest

from kubechains.core.posture import ControlCatalogEntry
from tests.helpers import all_controls


@pytest.fixture
def catalog() -> dict[str, ControlCatalogEntry]:
    """Catalog of control1..control6 for tracks attackchain1/attackchain2."""
    return all_controls()
