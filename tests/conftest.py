"""Top-level pytest configuration for errata."""

from collections.abc import Generator

import pytest

from errata import ops
from errata.config import get_settings
from errata.registry import registry

pytest_plugins = [
    "pytest_asyncio",
]


@pytest.fixture(autouse=True)
def clean_registry() -> Generator[None, None, None]:
    """Start every test with an empty registry at the configured capacity."""
    registry.reset(get_settings().registry_capacity)
    yield
    registry.reset(get_settings().registry_capacity)


@pytest.fixture(autouse=True)
def clean_global_context() -> Generator[None, None, None]:
    """Remove global operation values set by a test."""
    ops.clear_global()
    yield
    ops.clear_global()


@pytest.fixture
def small_registry() -> Generator[int, None, None]:
    """Shrink the registry so that eviction is cheap to provoke."""
    capacity = 5
    registry.reset(capacity)
    yield capacity
