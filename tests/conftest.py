import pytest

from pax_historia import engine, storage
from pax_historia.registry import NationRegistry


@pytest.fixture
def registry() -> NationRegistry:
    return NationRegistry.from_presets(storage.presets_dir())


@pytest.fixture
def save(registry):
    """A fresh Italian campaign starting 1936-01-01."""
    return engine.new_game(registry, "ITA", "1936-01-01")
