import shutil
from pathlib import Path

import pytest

from pax_historia import storage

TEST_DATA_DIR = Path("data-tests")
PRESETS_DIR = Path(__file__).parent / "presets"


@pytest.fixture(autouse=True)
def fresh_world():
    """Every test starts with no saves, default config and an empty lock registry."""
    if TEST_DATA_DIR.exists():
        shutil.rmtree(TEST_DATA_DIR)
    storage.init_storage(TEST_DATA_DIR, presets_dir=PRESETS_DIR)
    yield
    # data-tests/ is kept after the run so the last save and debug dump can be inspected
