"""Storage initialization, path helpers, and JSON read/write utilities."""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from .locks import reset_locks

_data_dir: Path | None = None
_presets_dir: Path | None = None


def init_storage(data_dir: Path, presets_dir: Path | None = None) -> None:
    global _data_dir, _presets_dir
    _data_dir = data_dir
    _data_dir.mkdir(parents=True, exist_ok=True)
    saves_dir().mkdir(exist_ok=True)
    if presets_dir is None:
        # Default: repo_root/presets
        presets_dir = Path(__file__).parent.parent.parent / "presets"
    _presets_dir = presets_dir
    reset_locks()


def data_dir() -> Path:
    assert _data_dir is not None, "Call init_storage() before using storage"
    return _data_dir


def presets_dir() -> Path:
    assert _presets_dir is not None, "Call init_storage() before using storage"
    return _presets_dir


def saves_dir() -> Path:
    return data_dir() / "saves"


def debug_dir() -> Path:
    return data_dir() / "debug"


def read_json(path: Path) -> Any:
    return json.loads(path.read_text())


def write_text_atomic(path: Path, text: str) -> None:
    """Write ``text`` to ``path`` so readers see either the old or the new file, never half of one."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def write_json(path: Path, data: Any) -> None:
    write_text_atomic(path, json.dumps(data, indent=2))
