"""Global game configuration (new-game defaults and world policy text)."""

from pathlib import Path
from typing import Any

from .core import data_dir, read_json, write_json

_CONFIG_DEFAULTS: dict[str, Any] = {
    "start_date": "1936-01-01",
    "world_context": (
        "Historical 1936 start. Europe is on the brink of tension as ideologies clash."
    ),
    "simulation_rules": (
        "1. Realistic consequences. 2. Diplomatic weight. "
        "3. Historical plausibility with player flexibility."
    ),
}


def _config_path() -> Path:
    return data_dir() / "config.json"


def get_config() -> dict[str, Any]:
    """Read config, returning defaults merged with stored values."""
    config = dict(_CONFIG_DEFAULTS)
    path = _config_path()
    if path.is_file():
        stored = read_json(path)
        for key in _CONFIG_DEFAULTS:
            if isinstance(stored.get(key), str):
                config[key] = stored[key]
    return config


def update_config(fields: dict[str, Any]) -> dict[str, Any]:
    """Merge known string fields into config and persist. Returns full config."""
    config = get_config()
    for key, value in fields.items():
        if key in _CONFIG_DEFAULTS and isinstance(value, str):
            config[key] = value
    write_json(_config_path(), config)
    return config
