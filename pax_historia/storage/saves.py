"""Save document CRUD (one JSON file per save, full-document overwrite)."""

import asyncio
import logging
import re
from pathlib import Path

from pax_historia.errors import SaveNotFound
from pax_historia.models import Save, SaveSummary, utc_now

from .core import saves_dir, write_text_atomic
from .locks import forget_lock, lock_for

logger = logging.getLogger(__name__)

_SAVE_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def _save_path(save_id: str) -> Path:
    if not _SAVE_ID_RE.match(save_id):
        raise SaveNotFound(save_id)
    return saves_dir() / f"{save_id}.json"


def save_exists(save_id: str) -> bool:
    try:
        return _save_path(save_id).is_file()
    except SaveNotFound:
        return False


def save_lock(save_id: str) -> asyncio.Lock:
    """Lock guarding an existing save. Unknown ids raise ``SaveNotFound`` and get no lock."""
    if not save_exists(save_id):
        raise SaveNotFound(save_id)
    return lock_for(save_id)


def load_save(save_id: str) -> Save:
    """Load a save document or raise ``SaveNotFound``."""
    path = _save_path(save_id)
    if not path.is_file():
        raise SaveNotFound(save_id)
    return Save.model_validate_json(path.read_text())


def write_save(save: Save) -> None:
    """Persist the whole document, replacing whatever was on disk."""
    save.updated_at = utc_now()
    write_text_atomic(_save_path(save.id), save.model_dump_json(indent=2))


def list_saves() -> list[Save]:
    results = []
    for path in sorted(saves_dir().glob("*.json")):
        try:
            results.append(Save.model_validate_json(path.read_text()))
        except ValueError as e:
            logger.warning(f"Skipping unreadable save {path.name}: {e}")
    return results


def list_save_summaries(nation_names: dict[str, str]) -> list[SaveSummary]:
    """Summaries of every save, most recently updated first."""
    summaries = [
        SaveSummary(
            id=s.id,
            name=s.name,
            nation_code=s.player_nation_code,
            nation_name=nation_names.get(s.player_nation_code, "Unknown"),
            current_date=s.current_date,
            turn_number=s.turn_number,
            updated_at=s.updated_at,
        )
        for s in list_saves()
    ]
    summaries.sort(key=lambda s: s.updated_at, reverse=True)
    return summaries


def delete_save(save_id: str) -> bool:
    try:
        path = _save_path(save_id)
    except SaveNotFound:
        return False
    if not path.is_file():
        return False
    path.unlink()
    forget_lock(save_id)
    return True


def rename_save(save_id: str, name: str) -> Save:
    save = load_save(save_id)
    save.name = name
    write_save(save)
    return save
