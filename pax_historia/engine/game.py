"""Save lifecycle and player-driven mutations (actions, units).

Every mutating operation runs load -> mutate -> write under the save lock.
"""

import logging
from typing import Any

from pax_historia import storage
from pax_historia.errors import ActionNotFound, GameValidationError
from pax_historia.models import Action, NationState, Save, Unit, new_id, utc_now
from pax_historia.registry import NationRegistry, load_starting_units

from .dates import parse_game_date
from .turn import clamp

logger = logging.getLogger(__name__)


def new_game(
    registry: NationRegistry,
    nation_code: str,
    start_date: str | None = None,
) -> Save:
    """Create and persist a fresh save with every registry nation at default state."""
    config = storage.get_config()
    nation = registry.require(nation_code)
    start = start_date or config["start_date"]
    parse_game_date(start)

    now = utc_now()
    save = Save(
        id=new_id(),
        name=f"{nation.name} - {start}",
        player_nation_code=nation.code,
        current_date=start,
        created_at=now,
        world_context=config["world_context"],
        simulation_rules=config["simulation_rules"],
        nations={
            code: NationState(code=code, manpower=n.manpower)
            for code, n in registry.items()
        },
        units=load_starting_units(storage.presets_dir(), now),
    )
    storage.write_save(save)
    logger.info(f"Created save {save.id} for {nation.code} starting {start}")
    return save


async def rename(save_id: str, name: str) -> Save:
    name = name.strip()
    if not name:
        raise GameValidationError("Save name must not be empty")
    async with storage.save_lock(save_id):
        return storage.rename_save(save_id, name)


# ── Actions ──────────────────────────────────────────────


async def submit_action(save_id: str, action_text: str, action_type: str = "general") -> Action:
    """Queue a player order for the next turn. Always accepted."""
    text = action_text.strip()
    if not text:
        raise GameValidationError("Action text must not be empty")
    async with storage.save_lock(save_id):
        save = storage.load_save(save_id)
        action = Action(
            nation_code=save.player_nation_code,
            action_text=text,
            action_type=action_type or "general",
            turn_number=save.turn_number,
        )
        save.actions.append(action)
        storage.write_save(save)
    logger.info(f"Action {action.id} queued for {save_id} (turn {action.turn_number})")
    return action


async def delete_action(save_id: str, action_id: str) -> Action:
    """Remove a pending action. Completed or unknown ids raise ``ActionNotFound``."""
    async with storage.save_lock(save_id):
        save = storage.load_save(save_id)
        for index, action in enumerate(save.actions):
            if action.id == action_id and action.status == "pending":
                del save.actions[index]
                storage.write_save(save)
                return action
    raise ActionNotFound(action_id)


def current_turn_actions(save: Save) -> list[Action]:
    return [a for a in save.actions if a.turn_number == save.turn_number]


# ── Units ────────────────────────────────────────────────


def filter_units(save: Save, nation_code: str | None = None, region_id: str | None = None) -> list[Unit]:
    units = save.units
    if nation_code:
        units = [u for u in units if u.nation_code == nation_code.upper()]
    if region_id:
        units = [u for u in units if u.region_id == region_id]
    return units


async def create_unit(
    save_id: str,
    *,
    name: str,
    unit_type: str,
    nation_code: str,
    region_id: str,
    strength: int = 100,
    organization: int = 100,
    experience: int = 0,
    centroid: list[float] | None = None,
) -> Unit:
    unit = Unit(
        name=name,
        unit_type=unit_type,
        nation_code=nation_code.upper(),
        region_id=region_id,
        centroid=centroid,
        strength=clamp(strength),
        organization=clamp(organization),
        experience=clamp(experience),
    )
    async with storage.save_lock(save_id):
        save = storage.load_save(save_id)
        save.units.append(unit)
        storage.write_save(save)
    return unit


async def move_unit(save_id: str, unit_id: str, to_region_id: str) -> dict[str, Any]:
    """Reassign a unit's region. Returns the unit and the from/to pair."""
    async with storage.save_lock(save_id):
        save = storage.load_save(save_id)
        unit = save.find_unit(unit_id)
        from_region_id = unit.region_id
        unit.region_id = to_region_id
        unit.updated_at = utc_now()
        storage.write_save(save)
    return {
        "unit": unit,
        "movement": {
            "from_region_id": from_region_id,
            "to_region_id": to_region_id,
            "arrives_at": unit.updated_at,
        },
    }


# ── Map queries ──────────────────────────────────────────


def occupations(save: Save) -> dict[str, str]:
    """region id -> occupying nation code. The first nation listing a region keeps it."""
    result: dict[str, str] = {}
    for code, state in save.nations.items():
        for region in state.occupied_regions:
            result.setdefault(region, code)
    return result


def nation_with_state(save: Save, registry: NationRegistry, code: str) -> dict[str, Any]:
    """Registry metadata merged with the nation's live state in this save."""
    nation = registry.require(code)
    data = nation.model_dump()
    state = save.nations.get(nation.code)
    if state is not None:
        data.update(state.model_dump())
    return data
