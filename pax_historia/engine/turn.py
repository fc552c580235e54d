"""Turn advancement: pending actions in, events and a new date out."""

import logging

from pax_historia import storage
from pax_historia.context import build_turn_context
from pax_historia.generation import DegradedEvents, GenerationClient
from pax_historia.models import Event, GeneratedEvent, NationState, Save, TurnResult
from pax_historia.registry import NationRegistry

from .dates import advance_date, parse_game_date

logger = logging.getLogger(__name__)


def clamp(value: int, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, value))


def merge_regions(existing: list[str], incoming: list[str]) -> list[str]:
    """Union of two region lists, keeping first-seen order."""
    return list(dict.fromkeys([*existing, *incoming]))


def apply_state_changes(save: Save, event: GeneratedEvent) -> list[str]:
    """Apply an event's per-nation deltas to the save. Returns the codes touched.

    Codes not present in the save are skipped.
    """
    touched: list[str] = []
    for code, change in (event.state_changes or {}).items():
        nation: NationState | None = save.nations.get(code.upper())
        if nation is None:
            logger.debug("ignoring state change for unknown nation %s", code)
            continue
        if change.stability is not None:
            nation.stability = clamp(nation.stability + round(change.stability))
        if change.war_support is not None:
            nation.war_support = clamp(nation.war_support + round(change.war_support))
        if change.treasury is not None:
            nation.treasury += round(change.treasury)
        if change.occupied_regions:
            nation.occupied_regions = merge_regions(
                nation.occupied_regions, change.occupied_regions
            )
        touched.append(nation.code)
    return touched


class TurnEngine:
    """Runs one turn for a save under that save's lock.

    Everything is computed in memory and the document is written once at the
    end, so a failure or cancellation part-way through leaves the stored save
    untouched.
    """

    def __init__(self, registry: NationRegistry, generation: GenerationClient) -> None:
        self.registry = registry
        self.generation = generation

    async def advance_time(self, save_id: str, time_jump: str) -> TurnResult:
        async with storage.save_lock(save_id):
            save = storage.load_save(save_id)
            previous = parse_game_date(save.current_date)
            new_date = advance_date(previous, time_jump)
            consumed = {a.id for a in save.pending_actions()}

            logger.info(
                f"Advancing {save_id} by {time_jump} "
                f"(turn {save.turn_number}, {len(consumed)} pending action(s))"
            )
            params = build_turn_context(save, self.registry, time_jump)
            outcome = await self.generation.generate_events(params)
            if isinstance(outcome, DegradedEvents):
                logger.warning(f"Turn for {save_id} produced no events: {outcome.error}")

            new_events: list[Event] = []
            for generated in outcome.events:
                event = Event(
                    **generated.model_dump(),
                    game_date=save.current_date,
                    turn_number=save.turn_number,
                )
                save.events.append(event)
                apply_state_changes(save, event)
                new_events.append(event)

            save.current_date = new_date.isoformat()
            save.turn_number += 1
            for action in save.actions:
                if action.id in consumed:
                    action.status = "completed"

            storage.write_save(save)
            logger.info(
                f"Turn complete for {save_id}: {len(new_events)} event(s), "
                f"now {save.current_date} turn {save.turn_number}"
            )

        return TurnResult(
            previous_date=previous.isoformat(),
            new_date=save.current_date,
            turn_number=save.turn_number,
            events=new_events,
            processed_actions=len(consumed),
            global_tension_delta=outcome.global_tension_delta,
            generation_error=outcome.error if isinstance(outcome, DegradedEvents) else None,
        )
