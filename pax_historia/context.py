"""World-state context shared by turn generation, the advisor and diplomacy.

Prompts only carry nations in the *priority set*: the player, any nation
whose code appears in a pending action, nations affected by recent events,
and the major powers. The summary is built by ``build_world_summary`` and
nowhere else.
"""

import re
from typing import Any

from pax_historia.models import Save
from pax_historia.prompts import AdvisorParams, TurnEventsParams
from pax_historia.registry import NationRegistry

RECENT_EVENT_WINDOW = 10

_CODE_RE = re.compile(r"[A-Z]{3}")


def priority_nations(save: Save, registry: NationRegistry) -> set[str]:
    codes = {save.player_nation_code.upper()}
    for action in save.pending_actions():
        codes.add(action.nation_code.upper())
        codes.update(_CODE_RE.findall(action.action_text))
    for event in save.recent_events(RECENT_EVENT_WINDOW):
        codes.update(code.upper() for code in event.affected_nations)
    codes.update(n.code for n in registry.major_powers())
    return codes


def build_world_summary(save: Save, registry: NationRegistry) -> dict[str, dict[str, Any]]:
    """code -> {name, stability, war_support, occupied, at_war} for the priority set.

    Only nations present both in the save and in the registry are included.
    """
    summary: dict[str, dict[str, Any]] = {}
    for code in sorted(priority_nations(save, registry)):
        state = save.nations.get(code)
        if state is None or code not in registry:
            continue
        summary[code] = {
            "name": registry[code].name,
            "stability": state.stability,
            "war_support": state.war_support,
            "occupied": len(state.occupied_regions),
            "at_war": state.at_war,
        }
    return summary


def _event_brief(event) -> dict[str, Any]:
    return {
        "title": event.title,
        "description": event.description,
        "date": event.game_date,
        "type": event.event_type,
        "severity": event.severity,
    }


def _action_brief(action) -> dict[str, Any]:
    return {
        "nation": action.nation_code,
        "type": action.action_type,
        "text": action.action_text,
    }


def recent_event_briefs(save: Save, count: int = RECENT_EVENT_WINDOW) -> list[dict[str, Any]]:
    return [_event_brief(e) for e in save.recent_events(count)]


def build_turn_context(save: Save, registry: NationRegistry, time_jump: str) -> TurnEventsParams:
    code = save.player_nation_code
    return TurnEventsParams(
        time_jump=time_jump,
        current_date=save.current_date,
        nation_code=code,
        nation_name=registry.name_of(code),
        actions=[_action_brief(a) for a in save.pending_actions()],
        recent_events=recent_event_briefs(save),
        world_state=build_world_summary(save, registry),
        world_context=save.world_context,
        simulation_rules=save.simulation_rules,
        historical_context=registry.roadmap_context(code),
    )


def build_advisor_context(save: Save, registry: NationRegistry, question: str) -> AdvisorParams:
    code = save.player_nation_code
    state = save.nations.get(code)
    return AdvisorParams(
        question=question,
        nation_code=code,
        nation_name=registry.name_of(code),
        current_date=save.current_date,
        world_state=build_world_summary(save, registry),
        recent_events=recent_event_briefs(save),
        pending_actions=[_action_brief(a) for a in save.pending_actions()],
        at_war=state.at_war if state else False,
        occupied_regions=list(state.occupied_regions) if state else [],
        historical_context=registry.roadmap_context(code),
    )
