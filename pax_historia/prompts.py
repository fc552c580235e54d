"""Handlebars prompt rendering for the three generation request kinds.

Each request kind has a typed parameter object and a pure renderer that turns
it into the role-tagged message list sent to the LLM:

    PromptKind.TURN_EVENTS  TurnEventsParams  -> game master system prompt + turn brief
    PromptKind.ADVISOR      AdvisorParams     -> strategic advisor system prompt + question
    PromptKind.DIPLOMACY    DiplomacyParams   -> roleplay system prompt + chat transcript

Structured inputs (actions, events, world summary) are serialised to JSON
before rendering, so templates only ever interpolate strings. Triple-stash
`{{{ }}}` is used everywhere because prompts are plain text, not HTML.
"""

import enum
import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import pybars

from pax_historia.llm import PromptMessage
from pax_historia.models import ChatMessage

_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class PromptError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


class PromptKind(enum.Enum):
    TURN_EVENTS = "turn_events"
    ADVISOR = "advisor"
    DIPLOMACY = "diplomacy"


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        output = compiled(context)
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e
    return output if isinstance(output, str) else "".join(output)


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


# ── Templates ────────────────────────────────────────────

GAME_MASTER_TEMPLATE = """\
You are the Game Master of "Pax Historia", a high-fidelity grand strategy simulation of 1935-1945.
YOUR TASK: work out the consequences of the player's actions and generate realistic, specific, geographically accurate world events.

GENERATION RULES:
1. HISTORICAL CHRONOLOGY: always consult the historical roadmap of {{{nation_code}}} and its neighbours. It is {{{current_date}}}; events must reflect the historical reality of that period.
2. CONSEQUENCES: every action carries weight. Aggression provokes reactions, mobilisation raises tension. Allow plausible alternate history, but reward or punish the player with realistic events.
3. GEOGRAPHIC SPECIFICITY: name real cities, rivers, passes and commanders instead of saying "the army advances".
4. NATION TAGS: always write nation tags in square brackets, e.g. [ITA], [ETH].

RELEVANT HISTORICAL ROADMAP:
{{{historical_context}}}

CURRENT WORLD CONTEXT:
{{{world_context}}}

RESPONSE FORMAT (JSON only):
{
    "consequences": "Short analysis",
    "events": [
        {
            "title": "Event title",
            "description": "Event description",
            "event_type": "political|military|economic|diplomatic|social",
            "severity": "minor|moderate|major|critical",
            "affected_nations": ["GER", "ITA"],
            "state_changes": {
                "NATION_CODE": {
                    "stability": 0,
                    "war_support": 0,
                    "treasury": 0,
                    "occupied_regions": ["REGION_ID"]
                }
            }
        }
    ],
    "global_tension_delta": 0
}
Use exactly the keys "events", "title", "description", "event_type", "severity", "affected_nations" and "state_changes".
IMPORTANT: do not write a '+' sign before positive numbers (write 5, not +5)."""

TURN_BRIEF_TEMPLATE = """\
TURN SIMULATION:
Time jump: {{{time_jump}}}
Start date: {{{current_date}}}
Player nation: {{{nation_name}}} ({{{nation_code}}})

PLAYER'S PENDING ACTIONS:
{{{actions}}}

RECENT EVENT HISTORY:
{{{recent_events}}}

WORLD STATE:
{{{world_state}}}

SIMULATION RULES:
{{{simulation_rules}}}

Generate 3-6 significant events and their consequences for this period ({{{time_jump}}}).
Every event MUST be realistic, impactful and consistent with the current situation.
Reply ONLY with JSON in the required format."""

ADVISOR_TEMPLATE = """\
You are the High Strategic Advisor of {{{nation_name}}} on {{{current_date}}}.
YOUR MANDATE: give cold, precise, historically grounded analysis. Act as a strategic compass that helps the leader avoid the failures of the past and pursue national goals wisely.

NATIONAL ROADMAP AND HISTORY:
{{{historical_context}}}

IRON RULES:
1. Use the national history and psyche to understand the nation's motives, traumas and ambitions.
2. Use the historical mistakes to warn the player firmly when they are heading towards a known disaster.
3. Weigh the nation's real strategic dilemmas.
4. Anchor every recommendation in real places.
5. Always write nations as [TAG].
6. If the player only sends a short informal message ("OK", "Thanks", "Understood"), reply with ONE very short sentence and skip the sections below.

ALWAYS ANSWER WITH THIS LAYOUT (except for short messages, see rule 6):
---
### HISTORICAL AND STRATEGIC ANALYSIS
[Analysis based on the roadmap, the dilemmas and the current situation.]

### MILITARY AND DIPLOMATIC ORDERS
1. [Specific action with place and TAG]
2. [Specific action with place and TAG]

### INTELLIGENCE AND MISTAKE PREVENTION
- [A warning based on the nation's historical mistakes or real risks of the period]
---"""

ADVISOR_QUESTION_TEMPLATE = """\
CURRENT SITUATION ({{{current_date}}}):
Nation: {{{nation_name}}} ({{{nation_code}}})
At war: {{#if at_war}}Yes{{else}}No{{/if}}
Occupied regions: {{{occupied_regions}}}

WORLD STATE (relevant nations):
{{{world_state}}}

LATEST WORLD EVENTS:
{{{recent_events}}}

PLAYER ACTIONS IN PROGRESS:
{{{pending_actions}}}

THE SOVEREIGN ASKS: "{{{question}}}\""""

DIPLOMACY_TEMPLATE = """\
We are making a turn-based strategy game where the player can engage in diplomacy. We need you to simulate this diplomacy by roleplaying as the polities in this chat.

PARTICIPANTS: {{{participants}}}
PLAYER POLITY: {{{player_polity}}}
CURRENT DATE: {{{current_date}}}

**Instructions for Roleplay:**
1. PROFESSIONALISM: You are a competent polity. No nonsense. Straight to the point.
2. OPEN-MINDEDNESS: Be receptive to propositions, but ALWAYS move towards a solid answer (accept/refuse).
3. TONE MATCHING: Your tone should MATCH the tone of the player ({{{player_polity}}}), leaning towards professionalism over slang.
4. CHARACTERS: No random math symbols or hashtags. No third-person speaking.

**Output Length Rule (CRITICAL):**
No matter what, the size of your message will ALWAYS match the average size of the player's messages in this specific chat ({{{target_length}}} characters).
Stay between {{{min_length}}} and {{{max_length}}} characters. NEVER BREAK THIS RULE.

**World Context:**
World Context Before Round One:
{{{world_context}}}

Simulation Rules:
{{{simulation_rules}}}

Current World State:
{{{world_state}}}

Current Event History:
{{{event_history}}}

Responding as: {{{responding_polity}}}"""


# ── Parameter objects ────────────────────────────────────


@dataclass
class TurnEventsParams:
    time_jump: str
    current_date: str
    nation_code: str
    nation_name: str
    actions: list[dict[str, Any]]
    recent_events: list[dict[str, Any]]
    world_state: dict[str, dict[str, Any]]
    world_context: str = ""
    simulation_rules: str = ""
    historical_context: str = ""


@dataclass
class AdvisorParams:
    question: str
    nation_code: str
    nation_name: str
    current_date: str
    world_state: dict[str, dict[str, Any]]
    recent_events: list[dict[str, Any]] = field(default_factory=list)
    pending_actions: list[dict[str, Any]] = field(default_factory=list)
    at_war: bool = False
    occupied_regions: list[str] = field(default_factory=list)
    historical_context: str = ""


@dataclass
class DiplomacyParams:
    participants: list[str]  # display names
    player_polity: str
    responding_polity: str
    current_date: str
    transcript: list[ChatMessage]
    target_length: int
    world_state: dict[str, dict[str, Any]] = field(default_factory=dict)
    event_history: list[dict[str, Any]] = field(default_factory=list)
    world_context: str = ""
    simulation_rules: str = ""

    @property
    def min_length(self) -> int:
        return round(self.target_length * 0.9)

    @property
    def max_length(self) -> int:
        return round(self.target_length * 1.1)


# ── Renderers ────────────────────────────────────────────


def render_turn_events(params: TurnEventsParams) -> list[PromptMessage]:
    system = render_prompt(GAME_MASTER_TEMPLATE, {
        "nation_code": params.nation_code,
        "current_date": params.current_date,
        "historical_context": params.historical_context,
        "world_context": params.world_context or "None",
    })
    user = render_prompt(TURN_BRIEF_TEMPLATE, {
        "time_jump": params.time_jump,
        "current_date": params.current_date,
        "nation_name": params.nation_name,
        "nation_code": params.nation_code,
        "actions": _dump(params.actions),
        "recent_events": _dump(params.recent_events),
        "world_state": _dump(params.world_state),
        "simulation_rules": params.simulation_rules or "None",
    })
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]


def render_advisor(params: AdvisorParams) -> list[PromptMessage]:
    system = render_prompt(ADVISOR_TEMPLATE, {
        "nation_name": params.nation_name,
        "current_date": params.current_date,
        "historical_context": params.historical_context,
    })
    user = render_prompt(ADVISOR_QUESTION_TEMPLATE, {
        "current_date": params.current_date,
        "nation_name": params.nation_name,
        "nation_code": params.nation_code,
        "at_war": params.at_war,
        "occupied_regions": ", ".join(params.occupied_regions) or "None",
        "world_state": _dump(params.world_state),
        "recent_events": _dump(params.recent_events),
        "pending_actions": _dump(params.pending_actions),
        "question": params.question,
    })
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]


def render_diplomacy(params: DiplomacyParams) -> list[PromptMessage]:
    """System prompt followed by the chat so far (player lines as user turns)."""
    system = render_prompt(DIPLOMACY_TEMPLATE, {
        "participants": ", ".join(params.participants),
        "player_polity": params.player_polity,
        "current_date": params.current_date,
        "target_length": str(params.target_length),
        "min_length": str(params.min_length),
        "max_length": str(params.max_length),
        "world_context": params.world_context or "Historical 1936 start.",
        "simulation_rules": params.simulation_rules or "Standard grand strategy rules.",
        "world_state": _dump(params.world_state),
        "event_history": _dump(params.event_history),
        "responding_polity": params.responding_polity,
    })
    messages: list[PromptMessage] = [{"role": "system", "content": system}]
    for msg in params.transcript:
        messages.append({
            "role": "user" if msg.sender_is_player else "assistant",
            "content": msg.message_text,
        })
    return messages


_RENDERERS: dict[PromptKind, Callable[[Any], list[PromptMessage]]] = {
    PromptKind.TURN_EVENTS: render_turn_events,
    PromptKind.ADVISOR: render_advisor,
    PromptKind.DIPLOMACY: render_diplomacy,
}


def render_messages(kind: PromptKind, params: Any) -> list[PromptMessage]:
    """Dispatch to the renderer for ``kind``."""
    return _RENDERERS[kind](params)
