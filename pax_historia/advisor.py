"""Strategic advisor: canned and free-form questions about the player's position."""

from typing import Any

from pax_historia import storage
from pax_historia.context import build_advisor_context
from pax_historia.generation import GenerationClient
from pax_historia.registry import NationRegistry

SUMMARY_QUESTION = (
    "Give a strategic summary of the current situation of my nation and of the world."
)
SUGGESTIONS_QUESTION = (
    "Suggest 3 immediate actions I could take today. Be concise, one line per action."
)
BRAINSTORM_QUESTION = (
    "Suggest 5 possible strategic actions I could undertake right now. "
    "Consider the geopolitical situation, my position and my goals. "
    "For each action, briefly explain why it could be advantageous."
)


class Advisor:
    def __init__(self, registry: NationRegistry, generation: GenerationClient) -> None:
        self.registry = registry
        self.generation = generation

    async def _answer(self, save_id: str, question: str) -> tuple[str, Any]:
        save = storage.load_save(save_id)
        params = build_advisor_context(save, self.registry, question)
        result = await self.generation.advise(params)
        return result.text, save

    async def ask(self, save_id: str, question: str) -> dict[str, Any]:
        text, save = await self._answer(save_id, question)
        return {
            "question": question,
            "response": text,
            "nation": self.registry.name_of(save.player_nation_code),
        }

    async def summary(self, save_id: str) -> dict[str, Any]:
        text, save = await self._answer(save_id, SUMMARY_QUESTION)
        return {
            "type": "summary",
            "response": text,
            "context": {
                "date": save.current_date,
                "nation": self.registry.name_of(save.player_nation_code),
                "turn": save.turn_number,
            },
        }

    async def strategic(self, save_id: str, focus: str | None = None) -> dict[str, Any]:
        focus = focus or "general"
        text, _ = await self._answer(save_id, f"Give strategic advice focused on: {focus}.")
        return {"type": "strategic", "focus": focus, "response": text}

    async def suggestions(self, save_id: str) -> dict[str, Any]:
        text, _ = await self._answer(save_id, SUGGESTIONS_QUESTION)
        return {"type": "quick_suggestions", "response": text}

    async def brainstorm(self, save_id: str) -> dict[str, Any]:
        text, _ = await self._answer(save_id, BRAINSTORM_QUESTION)
        return {"suggestions": text}
