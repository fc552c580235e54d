"""Tests for the strategic advisor."""

import pytest

from stub_llm import StubLLM

from pax_historia import engine
from pax_historia.advisor import Advisor
from pax_historia.errors import SaveNotFound
from pax_historia.generation import GenerationClient
from pax_historia.llm import LLMError


@pytest.fixture
def llm() -> StubLLM:
    return StubLLM()


@pytest.fixture
def advisor(registry, llm) -> Advisor:
    return Advisor(registry, GenerationClient(llm))


async def test_ask(advisor, llm, save):
    llm._queues["advisor"] = ["Secure Abyssinia before the League reacts."]
    result = await advisor.ask(save.id, "What about Ethiopia?")
    assert result == {
        "question": "What about Ethiopia?",
        "response": "Secure Abyssinia before the League reacts.",
        "nation": "Italy",
    }
    prompt = llm.calls[0]["messages"][-1]["content"]
    assert "What about Ethiopia?" in prompt
    assert "Nation: Italy (ITA)" in prompt
    assert "At war: No" in prompt


async def test_pending_actions_reach_the_prompt(advisor, llm, save):
    await engine.submit_action(save.id, "Mobilise the Alpini")
    llm._queues["advisor"] = ["Good idea."]
    await advisor.ask(save.id, "Is this wise?")
    assert "Mobilise the Alpini" in llm.calls[0]["messages"][-1]["content"]


async def test_summary(advisor, llm, save):
    llm._queues["advisor"] = ["All quiet."]
    result = await advisor.summary(save.id)
    assert result["type"] == "summary"
    assert result["response"] == "All quiet."
    assert result["context"] == {"date": "1936-01-01", "nation": "Italy", "turn": 1}


async def test_strategic_defaults_focus(advisor, llm, save):
    llm._queues["advisor"] = ["Build forts.", "Sell oil."]
    general = await advisor.strategic(save.id)
    economic = await advisor.strategic(save.id, "economy")
    assert general["focus"] == "general"
    assert economic == {"type": "strategic", "focus": "economy", "response": "Sell oil."}
    assert "focused on: economy" in llm.calls[1]["messages"][-1]["content"]


async def test_suggestions_and_brainstorm(advisor, llm, save):
    llm._queues["advisor"] = ["1. a\n2. b\n3. c", "five ideas"]
    assert (await advisor.suggestions(save.id))["type"] == "quick_suggestions"
    assert await advisor.brainstorm(save.id) == {"suggestions": "five ideas"}
    llm.assert_exhausted()


async def test_backend_failure_becomes_advisor_text(advisor, llm, save):
    llm._queues["advisor"] = [LLMError("Cannot connect to LLM backend at x")]
    result = await advisor.ask(save.id, "Anyone there?")
    assert result["response"].startswith("Advisor unavailable:")
    assert "Cannot connect" in result["response"]


async def test_unknown_save(advisor):
    with pytest.raises(SaveNotFound):
        await advisor.ask("missing", "?")
