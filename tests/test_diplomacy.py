"""Tests for diplomatic chat sessions and AI partner replies."""

import pytest

from stub_llm import StubLLM

from pax_historia import storage
from pax_historia.diplomacy import DiplomacyManager
from pax_historia.errors import ChatNotFound, GameValidationError
from pax_historia.generation import GenerationClient
from pax_historia.llm import LLMError


@pytest.fixture
def llm() -> StubLLM:
    return StubLLM()


@pytest.fixture
def manager(registry, llm) -> DiplomacyManager:
    return DiplomacyManager(registry, GenerationClient(llm))


async def test_start_bilateral(manager, save):
    chat = await manager.start_session(save.id, ["ita", "ger"])
    assert chat.chat_type == "bilateral"
    assert chat.participant_nations == ["ITA", "GER"]
    assert chat.topic == "Diplomacy"
    assert storage.load_save(save.id).chats[0].id == chat.id


async def test_start_conference(manager, save):
    chat = await manager.start_session(save.id, ["ITA", "GER", "AUS"], topic="Danube")
    assert chat.chat_type == "conference"
    assert chat.topic == "Danube"


async def test_start_without_participants(manager, save):
    with pytest.raises(GameValidationError):
        await manager.start_session(save.id, [" "])


async def test_post_collects_replies_in_participant_order(manager, llm, save):
    chat = await manager.start_session(save.id, ["ITA", "GER", "ENG"])
    llm._queues["diplomacy"] = ["Berlin agrees.", "London refuses."]

    replies = await manager.post_message(save.id, chat.id, "ita", "Shall we divide Africa?")

    assert [r["nation"] for r in replies] == ["GER", "ENG"]
    assert replies[0]["message"] == "Berlin agrees."
    assert replies[0]["nation_name"] == "Germany"
    assert replies[0]["leader"] == "Adolf Hitler"
    stored = storage.load_save(save.id).find_chat(chat.id)
    assert [m.sender_nation for m in stored.messages] == ["ITA", "GER", "ENG"]
    assert stored.messages[0].sender_is_player is True
    assert stored.messages[1].sender_is_player is False
    assert all(m.game_date == "1936-01-01" for m in stored.messages)
    llm.assert_exhausted()


async def test_second_partner_sees_first_reply(manager, llm, save):
    chat = await manager.start_session(save.id, ["ITA", "GER", "ENG"])
    llm._queues["diplomacy"] = ["Berlin agrees.", "London refuses."]
    await manager.post_message(save.id, chat.id, "ITA", "Proposal")
    second = llm.calls[1]["messages"]
    assert [m["content"] for m in second[1:]] == ["Proposal", "Berlin agrees."]
    assert "Responding as: United Kingdom" in second[0]["content"]


async def test_length_target_from_player_history(manager, llm, save):
    chat = await manager.start_session(save.id, ["ITA", "GER"])
    llm._queues["diplomacy"] = ["ok", "ok", "ok"]
    for text in ("a" * 30, "b" * 50, "c" * 40):
        await manager.post_message(save.id, chat.id, "ITA", text)
    system = llm.calls[-1]["messages"][0]["content"]
    assert "(40 characters)" in system
    assert "between 36 and 44 characters" in system


async def test_unknown_partner_skipped(manager, llm, save):
    chat = await manager.start_session(save.id, ["ITA", "XYZ", "GER"])
    llm._queues["diplomacy"] = ["Berlin agrees."]
    replies = await manager.post_message(save.id, chat.id, "ITA", "Hello")
    assert [r["nation"] for r in replies] == ["GER"]


async def test_failed_partner_gets_no_message(manager, llm, save):
    chat = await manager.start_session(save.id, ["ITA", "GER", "ENG"])
    llm._queues["diplomacy"] = [LLMError("timeout"), "London refuses."]
    replies = await manager.post_message(save.id, chat.id, "ITA", "Hello")
    assert [r["nation"] for r in replies] == ["ENG"]
    stored = storage.load_save(save.id).find_chat(chat.id)
    assert [m.sender_nation for m in stored.messages] == ["ITA", "ENG"]


async def test_sender_only_chat_has_no_replies(manager, save):
    chat = await manager.start_session(save.id, ["ITA"])
    assert await manager.post_message(save.id, chat.id, "ITA", "Monologue") == []
    assert len(storage.load_save(save.id).find_chat(chat.id).messages) == 1


async def test_post_to_unknown_chat(manager, save):
    with pytest.raises(ChatNotFound):
        await manager.post_message(save.id, "nope", "ITA", "Hello")


async def test_close_hides_chat_but_keeps_messages(manager, llm, save):
    chat = await manager.start_session(save.id, ["ITA", "GER"])
    llm._queues["diplomacy"] = ["Jawohl."]
    await manager.post_message(save.id, chat.id, "ITA", "Hello")

    await manager.close_session(save.id, chat.id)

    assert manager.list_sessions(save.id) == []
    messages = manager.list_messages(save.id, chat.id)
    assert [m["message_text"] for m in messages] == ["Hello", "Jawohl."]


async def test_close_unknown_chat(manager, save):
    with pytest.raises(ChatNotFound):
        await manager.close_session(save.id, "nope")


async def test_list_sessions_enriched(manager, llm, save):
    chat = await manager.start_session(save.id, ["ITA", "GER"])
    empty = await manager.start_session(save.id, ["ITA", "FRA"])
    llm._queues["diplomacy"] = ["Jawohl."]
    await manager.post_message(save.id, chat.id, "ITA", "Hello")

    sessions = {s["id"]: s for s in manager.list_sessions(save.id)}
    assert sessions[chat.id]["message_count"] == 2
    assert sessions[chat.id]["last_message"] == "Jawohl."
    assert sessions[empty.id]["message_count"] == 0
    assert sessions[empty.id]["last_message"] is None


async def test_list_messages_enriched(manager, llm, save):
    chat = await manager.start_session(save.id, ["ITA", "GER"])
    llm._queues["diplomacy"] = ["Jawohl."]
    await manager.post_message(save.id, chat.id, "ITA", "Hello")
    messages = manager.list_messages(save.id, chat.id)
    assert messages[0]["sender_name"] == "Italy"
    assert messages[0]["leader_title"] == "Duce"
    assert messages[1]["leader_name"] == "Adolf Hitler"


def test_available_nations_excludes_player(manager, save):
    available = manager.available_nations(save.id)
    codes = [n["code"] for n in available]
    assert "ITA" not in codes
    assert len(codes) == 18
    assert available[0]["is_major_power"] is True
