"""Diplomatic chats: per-save message threads answered by AI-driven nations."""

import logging
from typing import Any

from pax_historia import storage
from pax_historia.context import build_world_summary
from pax_historia.errors import GameValidationError
from pax_historia.generation import DiplomacyRequest, GenerationClient
from pax_historia.models import ChatMessage, DiplomaticChat, Save
from pax_historia.registry import NationRegistry

logger = logging.getLogger(__name__)

EVENT_HISTORY_WINDOW = 20


class DiplomacyManager:
    def __init__(self, registry: NationRegistry, generation: GenerationClient) -> None:
        self.registry = registry
        self.generation = generation

    async def start_session(
        self, save_id: str, participants: list[str], topic: str | None = None
    ) -> DiplomaticChat:
        codes = list(dict.fromkeys(code.strip().upper() for code in participants if code.strip()))
        if not codes:
            raise GameValidationError("A chat needs at least one participant")
        chat = DiplomaticChat(
            participant_nations=codes,
            chat_type="conference" if len(codes) > 2 else "bilateral",
            topic=topic or "Diplomacy",
        )
        async with storage.save_lock(save_id):
            save = storage.load_save(save_id)
            save.chats.append(chat)
            storage.write_save(save)
        logger.info(f"Started {chat.chat_type} chat {chat.id} in {save_id}: {codes}")
        return chat

    def _request(
        self, save: Save, chat: DiplomaticChat, responder: str, message: str
    ) -> DiplomacyRequest:
        return DiplomacyRequest(
            participants=[self.registry.name_of(c) for c in chat.participant_nations],
            player_polity=self.registry.name_of(save.player_nation_code),
            responding_polity=self.registry[responder].name,
            current_date=save.current_date,
            transcript=list(chat.messages),
            incoming_message=message,
            world_state=build_world_summary(save, self.registry),
            event_history=[
                {"title": e.title, "description": e.description, "date": e.game_date}
                for e in save.recent_events(EVENT_HISTORY_WINDOW)
            ],
            world_context=save.world_context,
            simulation_rules=save.simulation_rules,
        )

    async def post_message(
        self,
        save_id: str,
        chat_id: str,
        sender: str,
        text: str,
        is_player: bool = True,
    ) -> list[dict[str, Any]]:
        """Append ``text`` and collect one reply from every other participant.

        Replies are produced in participant order. A partner unknown to the
        registry, or whose generation fails, is skipped; the rest still land.
        The save is written once, after all replies.
        """
        sender = sender.strip().upper()
        if not text.strip():
            raise GameValidationError("Message must not be empty")

        async with storage.save_lock(save_id):
            save = storage.load_save(save_id)
            chat = save.find_chat(chat_id)
            chat.messages.append(ChatMessage(
                sender_nation=sender,
                sender_is_player=is_player,
                message_text=text,
                game_date=save.current_date,
            ))

            replies: list[dict[str, Any]] = []
            for code in chat.participant_nations:
                if code == sender:
                    continue
                if code not in self.registry:
                    logger.debug("skipping unknown chat participant %s", code)
                    continue
                result = await self.generation.diplomatic_reply(
                    self._request(save, chat, code, text)
                )
                if not result.ok:
                    continue
                chat.messages.append(ChatMessage(
                    sender_nation=code,
                    sender_is_player=False,
                    message_text=result.text,
                    game_date=save.current_date,
                ))
                nation = self.registry[code]
                replies.append({
                    "nation": code,
                    "nation_name": nation.name,
                    "leader": nation.leader_name,
                    "message": result.text,
                })

            storage.write_save(save)
        return replies

    async def close_session(self, save_id: str, chat_id: str) -> DiplomaticChat:
        async with storage.save_lock(save_id):
            save = storage.load_save(save_id)
            chat = save.find_chat(chat_id)
            chat.is_active = False
            storage.write_save(save)
        return chat

    def list_sessions(self, save_id: str) -> list[dict[str, Any]]:
        """Active chats with a message count and the text of the last message."""
        save = storage.load_save(save_id)
        return [
            {
                **chat.model_dump(),
                "message_count": len(chat.messages),
                "last_message": chat.messages[-1].message_text if chat.messages else None,
            }
            for chat in save.chats
            if chat.is_active
        ]

    def list_messages(self, save_id: str, chat_id: str) -> list[dict[str, Any]]:
        """All messages of a chat (closed or not), with sender display fields."""
        chat = storage.load_save(save_id).find_chat(chat_id)
        enriched = []
        for msg in chat.messages:
            nation = self.registry.get(msg.sender_nation)
            enriched.append({
                **msg.model_dump(),
                "sender_name": nation.name if nation else msg.sender_nation,
                "leader_name": nation.leader_name if nation else "Unknown",
                "leader_title": nation.leader_title if nation else "Leader",
            })
        return enriched

    def available_nations(self, save_id: str) -> list[dict[str, Any]]:
        """Every registry nation except the player's, majors first."""
        save = storage.load_save(save_id)
        return [
            n.model_dump(exclude={"manpower"})
            for n in self.registry.sorted_for_display()
            if n.code != save.player_nation_code
        ]
