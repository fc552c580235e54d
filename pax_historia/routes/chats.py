"""Diplomatic chat endpoints."""

from fastapi import APIRouter

from pax_historia import storage

from .deps import RuntimeDep
from .models import ChatMessageBody, StartChatBody

router = APIRouter()


@router.post("/saves/{save_id}/chats")
async def start_chat(save_id: str, body: StartChatBody, rt: RuntimeDep):
    return await rt.diplomacy.start_session(save_id, body.participant_nations, body.topic)


@router.get("/saves/{save_id}/chats")
async def list_chats(save_id: str, rt: RuntimeDep):
    """Active chats only."""
    return rt.diplomacy.list_sessions(save_id)


@router.get("/saves/{save_id}/chats/available")
async def available_nations(save_id: str, rt: RuntimeDep):
    """Nations the player can open a chat with."""
    return rt.diplomacy.available_nations(save_id)


@router.get("/saves/{save_id}/chats/{chat_id}/messages")
async def chat_messages(save_id: str, chat_id: str, rt: RuntimeDep):
    return rt.diplomacy.list_messages(save_id, chat_id)


@router.post("/saves/{save_id}/chats/{chat_id}/messages")
async def post_message(save_id: str, chat_id: str, body: ChatMessageBody, rt: RuntimeDep):
    """Send a message and collect one reply per other participant."""
    sender = body.sender_nation or storage.load_save(save_id).player_nation_code
    responses = await rt.diplomacy.post_message(
        save_id, chat_id, sender, body.message, is_player=body.is_player
    )
    await rt.broadcaster.broadcast(
        {"type": "diplomatic_message", "chat_id": chat_id, "responses": responses}
    )
    return {"ok": True, "responses": responses}


@router.post("/saves/{save_id}/chats/{chat_id}/close")
async def close_chat(save_id: str, chat_id: str, rt: RuntimeDep):
    await rt.diplomacy.close_session(save_id, chat_id)
    return {"ok": True}
