"""WebSocket feed of game notifications."""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

router = APIRouter()


@router.websocket("/ws")
async def notifications(ws: WebSocket):
    """Push-only; anything the client sends is ignored."""
    broadcaster = ws.app.state.runtime.broadcaster
    await broadcaster.register(ws)
    try:
        await ws.send_json({"type": "connected"})
        while True:
            await ws.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await broadcaster.unregister(ws)
