from fastapi import APIRouter, Depends, WebSocket
from starlette.websockets import WebSocketDisconnect
import json
import logging
from app.api.deps import get_channel
from app.core.pubsub import UPDATE_MESSAGES, Channel

logger = logging.getLogger("uvicorn.error")

router = APIRouter()

async def _send_error(ws: WebSocket, message: str):
    await ws.send_json({"event": "error", "data": {"message": message}})

@router.websocket("/ws/chat")
async def ws_chat(ws: WebSocket, chan: Channel = Depends(get_channel)):
    """
    WebSocket endpoint for the global chat broadcast.

    Message flow:
    1. Client connects and is subscribed to the global channel
    2. Server sends: {"event": "ready"}
    3. Every message posted through POST /api/auth/send-message arrives as
       {"event": "updateMessages", "data": {...}} while the client stays connected
    4. A client may publish itself by sending
       {"event": "newMessage", "data": {...}}; the data is relayed to every
       connected client (the sender included) as updateMessages

    Binary frames, invalid JSON and newMessage frames without data get an
    {"event": "error"} reply; the connection stays open.
    Relayed frames are not persisted; use POST /api/auth/send-message for that.
    Clients are unsubscribed when the connection closes.
    """
    await ws.accept()
    await chan.subscribe(ws)
    logger.info("[ws_chat] connected (%d clients)", len(chan))
    try:
        await ws.send_json({"event": "ready"})
        while True:
            frame = await ws.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))
            raw = frame.get("text")
            if raw is None:
                await _send_error(ws, "text frames only")
                continue
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                await _send_error(ws, "invalid JSON")
                continue
            if not isinstance(msg, dict) or msg.get("event") != "newMessage":
                continue
            if msg.get("data") is None:
                await _send_error(ws, "newMessage requires data")
                continue
            await chan.publish(UPDATE_MESSAGES, msg["data"])
    except WebSocketDisconnect:
        logger.info("[ws_chat] disconnected")
    finally:
        chan.unsubscribe(ws)
