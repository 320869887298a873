# app/api/routers/messages.py
import logging
from fastapi import APIRouter, Depends, status
from app.api.deps import get_channel, get_current_user
from app.core.errors import Forbidden
from app.core.pubsub import UPDATE_MESSAGES, Channel
from app.models.message import Message
from app.models.user import User
from app.schemas.message import MessageEvent, MessageOut, SendMessageIn

logger = logging.getLogger("uvicorn.error")

# Same /auth prefix as the account routes so existing clients keep their paths
router = APIRouter(prefix="/auth", tags=["messages"])

@router.post("/send-message", status_code=status.HTTP_201_CREATED)
async def send_message(
    body: SendMessageIn,
    user: User = Depends(get_current_user),
    chan: Channel = Depends(get_channel),
):
    """
    Post a message to the global chat and broadcast it to connected clients.

    The sender is always the authenticated user; a senderId that names anyone
    else is rejected. The message is stored with no receiver (global), and one
    updateMessages event carrying the sender's display name and picture is
    published after the store succeeds.

    Raises:
        Forbidden (403): senderId does not match the session
        ValidationError (422): empty message
    """
    if body.senderId is not None and body.senderId != str(user.id):
        logger.warning("[chat] user %s tried to send as %s", user.id, body.senderId)
        raise Forbidden("Sender does not match authenticated user")

    msg = await Message.create(sender=user, receiver=None, text=body.message)
    # Resolve the sender relation before building the event
    await msg.fetch_related("sender")

    await chan.publish(UPDATE_MESSAGES, MessageEvent.from_message(msg).model_dump())
    return {"message": "Message sent successfully", "data": MessageOut.from_message(msg).model_dump()}

@router.get("/get-messages")
async def get_messages():
    """
    Return every stored message, oldest first, with the sender resolved to
    its public display fields. No pagination.
    """
    rows = await Message.all().order_by("created_at").prefetch_related("sender")
    return [MessageOut.from_message(m).model_dump() for m in rows]
