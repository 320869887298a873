# app/schemas/message.py
"""
Pydantic schemas for chat endpoints and broadcast events.
"""
from __future__ import annotations
from pydantic import BaseModel, constr

class SendMessageIn(BaseModel):
    """
    Request model for sending a global chat message.
    senderId is optional; when present it must match the authenticated user.
    """
    message: constr(strip_whitespace=True, min_length=1)
    senderId: str | None = None

class SenderOut(BaseModel):
    """Public display fields of a message sender."""
    id: str
    name: str
    profilePicture: str | None = None

class MessageOut(BaseModel):
    id: str
    message: str
    sender: SenderOut
    receiver: str | None = None  # Null for global messages
    createdAt: str

    @classmethod
    def from_message(cls, m) -> "MessageOut":
        """Build from a Message whose sender relation is already fetched."""
        return cls(
            id=str(m.id),
            message=m.text,
            sender=SenderOut(id=str(m.sender.id), name=m.sender.name, profilePicture=m.sender.profile_picture),
            receiver=str(m.receiver_id) if m.receiver_id else None,
            createdAt=m.created_at.isoformat(),
        )

class MessageEvent(BaseModel):
    """Payload of the updateMessages broadcast event."""
    content: str
    senderName: str
    senderProfilePicture: str | None = None
    timestamp: str

    @classmethod
    def from_message(cls, m) -> "MessageEvent":
        return cls(
            content=m.text,
            senderName=m.sender.name,
            senderProfilePicture=m.sender.profile_picture,
            timestamp=m.created_at.isoformat(),
        )
