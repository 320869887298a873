# app/models/message.py
import uuid
from tortoise import fields, models

class Message(models.Model):
    """
    Chat message. Immutable once created (no edit or delete route exists).
    A null receiver means the message is global and visible to everyone.
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    sender = fields.ForeignKeyField(
        "models.User",
        related_name="sent_messages",
        on_delete=fields.CASCADE,
    )
    receiver = fields.ForeignKeyField(
        "models.User",
        related_name="received_messages",
        null=True,
        on_delete=fields.SET_NULL,
    )  # Reserved for direct messages; global chat leaves it empty
    text = fields.TextField()
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "messages"
        ordering = ["created_at"]
