# app/models/user.py
"""
Database model for users.
Represents a chat account: login credentials and the public profile
shown next to messages.
"""
import uuid
from tortoise import fields, models

class User(models.Model):
    """
    User database model.

    Relationships:
    - Has many sent Messages (via related_name="sent_messages")
    - Has many received Messages (via related_name="received_messages")

    Security:
    - Password is stored as an argon2 hash (never store plain text passwords)
    - Email is the login key and must be unique across all users
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)  # Primary key: unique user identifier
    name = fields.CharField(max_length=128)  # Display name shown in chat
    email = fields.CharField(
        max_length=256,
        unique=True,
        index=True
    )  # Login key (stored lower-cased, unique, indexed for fast lookups)
    password_hash = fields.CharField(max_length=255)  # Hashed password, never serialized
    profile_picture = fields.CharField(max_length=1024, null=True)  # Public URL of the uploaded picture
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"  # Database table name
