"""
Database models module initialization.
Exports all database models for convenient imports throughout the application.

Models exported:
- User: Account, credentials and public profile
- Message: Chat message (sender, optional receiver, text)
"""
from .user import User
from .message import Message
