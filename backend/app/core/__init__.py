# app/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- db: Database configuration and connection management
- errors: Error taxonomy rendered as JSON error bodies
- pubsub: Global WebSocket broadcast channel
- security: Password hashing and session tokens
- storage: Object storage for profile pictures
"""
