# app/core/errors.py
"""
Application error taxonomy.

Every error a handler can raise on purpose derives from AppError, which
carries the HTTP status, a stable machine code and a short human-readable
message. The handlers registered in app.main render them as
{"error": message, "code": code}; nothing here ever reaches the client as a
stack trace.
"""
from fastapi import status


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"
    message: str = "Something went wrong!"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class ValidationError(AppError):
    """Malformed or missing input."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "VALIDATION_ERROR"
    message = "Invalid request"


class DuplicateEmail(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "EMAIL_EXISTS"
    message = "Email already registered"


class InvalidCredentials(AppError):
    """Login failure. Deliberately the same for unknown email and wrong password."""
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "INVALID_CREDENTIALS"
    message = "Invalid credentials"


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "AUTH_REQUIRED"
    message = "Access denied"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "AUTH_INVALID_TOKEN"
    message = "Invalid token"


class ServerConfigurationError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "SERVER_CONFIGURATION_ERROR"
    message = "Server configuration error"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    message = "User not found"


class UploadError(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "UPLOAD_FAILED"
    message = "Error uploading file"


class InternalError(AppError):
    """Catch-all for unexpected store or transport failures."""


# -------- token failures (internal, never rendered directly) --------
class TokenError(Exception):
    pass


class TokenExpired(TokenError):
    pass


class TokenInvalid(TokenError):
    pass
