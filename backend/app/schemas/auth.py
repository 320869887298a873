# app/schemas/auth.py
"""
Pydantic schemas for account endpoints.
Defines request models for register/login and the public user projection.
"""
from __future__ import annotations
import re
from pydantic import BaseModel, constr

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
EMAIL_RE = re.compile(EMAIL_PATTERN)

Email = constr(strip_whitespace=True, to_lower=True, min_length=3, max_length=256, pattern=EMAIL_PATTERN)

class RegisterIn(BaseModel):
    """Request model for account registration."""
    name: constr(strip_whitespace=True, min_length=1, max_length=128)
    email: Email
    password: constr(min_length=1)

class LoginIn(BaseModel):
    """Request model for login. Email is the login key."""
    email: constr(strip_whitespace=True, to_lower=True)
    password: str

class TokenClaims(BaseModel):
    """Identity resolved from a verified session token."""
    id: str  # User unique identifier (token "sub")
    name: str  # User display name at issuance time

class UserOut(BaseModel):
    """
    Public projection of a user.
    Never contains the password hash.
    """
    id: str
    name: str
    email: str
    profilePicture: str | None = None
    createdAt: str | None = None
    updatedAt: str | None = None

    @classmethod
    def from_user(cls, u) -> "UserOut":
        return cls(
            id=str(u.id),
            name=u.name,
            email=u.email,
            profilePicture=u.profile_picture,
            createdAt=u.created_at.isoformat() if u.created_at else None,
            updatedAt=u.updated_at.isoformat() if u.updated_at else None,
        )

class ProfilePatchIn(BaseModel):
    """
    Sparse profile update. Absent or empty fields are left unchanged.
    Sent as JSON, or as form fields when a picture is attached.
    """
    name: str | None = None
    email: str | None = None
    password: str | None = None
