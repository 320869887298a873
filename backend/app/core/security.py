# app/core/security.py
"""
Security module for authentication.
Handles password hashing and JWT session token creation/validation.

Token functions are pure: the signing secret and lifetime are passed in by the
caller (taken from the Settings object), nothing is read from the environment here.
"""
import datetime as dt
import jwt  # PyJWT
from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from app.core.errors import TokenExpired, TokenInvalid

# Password hashing context
# Argon2 is a modern, salted, memory-hard password hashing algorithm
pwd_context = CryptContext(
    schemes=["argon2"],  # Use Argon2 for password hashing
    deprecated="auto",   # Automatically handle deprecated schemes
)

ACCESS_TOKEN_EXPIRE_MINUTES = 60  # Session tokens live for one hour
JWT_ALG = "HS256"  # JWT signing algorithm (HMAC SHA-256)

def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Args:
        plain: Plain text password to hash

    Returns:
        Hashed password string (safe to store in database)
    """
    return pwd_context.hash(plain)

def verify_password(plain: str, hashed: str) -> bool:
    """
    Verify a plain text password against a stored hash.

    The comparison is constant-time (passlib). A stored value that is not a
    recognised hash verifies as False instead of raising.
    """
    try:
        return pwd_context.verify(plain, hashed)
    except (UnknownHashError, ValueError):
        return False

def create_access_token(
    user_id: str,
    name: str,
    secret: str,
    expire_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES,
) -> str:
    """
    Create a signed session token.

    Token payload includes:
        - sub: Subject (user ID)
        - name: User display name
        - iat: Issued at timestamp
        - exp: Expiration timestamp (iat + expire_minutes)
    """
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "sub": user_id,
        "name": name,
        "iat": now,
        "exp": now + dt.timedelta(minutes=expire_minutes),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALG)

def decode_access_token(token: str, secret: str) -> dict:
    """
    Decode and validate a session token.

    Raises:
        TokenExpired: the expiry has elapsed (checked even when the signature is valid)
        TokenInvalid: bad signature, malformed token or missing subject
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALG],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpired(str(e)) from e
    except jwt.InvalidTokenError as e:
        raise TokenInvalid(str(e)) from e
    return payload
