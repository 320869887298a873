# app/api/deps.py
import logging
from fastapi import Depends, Header, Request
from starlette.requests import HTTPConnection
from app.config import Settings
from app.core.errors import Forbidden, NotFound, ServerConfigurationError, TokenError, TokenExpired, Unauthorized
from app.core.pubsub import Channel
from app.core.security import decode_access_token
from app.core.storage import GCSStorage
from app.models.user import User
from app.schemas.auth import TokenClaims

logger = logging.getLogger("uvicorn.error")

def get_settings(request: Request) -> Settings:
    """The Settings object built once at startup (app.state.settings)."""
    return request.app.state.settings

def get_storage(request: Request) -> GCSStorage:
    return request.app.state.storage

def get_channel(conn: HTTPConnection) -> Channel:
    """The broadcast channel shared by HTTP routes and websockets (app.state.channel)."""
    return conn.app.state.channel

def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None

async def get_current_claims(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> TokenClaims:
    """
    FastAPI dependency that authenticates the request from its bearer token.

    Outcomes:
        - no token: Unauthorized (401)
        - signing secret missing from configuration: ServerConfigurationError (500)
        - token tampered, malformed or expired: Forbidden (403); which one is
          only logged, the client always sees "Invalid token"
        - otherwise the token claims are returned to the handler

    Usage:
        @router.get("/protected")
        async def protected_route(claims: TokenClaims = Depends(get_current_claims)):
            return {"user_id": claims.id}
    """
    token = _bearer_token(authorization)
    if not token:
        raise Unauthorized()

    if not settings.jwt_secret:
        logger.error("[auth] JWT_SECRET is not defined")
        raise ServerConfigurationError()

    try:
        payload = decode_access_token(token, settings.jwt_secret)
    except TokenError as e:
        reason = "expired" if isinstance(e, TokenExpired) else "invalid"
        logger.info("[auth] rejected %s token", reason)
        raise Forbidden() from e

    return TokenClaims(id=str(payload["sub"]), name=str(payload.get("name", "")))

async def get_current_user(claims: TokenClaims = Depends(get_current_claims)) -> User:
    """
    Load the authenticated user from the database.

    Raises:
        NotFound (404): the token is valid but the account no longer exists
    """
    user = await User.get_or_none(id=claims.id)
    if not user:
        raise NotFound()
    return user
