"""
Token codec and request authentication.

Tokens are HS256 JWTs carrying the ``{userId, name}`` identity. The same
codec authenticates REST calls (bearer header) and realtime connections.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.config import settings
from core.exceptions import AuthenticationError, InvalidToken


@dataclass(frozen=True)
class Identity:
    """Authenticated user identity attached to a request or connection."""

    user_id: int
    name: str


def sign_token(identity: Identity, expires_delta: Optional[timedelta] = None) -> str:
    """Sign an identity into a compact token."""
    now = datetime.now(timezone.utc)
    claims = {
        "userId": identity.user_id,
        "name": identity.name,
        "iat": now,
    }

    if expires_delta is None and settings.ACCESS_TOKEN_EXPIRE_MINUTES > 0:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    if expires_delta is not None:
        claims["exp"] = now + expires_delta

    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> Identity:
    """Verify a token and return the identity it asserts.

    Raises InvalidToken on a bad signature, malformed payload or expiry.
    """
    if not token or not isinstance(token, str):
        raise InvalidToken("Token missing")

    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise InvalidToken("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidToken("Invalid token") from exc

    user_id = claims.get("userId")
    name = claims.get("name")
    if not isinstance(user_id, int) or isinstance(user_id, bool) or not isinstance(name, str):
        raise InvalidToken("Token payload is incomplete")

    return Identity(user_id=user_id, name=name)


bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    """Resolve the caller identity from the Authorization header.

    No header is a 401; a header with a bad token is a 403.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authenticated")
    return verify_token(credentials.credentials)
