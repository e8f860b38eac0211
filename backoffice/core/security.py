"""
Back-Office Security
Bearer token verification and the resolved actor passed into stock operations
"""
from dataclasses import dataclass
from typing import Any, Dict

from jose import JWTError, jwt

from .config import Settings


class InvalidTokenError(Exception):
    """Raised when a bearer token cannot be verified"""
    pass


@dataclass(frozen=True)
class Actor:
    """Authenticated principal causing a stock movement"""
    id: int
    role: str
    username: str = ""


def decode_access_token(token: str, settings: Settings) -> Actor:
    """
    Verify a bearer token and resolve the actor it names

    Tokens are issued by the authentication service; this side only
    checks the signature and expiry and reads the identity claims.
    """
    try:
        payload: Dict[str, Any] = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
    except JWTError as e:
        raise InvalidTokenError("Invalid or expired token") from e

    user_id = payload.get("user_id", payload.get("sub"))
    try:
        actor_id = int(user_id)
    except (TypeError, ValueError) as e:
        raise InvalidTokenError("Token does not identify a user") from e

    return Actor(
        id=actor_id,
        role=str(payload.get("role", "")),
        username=str(payload.get("username", "")),
    )
