"""Read identity claims out of the bearer token issued at login.

The backend signs its tokens; the client cannot and does not verify them. It
only reads the payload to learn the username (``sub``) and the group names
(``groups[].authority``). The backend stays the authority on every request.
"""

import logging
from dataclasses import dataclass
from typing import Any

import jwt

logger = logging.getLogger("anticorruption_client.token")


@dataclass(frozen=True, slots=True)
class TokenIdentity:
    username: str
    groups: tuple[str, ...]


def decode_auth_token(token: str) -> dict[str, Any] | None:
    """Decode the payload segment of a bearer token without verification.

    Returns the payload dict, or None if the token is not a well-formed
    three-segment token with a JSON object payload.
    """
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as e:
        logger.warning(f"Could not decode auth token: {e}")
        return None


def identity_from_payload(payload: dict[str, Any]) -> TokenIdentity | None:
    """Pull username and group names out of a decoded payload."""
    username = payload.get("sub")
    if not isinstance(username, str) or not username:
        return None

    raw_groups = payload.get("groups") or []
    if not isinstance(raw_groups, list):
        return None

    groups = []
    for entry in raw_groups:
        if not isinstance(entry, dict) or not isinstance(entry.get("authority"), str):
            return None
        groups.append(entry["authority"])
    return TokenIdentity(username=username, groups=tuple(groups))


def read_identity(token: str) -> TokenIdentity | None:
    """Decode ``token`` and return its identity, or None if unreadable."""
    payload = decode_auth_token(token)
    if payload is None:
        return None
    return identity_from_payload(payload)
