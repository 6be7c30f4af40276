"""Caller identity and token decoding.

Tokens are minted by the authentication collaborator; this module only turns a
verified bearer token into an :class:`Identity`.
"""
from __future__ import annotations

from dataclasses import dataclass

from jose import JWTError, jwt

from petboard.core.settings import settings

ROLE_USER = "user"
ROLE_EDITOR = "editor"
ROLE_ADMIN = "admin"
KNOWN_ROLES = frozenset({ROLE_USER, ROLE_EDITOR, ROLE_ADMIN})


@dataclass(frozen=True)
class Identity:
    """Already-verified caller identity."""

    user_id: int
    role: str = ROLE_USER

    @property
    def is_admin(self) -> bool:
        """Return True when the caller holds the admin role."""
        return self.role == ROLE_ADMIN


def decode_identity(token: str) -> Identity:
    """Decode a bearer token into an identity.

    Args:
        token: Encoded JWT whose ``sub`` claim is the numeric user id.

    Returns:
        The caller identity carried by the token.

    Raises:
        ValueError: If the token is invalid or its claims are malformed.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as err:
        raise ValueError("Could not validate credentials") from err

    subject = payload.get("sub")
    if subject is None:
        raise ValueError("Could not validate credentials")
    try:
        user_id = int(subject)
    except (TypeError, ValueError) as err:
        raise ValueError("Could not validate credentials") from err

    role = payload.get("role") or ROLE_USER
    if role not in KNOWN_ROLES:
        raise ValueError("Unknown role")
    return Identity(user_id=user_id, role=role)
