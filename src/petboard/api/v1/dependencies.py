# src/petboard/api/v1/dependencies.py
"""Shared API dependencies for authentication and service wiring."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from petboard.core.security import Identity, decode_identity
from petboard.db.session import get_db
from petboard.services import (
    FeedQueryEngine,
    InteractionLedger,
    ModerationWorkflow,
    PostStore,
    TagRegistry,
)

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()
optional_bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _identity_from(credentials: HTTPAuthorizationCredentials) -> Identity:
    try:
        return decode_identity(credentials.credentials)
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from err


def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
) -> Identity:
    """Return the caller identity carried by the bearer token.

    Raises:
        HTTPException: 401 if the token is missing or invalid.
    """
    return _identity_from(credentials)


def get_optional_identity(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(optional_bearer_scheme)
    ],
) -> Identity | None:
    """Return the caller identity when a token is supplied, otherwise ``None``.

    A token that is present but invalid is still rejected.
    """
    if credentials is None:
        return None
    return _identity_from(credentials)


def require_admin(
    identity: Annotated[Identity, Depends(get_current_identity)],
) -> Identity:
    """Allow only callers holding the admin role."""
    if not identity.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return identity


CurrentIdentityDep = Annotated[Identity, Depends(get_current_identity)]
OptionalIdentityDep = Annotated[Identity | None, Depends(get_optional_identity)]
AdminDep = Annotated[Identity, Depends(require_admin)]


def get_tag_registry(db: SessionDep) -> TagRegistry:
    return TagRegistry(db)


def get_feed(db: SessionDep) -> FeedQueryEngine:
    return FeedQueryEngine(db)


def get_post_store(db: SessionDep) -> PostStore:
    return PostStore(db)


def get_ledger(db: SessionDep) -> InteractionLedger:
    return InteractionLedger(db)


def get_moderation(db: SessionDep) -> ModerationWorkflow:
    return ModerationWorkflow(db)


TagsDep = Annotated[TagRegistry, Depends(get_tag_registry)]
FeedDep = Annotated[FeedQueryEngine, Depends(get_feed)]
PostStoreDep = Annotated[PostStore, Depends(get_post_store)]
LedgerDep = Annotated[InteractionLedger, Depends(get_ledger)]
ModerationDep = Annotated[ModerationWorkflow, Depends(get_moderation)]
