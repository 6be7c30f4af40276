# src/petboard/api/v1/endpoints/users.py
"""Public user pages: profile and authored posts."""

from __future__ import annotations

from fastapi import APIRouter

from petboard.api.v1.dependencies import FeedDep, LedgerDep, OptionalIdentityDep
from petboard.models.post import PostStatus
from petboard.schemas.interaction import UserProfile
from petboard.schemas.post import PostView
from petboard.services.moderation import visible_to

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{user_id}/profile", response_model=UserProfile)
async def get_user_profile(
    user_id: int,
    ledger: LedgerDep,
    identity: OptionalIdentityDep,
) -> UserProfile:
    """Return follow counts and whether the caller follows this user."""
    viewer_id = identity.user_id if identity is not None else None
    return ledger.profile(user_id, viewer_id)


@router.get("/{user_id}/posts", response_model=list[PostView])
async def get_user_posts(
    user_id: int,
    feed: FeedDep,
    ledger: LedgerDep,
    identity: OptionalIdentityDep,
) -> list[PostView]:
    """Return the approved posts of one author, newest first."""
    ledger.require_user(user_id)
    viewer_id = identity.user_id if identity is not None else None
    posts = feed.by_author(user_id, viewer_id, status=PostStatus.APPROVED)
    return [visible_to(view, identity) for view in posts]
