# src/petboard/api/v1/endpoints/moderation.py
"""Moderation endpoints for the Petboard API.

Every route here requires the admin role.
"""

from __future__ import annotations

from fastapi import APIRouter, Query, Response, status

from petboard.api.v1.dependencies import AdminDep, LedgerDep, ModerationDep
from petboard.schemas.interaction import ModeratedComment
from petboard.schemas.moderation import ContentStats, RejectRequest
from petboard.schemas.post import PostView

router = APIRouter(prefix="/moderation", tags=["moderation"])


@router.get("/pending", response_model=list[PostView])
async def get_pending_posts(workflow: ModerationDep, _admin: AdminDep) -> list[PostView]:
    """Return posts waiting for review, newest first."""
    return workflow.list_pending()


@router.get("/by-status", response_model=list[PostView])
async def get_posts_by_status(
    workflow: ModerationDep,
    _admin: AdminDep,
    post_status: str = Query(..., alias="status", description="pending, approved or rejected"),
) -> list[PostView]:
    """Return posts in one moderation status."""
    return workflow.list_by_status(post_status)


@router.put("/{post_id}/approve", response_model=PostView)
async def approve_post(post_id: int, workflow: ModerationDep, admin: AdminDep) -> PostView:
    """Approve a post, making it publicly visible."""
    return workflow.approve(post_id, admin.user_id)


@router.put("/{post_id}/reject", response_model=PostView)
async def reject_post(
    post_id: int,
    payload: RejectRequest,
    workflow: ModerationDep,
    admin: AdminDep,
) -> PostView:
    """Reject a post with a reason shown to its author."""
    return workflow.reject(post_id, admin.user_id, payload.reason)


@router.get("/stats", response_model=ContentStats)
async def get_content_stats(workflow: ModerationDep, _admin: AdminDep) -> ContentStats:
    """Return user, post, comment and like totals."""
    return workflow.stats()


@router.get("/comments", response_model=list[ModeratedComment])
async def get_all_comments(ledger: LedgerDep, _admin: AdminDep) -> list[ModeratedComment]:
    """Return every comment on the board, newest first."""
    return ledger.all_comments()


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(comment_id: int, ledger: LedgerDep, admin: AdminDep) -> Response:
    """Remove a comment."""
    ledger.delete_comment(comment_id, deleted_by=admin.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
