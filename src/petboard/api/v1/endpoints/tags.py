# src/petboard/api/v1/endpoints/tags.py
"""Tag endpoints for the Petboard API."""

from __future__ import annotations

from fastapi import APIRouter, Query

from petboard.api.v1.dependencies import TagsDep
from petboard.core.settings import settings
from petboard.schemas.tag import TopTag

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("/top", response_model=list[TopTag])
async def get_top_tags(
    registry: TagsDep,
    limit: int = Query(settings.top_tags_default_limit, ge=0),
) -> list[TopTag]:
    """Return the most used tags with their post counts."""
    return registry.top_tags(limit)
