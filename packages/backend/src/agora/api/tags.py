"""Tag routes."""

from fastapi import APIRouter, Depends, Query

from agora.api.deps import get_forum_service as _svc
from agora.schemas.forum import TagCount
from agora.services.forum_service import ForumService
from agora.storage.base import POPULAR_TAGS_LIMIT

router = APIRouter()


@router.get("/tags/popular", response_model=list[TagCount])
async def popular_tags(
    limit: int = Query(default=POPULAR_TAGS_LIMIT, ge=1),
    svc: ForumService = Depends(_svc),
):
    """Most used tags across all questions, with how many questions use each."""
    return await svc.popular_tags(limit)
