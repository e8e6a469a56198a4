"""Shared route dependencies."""

from fastapi import Depends

from agora.realtime.broadcaster import Broadcaster, get_broadcaster
from agora.services.forum_service import ForumService
from agora.storage import ForumStorage, get_storage


def get_forum_service(
    storage: ForumStorage = Depends(get_storage),
    broadcaster: Broadcaster = Depends(get_broadcaster),
) -> ForumService:
    return ForumService(storage, broadcaster)
